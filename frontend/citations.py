"""Paper citations in assistant replies.

The model cites papers as ``[📄 Title](paper:ID)``. Streamlit's markdown has
no handler for the ``paper:`` scheme, so citations are rewritten into an
inline marker ``{{paper:ID|Label}}`` wrapped in backticks, which the chat page
renders as a button that opens the paper.
"""

import re
from dataclasses import dataclass
from typing import Iterator, List, Union

DEFAULT_LABEL = "View Paper"

_EMOJI_LINK = re.compile(r"\[📄\s*([^\]]+)\]\(paper:([^)\s]+)\)")
_TEXT_LINK = re.compile(r"\[([^\]]+)\]\(paper:([^)\s]+)\)")
_BARE_LINK = re.compile(r"\(paper:([^)\s]+)\)")
_MARKER = re.compile(r"`\{\{paper:([^|`}]+)\|([^`}]*)\}\}`")


def _clean_label(label: str) -> str:
    label = label.strip().replace("|", "/")
    return re.sub(r"[`{}]", "", label) or DEFAULT_LABEL


def make_marker(paper_id: str, label: str = DEFAULT_LABEL) -> str:
    return f"`{{{{paper:{paper_id}|{_clean_label(label)}}}}}`"


def rewrite_citations(text: str) -> str:
    """Rewrite every ``paper:`` link into a citation marker.

    Emoji links go first, then other labelled links, then bare
    ``(paper:ID)`` references. Existing markers are left alone.
    """
    text = _EMOJI_LINK.sub(lambda m: make_marker(m.group(2), m.group(1)), text)
    text = _TEXT_LINK.sub(lambda m: make_marker(m.group(2), m.group(1)), text)
    return _BARE_LINK.sub(lambda m: make_marker(m.group(1)), text)


@dataclass(frozen=True)
class Citation:
    paper_id: str
    label: str


Segment = Union[str, Citation]


def split_citations(text: str) -> Iterator[Segment]:
    """Yield markdown strings and citations in reading order."""
    text = rewrite_citations(text)
    position = 0
    for match in _MARKER.finditer(text):
        if match.start() > position:
            yield text[position:match.start()]
        yield Citation(paper_id=match.group(1), label=match.group(2))
        position = match.end()
    if position < len(text):
        yield text[position:]


def extract_citations(text: str) -> List[Citation]:
    """Distinct citations in first-seen order."""
    seen = {}
    for segment in split_citations(text):
        if isinstance(segment, Citation) and segment.paper_id not in seen:
            seen[segment.paper_id] = segment
    return list(seen.values())


def to_display_markdown(text: str) -> str:
    """Markdown with citations shown as bold labels, for text still streaming in."""
    parts = []
    for segment in split_citations(text):
        if isinstance(segment, Citation):
            parts.append(f"**📄 {segment.label}**")
        else:
            parts.append(segment)
    return "".join(parts)
