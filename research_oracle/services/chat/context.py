from typing import Iterable, List, Optional, Tuple


class ContextAssembler:
    """Joins tool outputs into one grounding block, in invocation order."""

    separator = "\n\n"

    def assemble(self, sections: Iterable[Tuple[Optional[str], str]]) -> str:
        parts: List[str] = []
        for heading, output in sections:
            parts.append(f"{heading}\n{output}" if heading else output)
        return self.separator.join(parts)
