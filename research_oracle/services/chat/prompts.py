import logging
from pathlib import Path

logger = logging.getLogger(__name__)

FALLBACK_SYSTEM_PROMPT = (
    "You are a Research Oracle for {paper_count} scientific papers ({chunk_count} text segments).\n\n"
    "## DATA PROVIDED:\n{context}\n\n"
    "Answer in short bullet points. Cite papers as [📄 Title](paper:ID) using IDs from the data. "
    'If the data is empty, say: "No papers on [topic] in this database." Stop there.'
)


class OraclePromptBuilder:
    """Builds the single system instruction sent ahead of the conversation."""

    def __init__(self):
        """Initialize the prompt builder."""
        self.prompts_dir = Path(__file__).parent / "prompts"
        self.system_template = self._load_system_template()

    def _load_system_template(self) -> str:
        """Load the system prompt template from the text file.

        Returns:
            Template with {paper_count}, {chunk_count} and {context} fields
        """
        prompt_file = self.prompts_dir / "oracle_system.txt"
        if not prompt_file.exists():
            logger.warning(f"System prompt template missing at {prompt_file}, using fallback")
            return FALLBACK_SYSTEM_PROMPT
        return prompt_file.read_text(encoding="utf-8").strip()

    def create_system_prompt(self, context: str, paper_count: int, chunk_count: int) -> str:
        """Fill the template with corpus counters and the grounding context.

        Args:
            context: Assembled tool outputs, inserted verbatim
            paper_count: Number of papers in the corpus
            chunk_count: Number of text chunks in the corpus

        Returns:
            System instruction string
        """
        return self.system_template.format(
            paper_count=paper_count,
            chunk_count=chunk_count,
            context=context,
        )
