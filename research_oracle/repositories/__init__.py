from research_oracle.repositories.corpus import CorpusRepository
from research_oracle.repositories.paper import PaperRepository

__all__ = ["CorpusRepository", "PaperRepository"]
