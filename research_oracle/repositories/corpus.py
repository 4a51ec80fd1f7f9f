import logging
from typing import Any, Dict, List, Sequence, Type, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from research_oracle.exceptions import RepositoryException
from research_oracle.schemas.corpus import (
    ChunkHit,
    CorpusRow,
    DecadeCount,
    PaperConnection,
    PaperHit,
    TopicStat,
    TrendPoint,
)

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT", bound=CorpusRow)


def to_vector_literal(embedding: Sequence[float]) -> str:
    """Render an embedding in pgvector's text input format."""
    return "[" + ",".join(repr(float(value)) for value in embedding) + "]"


class CorpusRepository:
    """Calls the corpus stored procedures (similarity search and statistics)."""

    def __init__(self, session: Session):
        self.session = session

    def _call(self, sql: str, params: Dict[str, Any], row_type: Type[RowT]) -> List[RowT]:
        try:
            result = self.session.execute(text(sql), params)
            rows = result.mappings().all()
        except SQLAlchemyError as e:
            # Leave the session usable for the next call in the same request
            self.session.rollback()
            logger.error(f"Corpus query failed: {e}")
            raise RepositoryException(str(e.orig) if getattr(e, "orig", None) else str(e)) from e

        return [row_type.model_validate(dict(row)) for row in rows]

    def match_papers(
        self, embedding: Sequence[float], match_threshold: float, match_count: int
    ) -> List[PaperHit]:
        return self._call(
            "SELECT * FROM match_papers("
            "CAST(:query_embedding AS vector), :match_threshold, :match_count)",
            {
                "query_embedding": to_vector_literal(embedding),
                "match_threshold": match_threshold,
                "match_count": match_count,
            },
            PaperHit,
        )

    def match_chunks(
        self, embedding: Sequence[float], match_threshold: float, match_count: int
    ) -> List[ChunkHit]:
        return self._call(
            "SELECT * FROM match_chunks("
            "CAST(:query_embedding AS vector), :match_threshold, :match_count)",
            {
                "query_embedding": to_vector_literal(embedding),
                "match_threshold": match_threshold,
                "match_count": match_count,
            },
            ChunkHit,
        )

    def get_entity_stats(self) -> List[TopicStat]:
        """All topic labels ranked by paper count, most popular first."""
        return self._call("SELECT * FROM get_entity_stats()", {}, TopicStat)

    def get_papers_by_decade(self) -> List[DecadeCount]:
        return self._call("SELECT * FROM get_papers_by_decade()", {}, DecadeCount)

    def analyze_topic_trend(self, topic_name: str) -> List[TrendPoint]:
        return self._call(
            "SELECT * FROM analyze_topic_trend(:topic_name)",
            {"topic_name": topic_name},
            TrendPoint,
        )

    def find_research_gaps(self, min_papers: int, max_papers: int) -> List[TopicStat]:
        return self._call(
            "SELECT * FROM find_research_gaps(:min_papers, :max_papers)",
            {"min_papers": min_papers, "max_papers": max_papers},
            TopicStat,
        )

    def random_exploration(self, sample_count: int) -> List[PaperHit]:
        return self._call(
            "SELECT * FROM random_exploration(:sample_count)",
            {"sample_count": sample_count},
            PaperHit,
        )

    def discover_hidden_connections(self, sample_size: int) -> List[PaperConnection]:
        return self._call(
            "SELECT * FROM discover_hidden_connections(:sample_size)",
            {"sample_size": sample_size},
            PaperConnection,
        )
