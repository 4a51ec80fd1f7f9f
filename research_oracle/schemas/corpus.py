"""Rows returned by the corpus stored procedures."""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CorpusRow(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class PaperHit(CorpusRow):
    """A paper returned by `match_papers` or `random_exploration`."""

    id: str
    title: str
    pub_year: Optional[int] = None
    summary: Optional[str] = None
    findings: Optional[str] = None
    similarity: Optional[float] = None


class ChunkHit(CorpusRow):
    """A text chunk returned by `match_chunks`."""

    paper_id: str
    paper_title: str
    pub_year: Optional[int] = None
    chunk_content: str = Field(validation_alias=AliasChoices("chunk_content", "content"))
    similarity: Optional[float] = None


class TopicStat(CorpusRow):
    entity: str
    paper_count: int


class TrendPoint(CorpusRow):
    year: int
    paper_count: int


class DecadeCount(CorpusRow):
    decade: int
    paper_count: int = Field(validation_alias=AliasChoices("paper_count", "count"))


class YearCount(CorpusRow):
    year: int
    paper_count: int


class PaperConnection(CorpusRow):
    """Two papers sharing a topic label, from `discover_hidden_connections`."""

    shared_entity: str
    paper_a_id: str
    paper_a_title: Optional[str] = None
    paper_a_year: Optional[int] = None
    paper_b_id: str
    paper_b_title: Optional[str] = None
    paper_b_year: Optional[int] = None
