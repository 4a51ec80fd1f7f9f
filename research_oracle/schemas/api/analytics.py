from typing import List, Optional

from pydantic import BaseModel, Field

from research_oracle.schemas.corpus import DecadeCount, TopicStat, YearCount


class CorpusOverview(BaseModel):
    """Headline numbers for the dashboard."""

    total_papers: int
    total_chunks: int
    total_topics: int
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    average_per_year: int = Field(0, description="Papers per distinct publication year")


class YearlyCounts(BaseModel):
    years: List[YearCount]


class DecadeCounts(BaseModel):
    decades: List[DecadeCount]


class TopicList(BaseModel):
    topics: List[TopicStat]
    total: int = Field(..., description="Number of distinct topic labels")
