from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PaperSearchFilters(BaseModel):
    """Filters for browsing the papers table."""

    query: Optional[str] = Field(None, description="Matched against title, summary and topic labels")
    decade: Optional[int] = Field(None, description="Decade start year, e.g. 1990")
    entity: Optional[str] = Field(None, description="Exact topic label")


class PaperSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True, coerce_numbers_to_str=True)

    id: str
    title: str
    pub_year: Optional[int] = None
    summary: Optional[str] = None
    entities: List[str] = Field(default_factory=list)

    @field_validator("entities", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return value or []


class PaperDetail(PaperSummary):
    filename: Optional[str] = None
    findings: Optional[str] = None
    hypothesis: Optional[str] = None
    pdf_url: Optional[str] = Field(None, description="Link to the original PDF in object storage")
