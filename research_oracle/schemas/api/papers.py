from typing import List

from pydantic import BaseModel, Field

from research_oracle.schemas.paper import PaperSummary


class PaperListResponse(BaseModel):
    """A page of papers matching the browse filters."""

    papers: List[PaperSummary]
    total: int = Field(..., description="Number of matches before pagination")
    limit: int
    offset: int
