import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Path, Query, status

from research_oracle.dependencies import PaperRepoDep, SettingsDep
from research_oracle.models.paper import Paper
from research_oracle.schemas.api.papers import PaperListResponse
from research_oracle.schemas.paper import PaperDetail, PaperSearchFilters, PaperSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/papers", tags=["papers"])


def pdf_url_for(paper: Paper, bucket_url: Optional[str]) -> Optional[str]:
    if not bucket_url or not paper.filename:
        return None
    return f"{bucket_url.rstrip('/')}/{paper.filename}"


@router.get("", response_model=PaperListResponse)
def list_papers(
    papers: PaperRepoDep,
    q: Optional[str] = Query(None, description="Search title, summary and topics"),
    decade: Optional[int] = Query(None, ge=1000, le=2990, description="Decade start year, e.g. 1990"),
    entity: Optional[str] = Query(None, description="Exact topic label"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    """Browse the paper database."""
    filters = PaperSearchFilters(query=q or None, decade=decade, entity=entity or None)
    rows, total = papers.search(filters, limit=limit, offset=offset)
    return PaperListResponse(
        papers=[PaperSummary.model_validate(row) for row in rows],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/recent", response_model=List[PaperSummary])
def recent_papers(papers: PaperRepoDep, limit: int = Query(4, ge=1, le=20)):
    """Most recently added papers."""
    return [PaperSummary.model_validate(row) for row in papers.get_recent(limit)]


@router.get("/{paper_id}", response_model=PaperDetail)
def get_paper(
    papers: PaperRepoDep,
    settings: SettingsDep,
    paper_id: str = Path(..., description="Paper identifier as used in paper: citations"),
):
    paper = papers.get_by_id(paper_id)
    if paper is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Paper {paper_id} not found",
        )

    detail = PaperDetail.model_validate(paper)
    detail.pdf_url = pdf_url_for(paper, settings.pdf_bucket_url)
    return detail
