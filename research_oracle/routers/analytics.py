import logging
from typing import List

from fastapi import APIRouter, Query

from research_oracle.dependencies import CorpusRepoDep, PaperRepoDep
from research_oracle.schemas.api.analytics import CorpusOverview, DecadeCounts, TopicList, YearlyCounts
from research_oracle.schemas.paper import PaperSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/overview", response_model=CorpusOverview)
def overview(papers: PaperRepoDep, corpus: CorpusRepoDep):
    """Headline corpus numbers for the dashboard."""
    total_papers = papers.count()
    years = papers.count_by_year()
    min_year, max_year = papers.year_bounds()

    return CorpusOverview(
        total_papers=total_papers,
        total_chunks=papers.count_chunks(),
        total_topics=len(corpus.get_entity_stats()),
        min_year=min_year,
        max_year=max_year,
        average_per_year=round(total_papers / len(years)) if years else 0,
    )


@router.get("/years", response_model=YearlyCounts)
def papers_per_year(papers: PaperRepoDep):
    return YearlyCounts(years=papers.count_by_year())


@router.get("/decades", response_model=DecadeCounts)
def papers_per_decade(corpus: CorpusRepoDep):
    return DecadeCounts(decades=corpus.get_papers_by_decade())


@router.get("/topics", response_model=TopicList)
def topics(corpus: CorpusRepoDep, limit: int = Query(20, ge=1, le=200)):
    """Topic labels ranked by paper count."""
    stats = corpus.get_entity_stats()
    return TopicList(topics=stats[:limit], total=len(stats))


@router.get("/topics/{entity}/papers", response_model=List[PaperSummary])
def papers_for_topic(entity: str, papers: PaperRepoDep, limit: int = Query(10, ge=1, le=50)):
    return [PaperSummary.model_validate(row) for row in papers.get_by_entity(entity, limit=limit)]
