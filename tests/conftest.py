"""
Pytest configuration and fixtures for Research Oracle tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from research_oracle.repositories.corpus import CorpusRepository
from research_oracle.repositories.paper import PaperRepository
from research_oracle.schemas.corpus import ChunkHit, PaperHit, TopicStat
from research_oracle.services.chat.tools import ToolExecutor
from research_oracle.services.embeddings.openai_client import OpenAIEmbeddingsClient


# ============================================
# Sample corpus rows
# ============================================

@pytest.fixture
def paper_hits():
    return [
        PaperHit(id="42", title="CRISPR off-target effects", pub_year=2018,
                 summary="Measures off-target cutting.", similarity=0.83),
        PaperHit(id="7", title="Early gene editing", pub_year=None,
                 summary=None, findings="Zinc fingers work.", similarity=0.41),
    ]


@pytest.fixture
def chunk_hits():
    return [
        ChunkHit(paper_id="42", paper_title="CRISPR off-target effects", pub_year=2018,
                 content="x" * 500, similarity=0.7),
    ]


@pytest.fixture
def topic_stats():
    return [
        TopicStat(entity="DNA", paper_count=120),
        TopicStat(entity="CRISPR", paper_count=45),
        TopicStat(entity="Prions", paper_count=2),
    ]


# ============================================
# Collaborator mocks
# ============================================

@pytest.fixture
def paper_repo():
    repo = MagicMock(spec=PaperRepository)
    repo.count.return_value = 1200
    repo.count_chunks.return_value = 48000
    repo.year_bounds.return_value = (1965, 2024)
    return repo


@pytest.fixture
def corpus_repo(topic_stats):
    repo = MagicMock(spec=CorpusRepository)
    repo.get_entity_stats.return_value = topic_stats
    repo.match_papers.return_value = []
    repo.match_chunks.return_value = []
    return repo


@pytest.fixture
def embeddings():
    client = MagicMock(spec=OpenAIEmbeddingsClient)
    client.embed_query = AsyncMock(return_value=[0.01] * 1536)
    return client


@pytest.fixture
def executor(paper_repo, corpus_repo, embeddings):
    return ToolExecutor(
        papers=paper_repo,
        corpus=corpus_repo,
        embeddings=embeddings,
        match_threshold=0.1,
    )
