"""
Tests for the retrieval tools behind the chat context.
"""

import pytest

from research_oracle.exceptions import RepositoryException
from research_oracle.schemas.corpus import DecadeCount, PaperConnection, PaperHit, TopicStat, TrendPoint
from research_oracle.schemas.tools import (
    AnalyzeTrendsCall,
    CountPapersCall,
    DatabaseStatsCall,
    FindConnectionsCall,
    FindGapsCall,
    ListTopicsCall,
    RandomExploreCall,
    SearchContentCall,
    SearchPapersCall,
    parse_tool_call,
)


class TestSearchTools:

    @pytest.mark.asyncio
    async def test_search_papers_formats_hits_with_links(self, executor, corpus_repo, paper_hits):
        corpus_repo.match_papers.return_value = paper_hits

        output = await executor.execute(SearchPapersCall(query="gene editing", limit=5))

        assert '• **"CRISPR off-target effects"** (2018) [📄 Open](paper:42)' in output
        assert "  Measures off-target cutting." in output
        # missing year and summary fall back
        assert '**"Early gene editing"** (?)' in output
        assert "  Zinc fingers work." in output

    @pytest.mark.asyncio
    async def test_search_papers_uses_threshold_and_limit(self, executor, corpus_repo, embeddings):
        await executor.execute(SearchPapersCall(topic="prions", limit=3))

        embeddings.embed_query.assert_awaited_once_with("prions")
        args = corpus_repo.match_papers.call_args.args
        assert args[1] == 0.1
        assert args[2] == 3

    @pytest.mark.asyncio
    async def test_search_papers_no_results(self, executor):
        output = await executor.execute(SearchPapersCall(query="nothing"))
        assert output == "No papers found matching this query."

    @pytest.mark.asyncio
    async def test_search_papers_requires_text(self, executor, embeddings):
        output = await executor.execute(SearchPapersCall())
        assert output.startswith("Error:")
        embeddings.embed_query.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search_content_truncates_excerpt(self, executor, corpus_repo, chunk_hits):
        corpus_repo.match_chunks.return_value = chunk_hits

        output = await executor.execute(SearchContentCall(query="cutting", limit=3))

        assert output.startswith('From **"CRISPR off-target effects"** (2018) [📄 Open](paper:42):')
        assert f'> "{"x" * 200}..."' in output
        assert "x" * 201 not in output

    @pytest.mark.asyncio
    async def test_search_content_no_results(self, executor):
        output = await executor.execute(SearchContentCall(query="nothing"))
        assert output == "No matching content found in paper texts."


class TestCountPapers:

    @pytest.mark.asyncio
    async def test_single_year(self, executor, paper_repo):
        paper_repo.count.return_value = 17

        output = await executor.execute(CountPapersCall(year=1995))

        assert output == "Papers from 1995: 17"
        paper_repo.count.assert_called_once_with(year=1995, year_min=None, year_max=None, entity=None)

    @pytest.mark.asyncio
    async def test_open_range_and_topic(self, executor, paper_repo):
        paper_repo.count.return_value = 3

        output = await executor.execute(CountPapersCall(year_min=2000, topic="CRISPR"))

        assert output == 'Papers from 2000 to present about "CRISPR": 3'

    @pytest.mark.asyncio
    async def test_total(self, executor, paper_repo):
        paper_repo.count.return_value = 1200
        assert await executor.execute(CountPapersCall()) == "Total papers in database: 1200"


class TestStatisticsTools:

    @pytest.mark.asyncio
    async def test_list_topics_ranks_and_limits(self, executor):
        output = await executor.execute(ListTopicsCall(limit=2))

        assert output == "Top 2 research topics:\n1. DNA (120 papers)\n2. CRISPR (45 papers)"

    @pytest.mark.asyncio
    async def test_trends(self, executor, corpus_repo):
        corpus_repo.analyze_topic_trend.return_value = [
            TrendPoint(year=2001, paper_count=2),
            TrendPoint(year=2002, paper_count=5),
        ]

        output = await executor.execute(AnalyzeTrendsCall(topic="CRISPR"))

        corpus_repo.analyze_topic_trend.assert_called_once_with("CRISPR")
        assert output == 'Research trend for "CRISPR":\n\n2001: 2 papers\n2002: 5 papers'

    @pytest.mark.asyncio
    async def test_trends_default_topic_and_empty(self, executor, corpus_repo):
        corpus_repo.analyze_topic_trend.return_value = []

        output = await executor.execute(AnalyzeTrendsCall())

        assert output == 'No trend data found for "DNA"'

    @pytest.mark.asyncio
    async def test_gaps_empty(self, executor, corpus_repo):
        corpus_repo.find_research_gaps.return_value = []

        output = await executor.execute(FindGapsCall())

        corpus_repo.find_research_gaps.assert_called_once_with(1, 5)
        assert output == "No research gaps found."

    @pytest.mark.asyncio
    async def test_gaps_caps_report(self, executor, corpus_repo):
        corpus_repo.find_research_gaps.return_value = [
            TopicStat(entity=f"topic-{i}", paper_count=1) for i in range(15)
        ]

        output = await executor.execute(FindGapsCall())

        assert output.startswith("Understudied topics:\n\n1. \"topic-0\" - only 1 paper(s)")
        assert "10. \"topic-9\"" in output
        assert "topic-10" not in output

    @pytest.mark.asyncio
    async def test_random_explore(self, executor, corpus_repo):
        corpus_repo.random_exploration.return_value = [
            PaperHit(id="9", title="Prion folding", pub_year=1999, summary="s" * 300),
        ]

        output = await executor.execute(RandomExploreCall(count=1))

        corpus_repo.random_exploration.assert_called_once_with(1)
        assert output.startswith('Random papers:\n\n• **"Prion folding"** (1999) [📄 Open](paper:9)')
        assert f"  {'s' * 150}..." in output

    @pytest.mark.asyncio
    async def test_random_explore_empty(self, executor, corpus_repo):
        corpus_repo.random_exploration.return_value = []
        assert await executor.execute(RandomExploreCall()) == "No papers available."

    @pytest.mark.asyncio
    async def test_connections(self, executor, corpus_repo):
        corpus_repo.discover_hidden_connections.return_value = [
            PaperConnection(
                shared_entity="DNA",
                paper_a_id="1", paper_a_title="A" * 80, paper_a_year=1990,
                paper_b_id="2", paper_b_title="Short", paper_b_year=None,
            )
        ]

        output = await executor.execute(FindConnectionsCall())

        corpus_repo.discover_hidden_connections.assert_called_once_with(50)
        assert output.startswith("**Connections via shared topics:**\n\n1. Topic: **DNA**")
        assert f"[📄 {'A' * 50}...](paper:1) (1990)" in output
        assert "[📄 Short...](paper:2) (?)" in output

    @pytest.mark.asyncio
    async def test_connections_empty(self, executor, corpus_repo):
        corpus_repo.discover_hidden_connections.return_value = []
        output = await executor.execute(FindConnectionsCall())
        assert output == "No hidden connections found. Try again for different results."

    @pytest.mark.asyncio
    async def test_database_stats(self, executor, corpus_repo):
        corpus_repo.get_papers_by_decade.return_value = [
            DecadeCount(decade=1990, count=300),
            DecadeCount(decade=2000, count=900),
        ]

        output = await executor.execute(DatabaseStatsCall())

        assert output.startswith("## DATABASE OVERVIEW")
        assert "**Total Papers:** 1200 research papers" in output
        assert "**Text Chunks:** 48000 searchable text segments" in output
        assert "**Publication Years:** 1965 to 2024" in output
        assert "**Papers by Decade:** 1990s: 300, 2000s: 900" in output
        assert "1. DNA (120 papers)" in output


class TestErrorHandling:

    @pytest.mark.asyncio
    async def test_repository_failure_becomes_text(self, executor, corpus_repo):
        corpus_repo.get_entity_stats.side_effect = RepositoryException("function get_entity_stats() does not exist")

        output = await executor.execute(ListTopicsCall())

        assert output == "Error: function get_entity_stats() does not exist"

    @pytest.mark.asyncio
    async def test_embedding_failure_becomes_text(self, executor, embeddings):
        embeddings.embed_query.side_effect = RuntimeError("quota exceeded")

        output = await executor.execute(SearchPapersCall(query="x"))

        assert output == "Error: quota exceeded"

    @pytest.mark.asyncio
    async def test_unknown_tool(self, executor):
        output = await executor.execute_named("summon_demons", {})

        assert output.startswith("Unknown tool: summon_demons. Available: search_papers, search_content")

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, executor):
        output = await executor.execute_named("list_topics", {"limit": "lots"})
        assert output.startswith("Error: invalid arguments for list_topics")

    @pytest.mark.asyncio
    async def test_named_call(self, executor, paper_repo):
        paper_repo.count.return_value = 5
        output = await executor.execute_named("count_papers", {"year": 2001})
        assert output == "Papers from 2001: 5"


class TestParseToolCall:

    def test_alias_resolves(self):
        call = parse_tool_call("get_topics", {"limit": 3})
        assert isinstance(call, ListTopicsCall)
        assert call.limit == 3

    def test_unknown_returns_none(self):
        assert parse_tool_call("nope") is None

    def test_extra_args_ignored(self):
        call = parse_tool_call("find_gaps", {"unused": True})
        assert isinstance(call, FindGapsCall)
