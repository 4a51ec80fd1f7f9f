"""
Tests for keyword routing of chat messages to tools.
"""

import pytest

from research_oracle.schemas.tools import (
    AnalyzeTrendsCall,
    DatabaseStatsCall,
    FindConnectionsCall,
    FindGapsCall,
    ListTopicsCall,
    RandomExploreCall,
    SearchContentCall,
    SearchPapersCall,
)
from research_oracle.services.chat.router import (
    FULL_TEXT_SEARCH_HEADING,
    SEMANTIC_SEARCH_HEADING,
    IntentRouter,
    IntentRule,
    extract_trend_topic,
)


@pytest.fixture
def router():
    return IntentRouter()


def calls(plan):
    return [planned.call for planned in plan]


class TestRules:

    def test_overview(self, router):
        assert calls(router.route("How many papers are there?")) == [DatabaseStatsCall()]

    def test_topics(self, router):
        assert calls(router.route("List every topic")) == [ListTopicsCall(limit=10)]

    def test_trend_topic_extracted(self, router):
        plan = router.route("Show the trend for CRISPR please")
        assert calls(plan) == [AnalyzeTrendsCall(topic="crispr")]

    def test_trend_defaults_to_dna(self, router):
        assert calls(router.route("What changed over time?")) == [AnalyzeTrendsCall(topic="DNA")]

    def test_gaps(self, router):
        assert calls(router.route("Anything understudied?")) == [FindGapsCall()]

    def test_connections(self, router):
        assert calls(router.route("Show hidden links"))[0] == FindConnectionsCall()

    def test_discovery(self, router):
        assert calls(router.route("Surprise me")) == [RandomExploreCall(count=5)]

    def test_multiple_rules_keep_rule_order(self, router):
        plan = calls(router.route("Give me an overview of the topics and any gaps"))
        assert plan == [DatabaseStatsCall(), ListTopicsCall(limit=10), FindGapsCall()]


class TestSearchFallback:

    def test_no_rule_matched_searches(self, router):
        plan = router.route("prion misfolding in yeast")

        assert calls(plan) == [
            SearchPapersCall(query="prion misfolding in yeast", limit=5),
            SearchContentCall(query="prion misfolding in yeast", limit=3),
        ]
        assert [p.heading for p in plan] == [SEMANTIC_SEARCH_HEADING, FULL_TEXT_SEARCH_HEADING]

    def test_search_keyword_adds_search_after_rules(self, router):
        plan = calls(router.route("Find hidden connections"))

        assert plan[0] == FindConnectionsCall()
        assert isinstance(plan[1], SearchPapersCall)
        assert isinstance(plan[2], SearchContentCall)

    def test_rule_match_without_search_keyword_skips_search(self, router):
        plan = calls(router.route("surprise me"))
        assert not any(isinstance(c, (SearchPapersCall, SearchContentCall)) for c in plan)

    def test_search_query_keeps_original_casing(self, router):
        plan = calls(router.route("Papers about Alzheimer"))
        assert SearchPapersCall(query="Papers about Alzheimer", limit=5) in plan

    def test_fallback_runs_with_custom_rules(self):
        router = IntentRouter(rules=(IntentRule("gaps", ("gap",), lambda lowered: FindGapsCall()),))

        assert calls(router.route("how many papers?")) == [
            SearchPapersCall(query="how many papers?", limit=5),
            SearchContentCall(query="how many papers?", limit=3),
        ]


class TestExtractTrendTopic:

    @pytest.mark.parametrize(
        "message,expected",
        [
            ("trend for crispr", "crispr"),
            ("evolution of prions", "prions"),
            ("research on dna repair", "dna"),
            ("trend crispr", "crispr"),
            ("nothing relevant", "DNA"),
        ],
    )
    def test_extract(self, message, expected):
        assert extract_trend_topic(message) == expected
