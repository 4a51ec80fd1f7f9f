import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from research_oracle.schemas.tools import (
    AnalyzeTrendsCall,
    DatabaseStatsCall,
    FindConnectionsCall,
    FindGapsCall,
    ListTopicsCall,
    RandomExploreCall,
    SearchContentCall,
    SearchPapersCall,
    ToolCall,
)

logger = logging.getLogger(__name__)

DEFAULT_TREND_TOPIC = "DNA"
SEARCH_KEYWORDS = ("search", "find", "papers about", "research on")
SEMANTIC_SEARCH_HEADING = "SEMANTIC SEARCH RESULTS:"
FULL_TEXT_SEARCH_HEADING = "FULL TEXT SEARCH:"

_TREND_TOPIC = re.compile(r"(?:trend|evolution|evolve|research)\s+(?:for|of|on|in)?\s*(\w+)", re.IGNORECASE)


@dataclass(frozen=True)
class PlannedCall:
    """A tool call chosen for a message, with an optional context heading."""

    call: ToolCall
    heading: Optional[str] = None


@dataclass(frozen=True)
class IntentRule:
    name: str
    keywords: Tuple[str, ...]
    build: Callable[[str], ToolCall]

    def matches(self, lowered: str) -> bool:
        return any(keyword in lowered for keyword in self.keywords)


def extract_trend_topic(lowered: str) -> str:
    """Pull the word after "trend/evolution/research ... for/of/on/in"."""
    match = _TREND_TOPIC.search(lowered)
    return match.group(1) if match else DEFAULT_TREND_TOPIC


DEFAULT_RULES: Tuple[IntentRule, ...] = (
    IntentRule(
        "overview",
        ("overview", "database", "how many papers"),
        lambda lowered: DatabaseStatsCall(),
    ),
    IntentRule(
        "topics",
        ("topic", "research area", "what are"),
        lambda lowered: ListTopicsCall(limit=10),
    ),
    IntentRule(
        "trends",
        ("trend", "evolve", "over time", "over the years"),
        lambda lowered: AnalyzeTrendsCall(topic=extract_trend_topic(lowered)),
    ),
    IntentRule(
        "gaps",
        ("gap", "understudied", "missing", "unexplored"),
        lambda lowered: FindGapsCall(),
    ),
    IntentRule(
        "connections",
        ("connection", "connect", "link", "hidden"),
        lambda lowered: FindConnectionsCall(),
    ),
    IntentRule(
        "discovery",
        ("surprise", "insight", "interesting", "random", "explore"),
        lambda lowered: RandomExploreCall(count=5),
    ),
)


class IntentRouter:
    """Maps a user message to the retrieval tools worth running for it.

    Rules are evaluated independently and all matches are kept, in rule
    order. The search fallback is a separate step that always runs: it adds
    a semantic paper search and a chunk search when no rule matched or the
    message asks for a search explicitly.
    """

    def __init__(self, rules: Tuple[IntentRule, ...] = DEFAULT_RULES):
        self.rules = rules

    def route(self, message: str) -> List[PlannedCall]:
        lowered = message.lower()
        plan: List[PlannedCall] = []

        for rule in self.rules:
            if rule.matches(lowered):
                planned = PlannedCall(rule.build(lowered))
                if planned not in plan:
                    plan.append(planned)

        if self.needs_search(lowered, matched_any=bool(plan)):
            plan.append(PlannedCall(SearchPapersCall(query=message, limit=5), SEMANTIC_SEARCH_HEADING))
            plan.append(PlannedCall(SearchContentCall(query=message, limit=3), FULL_TEXT_SEARCH_HEADING))

        logger.info(f"Routed message to tools: {[p.call.name for p in plan]}")
        return plan

    @staticmethod
    def needs_search(lowered: str, matched_any: bool) -> bool:
        return not matched_any or any(keyword in lowered for keyword in SEARCH_KEYWORDS)
