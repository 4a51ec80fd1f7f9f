"""Typed tool calls the chat router can plan and the executor can run."""

from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _ToolCall(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class SearchPapersCall(_ToolCall):
    name: Literal["search_papers"] = "search_papers"
    query: Optional[str] = None
    topic: Optional[str] = None
    limit: int = Field(5, ge=1, le=50)

    @property
    def text(self) -> str:
        return self.query or self.topic or ""


class SearchContentCall(_ToolCall):
    name: Literal["search_content"] = "search_content"
    query: Optional[str] = None
    limit: int = Field(5, ge=1, le=50)


class CountPapersCall(_ToolCall):
    name: Literal["count_papers"] = "count_papers"
    year: Optional[int] = None
    year_min: Optional[int] = None
    year_max: Optional[int] = None
    entity: Optional[str] = None
    topic: Optional[str] = None

    @property
    def label(self) -> Optional[str]:
        return self.entity or self.topic


class ListTopicsCall(_ToolCall):
    name: Literal["list_topics"] = "list_topics"
    limit: int = Field(10, ge=1, le=100)


class AnalyzeTrendsCall(_ToolCall):
    name: Literal["analyze_trends"] = "analyze_trends"
    topic: Optional[str] = None
    entity: Optional[str] = None

    @property
    def label(self) -> str:
        return self.topic or self.entity or "DNA"


class FindGapsCall(_ToolCall):
    name: Literal["find_gaps"] = "find_gaps"


class RandomExploreCall(_ToolCall):
    name: Literal["random_explore"] = "random_explore"
    count: int = Field(5, ge=1, le=50)


class FindConnectionsCall(_ToolCall):
    name: Literal["find_connections"] = "find_connections"


class DatabaseStatsCall(_ToolCall):
    name: Literal["database_stats"] = "database_stats"


ToolCall = Annotated[
    Union[
        SearchPapersCall,
        SearchContentCall,
        CountPapersCall,
        ListTopicsCall,
        AnalyzeTrendsCall,
        FindGapsCall,
        RandomExploreCall,
        FindConnectionsCall,
        DatabaseStatsCall,
    ],
    Field(discriminator="name"),
]

TOOL_NAMES = (
    "search_papers",
    "search_content",
    "count_papers",
    "list_topics",
    "analyze_trends",
    "find_gaps",
    "random_explore",
    "find_connections",
    "database_stats",
)

# Older names still accepted from callers
TOOL_ALIASES = {
    "search_paper_content": "search_content",
    "get_topics": "list_topics",
    "get_trends": "analyze_trends",
    "research_gaps": "find_gaps",
    "discover": "random_explore",
    "random_exploration": "random_explore",
    "discover_connections": "find_connections",
    "overview": "database_stats",
}

_adapter: TypeAdapter = TypeAdapter(ToolCall)


def parse_tool_call(name: str, args: Optional[Dict[str, Any]] = None) -> Optional[ToolCall]:
    """Build a typed call from a tool name and a loose argument bag.

    Returns None for unknown tool names. Raises pydantic.ValidationError
    when the arguments do not fit the tool.
    """
    canonical = TOOL_ALIASES.get(name, name)
    if canonical not in TOOL_NAMES:
        return None
    return _adapter.validate_python({**(args or {}), "name": canonical})
