from research_oracle.schemas.api.analytics import CorpusOverview, DecadeCounts, TopicList, YearlyCounts
from research_oracle.schemas.api.chat import ChatMessage, ChatRequest, ErrorResponse
from research_oracle.schemas.api.papers import PaperListResponse

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ErrorResponse",
    "PaperListResponse",
    "CorpusOverview",
    "YearlyCounts",
    "DecadeCounts",
    "TopicList",
]
