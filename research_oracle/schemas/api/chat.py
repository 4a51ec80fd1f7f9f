from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """One conversation turn as resent by the client."""

    model_config = ConfigDict(extra="ignore")

    role: Literal["user", "assistant"] = Field(..., description="Author of the message")
    content: str = Field(..., description="Message text")


class ChatRequest(BaseModel):
    """Full conversation history, ending with the new user message."""

    messages: List[ChatMessage] = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "messages": [
                    {"role": "user", "content": "How has research on CRISPR evolved over time?"},
                ]
            }
        }


class ErrorResponse(BaseModel):
    error: str
