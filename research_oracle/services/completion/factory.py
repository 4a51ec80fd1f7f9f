from typing import Optional

from research_oracle.config import get_settings
from research_oracle.exceptions import ConfigurationError
from research_oracle.services.completion.client import CompletionStreamer

_streamer: Optional[CompletionStreamer] = None


def make_completion_streamer() -> CompletionStreamer:
    """
    Create and return a singleton completion streamer.

    Raises:
        ConfigurationError: when no completion API key is configured
    """
    global _streamer
    if _streamer is None:
        settings = get_settings()
        if not settings.completion.api_key:
            raise ConfigurationError("COMPLETION__API_KEY is not set")

        _streamer = CompletionStreamer(
            api_key=settings.completion.api_key,
            base_url=settings.completion.base_url,
            model=settings.completion.model,
            timeout=settings.completion.timeout,
        )
    return _streamer


async def close_completion_streamer() -> None:
    global _streamer
    if _streamer is not None:
        await _streamer.aclose()
        _streamer = None
