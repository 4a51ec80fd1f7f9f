from functools import lru_cache

from research_oracle.config import get_settings
from research_oracle.exceptions import ConfigurationError
from research_oracle.services.embeddings.openai_client import OpenAIEmbeddingsClient


@lru_cache(maxsize=1)
def make_embeddings_client() -> OpenAIEmbeddingsClient:
    """
    Create and return a singleton embeddings client.

    Raises:
        ConfigurationError: when no embeddings API key is configured
    """
    settings = get_settings()
    if not settings.embeddings.api_key:
        raise ConfigurationError("EMBEDDINGS__API_KEY is not set")

    return OpenAIEmbeddingsClient(
        api_key=settings.embeddings.api_key,
        base_url=settings.embeddings.base_url,
        model=settings.embeddings.model,
        dimensions=settings.embeddings.dimension,
    )
