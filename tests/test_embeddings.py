"""
Tests for the query embeddings client with the SDK call mocked out.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from research_oracle.exceptions import EmbeddingException
from research_oracle.services.embeddings.openai_client import OpenAIEmbeddingsClient


@pytest.fixture
def sdk():
    sdk = MagicMock()
    sdk.embeddings.create.return_value = SimpleNamespace(
        data=[SimpleNamespace(embedding=[0.1, 0.2, 0.3])]
    )
    return sdk


def make_client(sdk, **kwargs) -> OpenAIEmbeddingsClient:
    client = OpenAIEmbeddingsClient(api_key="sk-test", **kwargs)
    client.client = sdk
    return client


class TestOpenAIEmbeddingsClient:

    @pytest.mark.asyncio
    async def test_requests_stored_vector_size(self, sdk):
        client = make_client(sdk, model="text-embedding-3-small", dimensions=1536)

        vector = await client.embed_query("prion misfolding")

        assert vector == [0.1, 0.2, 0.3]
        sdk.embeddings.create.assert_called_once_with(
            model="text-embedding-3-small",
            input=["prion misfolding"],
            encoding_format="float",
            dimensions=1536,
        )
        await client.close()

    @pytest.mark.asyncio
    async def test_dimensions_omitted_when_unset(self, sdk):
        client = make_client(sdk)

        await client.embed_query("CRISPR")

        assert "dimensions" not in sdk.embeddings.create.call_args.kwargs
        await client.close()

    @pytest.mark.asyncio
    async def test_sdk_error_wrapped(self, sdk):
        sdk.embeddings.create.side_effect = OpenAIError("invalid api key")
        client = make_client(sdk)

        with pytest.raises(EmbeddingException, match="invalid api key"):
            await client.embed_query("CRISPR")
        await client.close()

    @pytest.mark.asyncio
    async def test_empty_response(self, sdk):
        sdk.embeddings.create.return_value = SimpleNamespace(data=[])
        client = make_client(sdk)

        with pytest.raises(EmbeddingException, match="no vectors"):
            await client.embed_query("CRISPR")
        await client.close()
