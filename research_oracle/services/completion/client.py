import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from research_oracle.exceptions import (
    CompletionAPIError,
    CompletionConnectionError,
    CompletionTimeoutError,
)

logger = logging.getLogger(__name__)


class CompletionStreamer:
    """Streams chat completions from an OpenAI-compatible endpoint.

    The upstream Server-Sent-Events body is handed back as raw bytes so the
    caller can relay it unchanged or decode it itself.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.deepseek.com/v1",
        model: str = "deepseek-chat",
        timeout: float = 120.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=10.0),
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=20),
        )

    def build_payload(self, system_prompt: str, messages: List[Dict[str, Any]]) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": "system", "content": system_prompt}, *messages],
            "stream": True,
        }

    async def open_stream(
        self, system_prompt: str, messages: List[Dict[str, Any]]
    ) -> AsyncIterator[bytes]:
        """Start a streaming completion and return an iterator over its body.

        The request is sent and its status checked before this returns, so
        upstream failures surface here rather than mid-stream.

        Raises:
            CompletionAPIError: upstream answered with a non-success status
            CompletionConnectionError: upstream could not be reached
            CompletionTimeoutError: upstream did not answer in time
        """
        request = self.client.build_request(
            "POST",
            f"{self.base_url}/chat/completions",
            json=self.build_payload(system_prompt, messages),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )
        logger.info(f"Starting streaming completion: model={self.model}, messages={len(messages)}")

        try:
            response = await self.client.send(request, stream=True)
        except httpx.TimeoutException as e:
            raise CompletionTimeoutError(f"Completion request timeout: {e}") from e
        except httpx.RequestError as e:
            raise CompletionConnectionError(f"Cannot connect to completion API: {e}") from e

        if response.is_error:
            try:
                body = (await response.aread()).decode("utf-8", "ignore").strip()
            finally:
                await response.aclose()
            logger.error(f"Completion API returned {response.status_code}: {body[:400]}")
            raise CompletionAPIError(response.status_code, body)

        return self._relay(response)

    async def _relay(self, response: httpx.Response) -> AsyncIterator[bytes]:
        try:
            async for chunk in response.aiter_bytes():
                if chunk:
                    yield chunk
        finally:
            await response.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()
