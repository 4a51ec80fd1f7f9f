import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from openai import OpenAI, OpenAIError

from research_oracle.exceptions import EmbeddingException

logger = logging.getLogger(__name__)


class OpenAIEmbeddingsClient:
    """
    Embeds chat queries so they can be matched against the stored paper
    and chunk vectors. Only queries are embedded here; the corpus vectors
    are written by the ingestion pipeline.
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        model: str = "text-embedding-3-small",
        dimensions: Optional[int] = None,
        max_workers: int = 4,
    ):
        """
        :param dimensions: Vector size of the stored embeddings; requested
            from the model so query and corpus vectors are comparable
        :param max_workers: Threads for the blocking SDK calls
        """
        self.model = model
        self.dimensions = dimensions
        self.client = OpenAI(api_key=api_key, base_url=base_url)
        self.executor = ThreadPoolExecutor(max_workers=max_workers)
        logger.info(f"Embeddings client ready (model={model}, dimensions={dimensions})")

    def _create(self, query: str) -> List[float]:
        options = {"dimensions": self.dimensions} if self.dimensions else {}
        response = self.client.embeddings.create(
            model=self.model,
            input=[query],
            encoding_format="float",
            **options,
        )
        if not response.data:
            raise EmbeddingException("Embedding response contained no vectors")
        return response.data[0].embedding

    async def embed_query(self, query: str) -> List[float]:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self.executor, self._create, query)
        except OpenAIError as e:
            logger.error(f"Query embedding failed: {e}")
            raise EmbeddingException(f"Embedding request failed: {e}") from e

    async def close(self):
        self.executor.shutdown(wait=False)
