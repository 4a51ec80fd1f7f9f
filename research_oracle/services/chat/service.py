import logging
from typing import AsyncIterator, List, Optional, Tuple

from research_oracle.repositories.paper import PaperRepository
from research_oracle.schemas.api.chat import ChatMessage
from research_oracle.services.chat.context import ContextAssembler
from research_oracle.services.chat.prompts import OraclePromptBuilder
from research_oracle.services.chat.router import IntentRouter
from research_oracle.services.chat.tools import ToolExecutor
from research_oracle.services.completion.client import CompletionStreamer

logger = logging.getLogger(__name__)


class ChatService:
    """Orchestrates one chat turn: route, retrieve, prompt, stream."""

    def __init__(
        self,
        router: IntentRouter,
        executor: ToolExecutor,
        streamer: CompletionStreamer,
        papers: PaperRepository,
        assembler: Optional[ContextAssembler] = None,
        prompt_builder: Optional[OraclePromptBuilder] = None,
    ):
        self.router = router
        self.executor = executor
        self.streamer = streamer
        self.papers = papers
        self.assembler = assembler or ContextAssembler()
        self.prompt_builder = prompt_builder or OraclePromptBuilder()

    async def gather_context(self, message: str) -> str:
        """Run every planned tool in order and join their outputs."""
        sections: List[Tuple[Optional[str], str]] = []
        for planned in self.router.route(message):
            output = await self.executor.execute(planned.call)
            sections.append((planned.heading, output))
        return self.assembler.assemble(sections)

    async def stream_reply(self, messages: List[ChatMessage]) -> AsyncIterator[bytes]:
        """Build the grounded prompt for the latest message and open the upstream stream.

        Raises:
            CompletionException: upstream failed before streaming started
            RepositoryException: corpus counters could not be read
        """
        # Counters are read before any tool runs
        paper_count = self.papers.count()
        chunk_count = self.papers.count_chunks()

        latest = messages[-1].content
        context = await self.gather_context(latest)

        system_prompt = self.prompt_builder.create_system_prompt(
            context=context,
            paper_count=paper_count,
            chunk_count=chunk_count,
        )
        logger.info(f"Context assembled: {len(context)} chars for {len(messages)} messages")

        history = [message.model_dump() for message in messages]
        return await self.streamer.open_stream(system_prompt, history)
