from typing import Annotated, Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from research_oracle.config import Settings, get_settings
from research_oracle.exceptions import RequestRejected
from research_oracle.middlewares import client_ip, is_automated_client
from research_oracle.repositories.corpus import CorpusRepository
from research_oracle.repositories.paper import PaperRepository
from research_oracle.services.chat.router import IntentRouter
from research_oracle.services.chat.service import ChatService
from research_oracle.services.chat.tools import ToolExecutor
from research_oracle.services.completion.factory import make_completion_streamer
from research_oracle.services.embeddings.factory import make_embeddings_client
from research_oracle.services.ratelimit import RateLimiter, make_rate_limiter


def get_db_session(request: Request) -> Generator[Session, None, None]:
    with request.app.state.database.get_session() as session:
        yield session


SettingsDep = Annotated[Settings, Depends(get_settings)]
SessionDep = Annotated[Session, Depends(get_db_session)]
RateLimiterDep = Annotated[RateLimiter, Depends(make_rate_limiter)]


def get_paper_repository(session: SessionDep) -> PaperRepository:
    return PaperRepository(session)


def get_corpus_repository(session: SessionDep) -> CorpusRepository:
    return CorpusRepository(session)


PaperRepoDep = Annotated[PaperRepository, Depends(get_paper_repository)]
CorpusRepoDep = Annotated[CorpusRepository, Depends(get_corpus_repository)]


async def guard_chat_request(request: Request, settings: SettingsDep, limiter: RateLimiterDep) -> None:
    """Reject automated clients and callers over their request budget."""
    if settings.chat.block_bots and is_automated_client(request.headers.get("user-agent")):
        raise RequestRejected(403, "Automated access not permitted")

    if not await limiter.allow(client_ip(request)):
        raise RequestRejected(429, "Rate limit exceeded. Please try again later.")


def get_chat_service(settings: SettingsDep, papers: PaperRepoDep, corpus: CorpusRepoDep) -> ChatService:
    executor = ToolExecutor(
        papers=papers,
        corpus=corpus,
        embeddings=make_embeddings_client(),
        match_threshold=settings.retrieval.match_threshold,
    )
    return ChatService(
        router=IntentRouter(),
        executor=executor,
        streamer=make_completion_streamer(),
        papers=papers,
    )


ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
