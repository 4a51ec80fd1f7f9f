import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from research_oracle.config import get_settings
from research_oracle.db.factory import make_database
from research_oracle.db.redis.redis import close_redis_pool
from research_oracle.exceptions import RequestRejected, ResearchOracleException
from research_oracle.middlewares import log_error, log_request
from research_oracle.routers import analytics, chat, papers, ping
from research_oracle.services.completion.factory import close_completion_streamer
from research_oracle.services.embeddings.factory import make_embeddings_client

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

CORS_ALLOWED_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan for the API.
    """
    logger.info("Starting Research Oracle API...")

    settings = get_settings()
    app.state.settings = settings

    database = make_database()
    app.state.database = database
    logger.info("Database connected")

    logger.info("API ready")
    yield

    # Cleanup
    await close_completion_streamer()
    if make_embeddings_client.cache_info().currsize:
        await make_embeddings_client().close()
    await close_redis_pool()
    database.teardown()
    logger.info("API shutdown complete")


app = FastAPI(
    title="Research Oracle",
    description="Chat with a corpus of research papers, grounded in retrieval.",
    version=get_settings().app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=CORS_ALLOWED_HEADERS,
)


@app.middleware("http")
async def request_logging(request: Request, call_next):
    log_request(request.method, request.url.path)
    return await call_next(request)


@app.exception_handler(RequestRejected)
async def request_rejected_handler(request: Request, exc: RequestRejected):
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


@app.exception_handler(ResearchOracleException)
async def oracle_exception_handler(request: Request, exc: ResearchOracleException):
    log_error(str(exc), request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=422, content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())})


app.include_router(ping.router, prefix="/api/v1")
app.include_router(chat.router, prefix="/api/v1")
app.include_router(papers.router, prefix="/api/v1")
app.include_router(analytics.router, prefix="/api/v1")


if __name__ == "__main__":
    uvicorn.run(app, port=8000, host="0.0.0.0")
