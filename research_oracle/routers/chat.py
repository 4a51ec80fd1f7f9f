import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse

from research_oracle.dependencies import ChatServiceDep, guard_chat_request
from research_oracle.schemas.api.chat import ChatRequest, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post(
    "",
    dependencies=[Depends(guard_chat_request)],
    responses={
        200: {"content": {"text/event-stream": {}}, "description": "Upstream completion stream, relayed unchanged"},
        403: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def chat(request: ChatRequest, service: ChatServiceDep):
    """Answer the latest message grounded in the paper corpus, streamed as SSE."""
    try:
        stream = await service.stream_reply(request.messages)
    except Exception as e:
        logger.error(f"Chat turn failed: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})

    return StreamingResponse(
        stream,
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
