"""
Chat streaming endpoint using Server-Sent Events (SSE)

Failures before the stream opens (malformed request, classification error)
are returned as JSON errors by the app's exception handlers. Everything after
that point is reported in-band as protocol events.
"""

from typing import AsyncIterator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse
from loguru import logger

from rep_gateway.api.schemas.chat import ChatRequest, ProtocolEvent
from rep_gateway.agents.orchestrator import ConversationOrchestrator


router = APIRouter(prefix="/chat", tags=["chat"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


async def encode_events(events: AsyncIterator[ProtocolEvent]) -> AsyncIterator[str]:
    """Serialize protocol events as ``data: <json>\\n\\n`` frames."""
    async for event in events:
        yield event.to_sse()


def get_orchestrator(request: Request) -> ConversationOrchestrator:
    return request.app.state.orchestrator


@router.post("")
async def chat_stream(request: Request, body: ChatRequest):
    """
    Stream the representative's answer to the latest user message

    **Request:**
    ```json
    {"messages": [{"role": "user", "content": "What does Jai do?"}], "sessionId": "abc"}
    ```

    **Response:** SSE stream of protocol events
    ```
    data: {"role":"","content":"","type":"connected"}

    data: {"role":"assistant","content":"Jai is","type":"text"}
    ```

    Event types: `connected`, `text`, `tool_call`, `guardrail`, `error`.
    The stream ends when the connection closes; there is no end sentinel.
    """
    request_id = getattr(request.state, "request_id", None)
    logger.info(f"Chat request - session={body.session_id or '-'}, messages={len(body.messages)}")

    orchestrator = get_orchestrator(request)
    turn = await orchestrator.prepare(body, request_id=request_id)

    return StreamingResponse(
        encode_events(orchestrator.stream(turn)),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
