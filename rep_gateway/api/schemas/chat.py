"""
Chat streaming models for the public API contract

The /chat endpoint accepts the whole visible conversation and streams back
protocol events as Server-Sent Events.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Literal, Dict, Any, List

from rep_gateway.models.domain import EventType


class ConversationMessage(BaseModel):
    """A single turn of the conversation"""
    role: Literal["user", "assistant", "system"]
    content: str = Field(..., min_length=1)


class ChatRequest(BaseModel):
    """
    Request body for POST /chat

    Messages are ordered oldest first. The orchestrator answers the most
    recent user-authored message.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "messages": [
                        {"role": "user", "content": "What does Jai work on?"}
                    ],
                    "sessionId": "b7a4c1de"
                }
            ]
        },
    )

    messages: List[ConversationMessage] = Field(..., min_length=1)
    session_id: Optional[str] = Field(default=None, alias="sessionId")


class ToolCall(BaseModel):
    """Structured action request emitted by the provider"""
    name: str
    parameters: Dict[str, Any] = Field(default_factory=dict)


class ProtocolEvent(BaseModel):
    """
    One unit of the streamed response

    Event types:
    - connected: stream opened, sent before any content
    - text: assistant text chunk (verbatim provider output or canned copy)
    - tool_call: accepted tool invocation forwarded to the caller
    - guardrail: refusal carrying the fixed scope message
    - error: provider failure or deadline
    """
    role: str = "assistant"
    content: str = ""
    type: EventType
    tool: Optional[ToolCall] = None

    @classmethod
    def connected(cls) -> "ProtocolEvent":
        return cls(role="", type=EventType.CONNECTED)

    @classmethod
    def text(cls, content: str) -> "ProtocolEvent":
        return cls(content=content, type=EventType.TEXT)

    @classmethod
    def guardrail(cls, content: str) -> "ProtocolEvent":
        return cls(content=content, type=EventType.GUARDRAIL)

    @classmethod
    def error(cls, content: str) -> "ProtocolEvent":
        return cls(content=content, type=EventType.ERROR)

    @classmethod
    def tool_call(cls, tool: ToolCall) -> "ProtocolEvent":
        return cls(type=EventType.TOOL_CALL, tool=tool)

    def to_sse(self) -> str:
        """Serialize as a single SSE frame: ``data: <json>\\n\\n``"""
        return f"data: {self.model_dump_json(exclude_none=True)}\n\n"


class ErrorResponse(BaseModel):
    """Structured error returned when a request fails before streaming"""
    error: str
    message: str
    code: Optional[int] = None
