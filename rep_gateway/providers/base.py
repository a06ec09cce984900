"""
Provider adapter boundary

What the orchestrator needs from an LLM provider: one intent classification
call and one chunked chat stream.
"""

from dataclasses import dataclass
from typing import AsyncIterator, Optional, Protocol, Sequence, runtime_checkable

from rep_gateway.api.schemas.chat import ConversationMessage, ToolCall
from rep_gateway.models.domain import Intent, StreamUnitKind


@dataclass
class StreamUnit:
    """A single unit produced by a provider stream"""
    kind: StreamUnitKind
    content: str = ""
    tool: Optional[ToolCall] = None
    error: Optional[BaseException] = None

    @classmethod
    def text(cls, content: str) -> "StreamUnit":
        return cls(kind=StreamUnitKind.TEXT, content=content)

    @classmethod
    def tool_call(cls, tool: ToolCall) -> "StreamUnit":
        return cls(kind=StreamUnitKind.TOOL_CALL, tool=tool)

    @classmethod
    def failure(cls, error: BaseException) -> "StreamUnit":
        return cls(kind=StreamUnitKind.ERROR, error=error)


@runtime_checkable
class ProviderAdapter(Protocol):
    """Interface consumed by the conversation orchestrator"""

    async def classify_intent(self, text: str) -> Intent:
        """Classify a user utterance. Raises ProviderError on failure."""
        ...

    def stream_chat(
        self,
        history: Sequence[ConversationMessage],
        system_prompt: str,
    ) -> AsyncIterator[StreamUnit]:
        """
        Stream the assistant's reply.

        Failures are yielded as a final ERROR unit rather than raised. The
        consumer may stop iterating at any point; implementations release
        upstream resources when the iterator is closed.
        """
        ...
