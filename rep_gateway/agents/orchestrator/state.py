"""
Conversation turn state

One TurnContext per request; it carries the state machine position and
everything the later stages need from the earlier ones. TurnState wraps it for
the pre-stream LangGraph workflow.
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Sequence, TypedDict

from loguru import logger

from rep_gateway.api.schemas.chat import ConversationMessage
from rep_gateway.models.domain import Intent
from rep_gateway.utils.errors import InvalidTransitionError


class ConversationState(str, enum.Enum):
    RECEIVED = "received"
    INPUT_VALIDATED = "input_validated"
    INTENT_CLASSIFIED = "intent_classified"
    INTENT_VALIDATED = "intent_validated"
    CONTEXT_ASSEMBLED = "context_assembled"
    STREAMING = "streaming"
    COMPLETED = "completed"
    REFUSED = "refused"
    ERRORED = "errored"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES: FrozenSet[ConversationState] = frozenset({
    ConversationState.COMPLETED,
    ConversationState.REFUSED,
    ConversationState.ERRORED,
    ConversationState.TIMED_OUT,
})

ALLOWED_TRANSITIONS: Dict[ConversationState, FrozenSet[ConversationState]] = {
    ConversationState.RECEIVED: frozenset({
        ConversationState.INPUT_VALIDATED,
        ConversationState.REFUSED,
        ConversationState.ERRORED,
    }),
    ConversationState.INPUT_VALIDATED: frozenset({
        ConversationState.INTENT_CLASSIFIED,
        ConversationState.ERRORED,
    }),
    ConversationState.INTENT_CLASSIFIED: frozenset({
        ConversationState.INTENT_VALIDATED,
        ConversationState.REFUSED,
    }),
    ConversationState.INTENT_VALIDATED: frozenset({
        ConversationState.CONTEXT_ASSEMBLED,
    }),
    ConversationState.CONTEXT_ASSEMBLED: frozenset({
        ConversationState.STREAMING,
    }),
    ConversationState.STREAMING: frozenset({
        ConversationState.COMPLETED,
        ConversationState.REFUSED,
        ConversationState.ERRORED,
        ConversationState.TIMED_OUT,
    }),
}


@dataclass
class TurnContext:
    """State for a single chat turn"""
    request_id: str
    history: Sequence[ConversationMessage]
    state: ConversationState = ConversationState.RECEIVED
    user_message: str = ""
    intent: Optional[Intent] = None
    system_prompt: str = ""
    grounding_text: str = ""
    response_parts: List[str] = field(default_factory=list)
    transitions: List[ConversationState] = field(default_factory=lambda: [ConversationState.RECEIVED])

    def transition(self, new_state: ConversationState) -> None:
        if new_state not in ALLOWED_TRANSITIONS.get(self.state, frozenset()):
            raise InvalidTransitionError(f"{self.state.value} -> {new_state.value}")
        logger.debug(f"Turn {self.request_id}: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.transitions.append(new_state)

    @property
    def refused(self) -> bool:
        return self.state is ConversationState.REFUSED

    @property
    def response_text(self) -> str:
        return "".join(self.response_parts)


class TurnState(TypedDict):
    """State for the pre-stream workflow graph"""
    turn: TurnContext
    next_step: str  # "continue" or "stop"
