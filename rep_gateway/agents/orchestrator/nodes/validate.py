"""
Guardrail nodes - input check before classification, intent check after it
"""

from loguru import logger

from rep_gateway.agents.orchestrator.context import OrchestratorContext
from rep_gateway.agents.orchestrator.state import ConversationState, TurnState
from rep_gateway.utils.errors import RequestValidationError


def validate_input_node(state: TurnState, ctx: OrchestratorContext) -> TurnState:
    """Pick the latest user message and run the input guardrail on it."""
    turn = state["turn"]

    user_message = next(
        (m.content for m in reversed(turn.history) if m.role == "user"),
        "",
    )
    if not user_message:
        turn.transition(ConversationState.ERRORED)
        raise RequestValidationError("No user message found")
    turn.user_message = user_message

    verdict = ctx.guardrails.validate_input(user_message)
    if not verdict.allowed:
        logger.warning(f"Input failed guardrails validation: {verdict.reason}")
        turn.transition(ConversationState.REFUSED)
        return {"turn": turn, "next_step": "stop"}

    turn.transition(ConversationState.INPUT_VALIDATED)
    return {"turn": turn, "next_step": "continue"}


def validate_intent_node(state: TurnState, ctx: OrchestratorContext) -> TurnState:
    """Refuse intents outside the allow-list or below the confidence floor."""
    turn = state["turn"]
    intent = turn.intent

    verdict = ctx.guardrails.validate_intent(intent)
    if not verdict.allowed:
        logger.warning(
            f"Intent failed validation: {verdict.reason} "
            f"(intent={intent.type.value}, confidence={intent.confidence:.2f})"
        )
        turn.transition(ConversationState.REFUSED)
        return {"turn": turn, "next_step": "stop"}

    turn.transition(ConversationState.INTENT_VALIDATED)
    return {"turn": turn, "next_step": "continue"}
