"""
Classify node - asks the provider what the latest user message is for
"""

from loguru import logger

from rep_gateway.agents.orchestrator.context import OrchestratorContext
from rep_gateway.agents.orchestrator.state import ConversationState, TurnState
from rep_gateway.utils.errors import ProviderError


async def classify_node(state: TurnState, ctx: OrchestratorContext) -> TurnState:
    """
    Classify the user message. A provider failure ends the turn before any
    event is streamed.

    Raises:
        ProviderError: classification call failed
    """
    turn = state["turn"]
    try:
        intent = await ctx.provider.classify_intent(turn.user_message)
    except Exception as e:
        turn.transition(ConversationState.ERRORED)
        logger.error(f"Failed to classify intent: {e}")
        if isinstance(e, ProviderError):
            raise
        raise ProviderError(f"failed to classify intent: {e}") from e

    turn.intent = intent
    turn.transition(ConversationState.INTENT_CLASSIFIED)
    return {"turn": turn, "next_step": "continue"}
