"""
Assemble node - builds the system prompt, with every pack for questions about Jai
"""

from rep_gateway.agents.orchestrator.context import (
    OrchestratorContext,
    assemble_system_prompt,
    build_system_prompt,
    grounding_text_for,
)
from rep_gateway.agents.orchestrator.state import ConversationState, TurnState


def assemble_context_node(state: TurnState, ctx: OrchestratorContext) -> TurnState:
    turn = state["turn"]
    documents = ctx.content_store.get_all_documents()
    turn.grounding_text = grounding_text_for(turn.intent, documents)
    turn.system_prompt = assemble_system_prompt(build_system_prompt(), turn.grounding_text)
    turn.transition(ConversationState.CONTEXT_ASSEMBLED)
    return {"turn": turn, "next_step": "continue"}
