"""
Conversation Orchestrator - guardrails, classification, context and streaming for one chat turn
"""

from rep_gateway.agents.orchestrator.agent import ConversationOrchestrator
from rep_gateway.agents.orchestrator.state import ConversationState, TurnContext, TurnState
from rep_gateway.agents.orchestrator.streaming import ProviderStream

__all__ = ["ConversationOrchestrator", "ConversationState", "TurnContext", "TurnState", "ProviderStream"]
