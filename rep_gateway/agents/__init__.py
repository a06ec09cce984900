"""
Agent workflows module.
Contains the conversation orchestrator that drives a chat turn.
"""

from rep_gateway.agents.orchestrator import ConversationOrchestrator

__all__ = ["ConversationOrchestrator"]
