"""
Orchestrator workflow nodes
"""

from rep_gateway.agents.orchestrator.nodes.validate import validate_input_node, validate_intent_node
from rep_gateway.agents.orchestrator.nodes.classify import classify_node
from rep_gateway.agents.orchestrator.nodes.assemble import assemble_context_node

__all__ = [
    "validate_input_node",
    "classify_node",
    "validate_intent_node",
    "assemble_context_node",
]
