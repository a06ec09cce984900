"""
Guardrails - deterministic checks applied before anything reaches the caller
"""

from rep_gateway.guardrails.pipeline import GuardrailPipeline
from rep_gateway.guardrails.rules import InputRule, build_input_rules

__all__ = [
    "GuardrailPipeline",
    "InputRule",
    "build_input_rules",
]
