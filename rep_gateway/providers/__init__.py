"""
Provider adapters - LLM boundary used by the orchestrator
"""

from rep_gateway.providers.base import ProviderAdapter, StreamUnit

__all__ = [
    "ProviderAdapter",
    "StreamUnit",
]
