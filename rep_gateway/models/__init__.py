"""
Domain models
"""

from rep_gateway.models.domain import (
    IntentType,
    ToolName,
    StreamUnitKind,
    EventType,
    Intent,
    GuardrailVerdict,
    ContentDocument,
)

__all__ = [
    "IntentType",
    "ToolName",
    "StreamUnitKind",
    "EventType",
    "Intent",
    "GuardrailVerdict",
    "ContentDocument",
]
