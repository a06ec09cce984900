"""
API schemas for request/response models
"""

from rep_gateway.api.schemas.chat import (
    ConversationMessage,
    ChatRequest,
    ToolCall,
    ProtocolEvent,
    ErrorResponse,
)
from rep_gateway.api.schemas.health import HealthResponse, PrivacyResponse

__all__ = [
    "ConversationMessage",
    "ChatRequest",
    "ToolCall",
    "ProtocolEvent",
    "ErrorResponse",
    "HealthResponse",
    "PrivacyResponse",
]
