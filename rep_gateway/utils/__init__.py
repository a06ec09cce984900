"""
Utilities - logging setup and error types
"""

from rep_gateway.utils.errors import (
    GatewayError,
    RequestValidationError,
    ProviderError,
    ContentLoadError,
    InvalidTransitionError,
)

__all__ = [
    "GatewayError",
    "RequestValidationError",
    "ProviderError",
    "ContentLoadError",
    "InvalidTransitionError",
]
