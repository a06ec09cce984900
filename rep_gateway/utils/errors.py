"""
Custom error classes for the gateway
"""


class GatewayError(Exception):
    """Base exception for gateway errors"""
    status_code = 500


class RequestValidationError(GatewayError):
    """Malformed or empty chat request, rejected before any stream starts"""
    status_code = 400


class ProviderError(GatewayError):
    """Classification or streaming call to the LLM provider failed"""
    status_code = 500


class ContentLoadError(GatewayError):
    """Content pack manifest could not be read or parsed"""
    pass


class InvalidTransitionError(GatewayError):
    """Conversation state machine was asked for a transition it does not allow"""
    pass
