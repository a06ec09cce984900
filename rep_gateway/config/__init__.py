"""
Configuration layer - Settings and constants
"""

from rep_gateway.config.settings import settings, Settings, PROJECT_ROOT
from rep_gateway.config.constants import (
    REFUSAL_MESSAGE,
    SCHEDULING_MESSAGE,
    STREAM_TIMEOUT_MESSAGE,
)

__all__ = [
    "settings",
    "Settings",
    "PROJECT_ROOT",
    "REFUSAL_MESSAGE",
    "SCHEDULING_MESSAGE",
    "STREAM_TIMEOUT_MESSAGE",
]
