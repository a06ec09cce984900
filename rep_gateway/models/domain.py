"""
Domain models for the representative gateway.

Request-scoped value types shared by the guardrails, the provider adapter and
the orchestrator. Content documents are the only objects that outlive a
request; they are owned by the content store.
"""

import enum
from dataclasses import dataclass, field
from typing import List, Optional


class IntentType(str, enum.Enum):
    """Closed set of classifier outcomes."""
    QA_ABOUT_JAI = "qa_about_jai"
    SCHEDULE_MEETING = "schedule_meeting"
    CONTACT_LINKS = "contact_links"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> "IntentType":
        """Map a raw classifier label onto the enum; anything unrecognised is UNKNOWN."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


class ToolName(str, enum.Enum):
    """Closed set of tools the provider may invoke."""
    SCHEDULE_CALENDLY_MEETING = "scheduleCalendlyMeeting"

    @classmethod
    def lookup(cls, value: object) -> Optional["ToolName"]:
        """Exact-match lookup; returns None for unsupported tool names."""
        for member in cls:
            if member.value == value:
                return member
        return None


class StreamUnitKind(str, enum.Enum):
    """Kinds of unit produced by a provider stream."""
    TEXT = "text"
    TOOL_CALL = "tool_call"
    ERROR = "error"


class EventType(str, enum.Enum):
    """Kinds of protocol event sent to the caller."""
    CONNECTED = "connected"
    TEXT = "text"
    TOOL_CALL = "tool_call"
    GUARDRAIL = "guardrail"
    ERROR = "error"


@dataclass
class Intent:
    """Classified purpose of a user utterance"""
    type: IntentType
    confidence: float

    def __post_init__(self):
        self.type = IntentType.parse(self.type)
        try:
            confidence = float(self.confidence)
        except (TypeError, ValueError):
            confidence = 0.0
        self.confidence = min(max(confidence, 0.0), 1.0)


@dataclass(frozen=True)
class GuardrailVerdict:
    """Outcome of a single guardrail checkpoint"""
    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "GuardrailVerdict":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "GuardrailVerdict":
        return cls(allowed=False, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed


@dataclass(frozen=True)
class ContentDocument:
    """A static, checksummed knowledge pack loaded at startup"""
    id: str
    path: str
    content: str
    checksum: str
    topic_hints: List[str] = field(default_factory=list)
