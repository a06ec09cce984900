"""
Guardrail detection rules

Injection detection is a plain ordered list of named predicates so rules can be
added, removed or reordered without touching the pipeline or the orchestrator.
Evaluation order matters: the first failing rule names the rejection reason.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Tuple


MAX_INPUT_LENGTH = 2000
MIN_INTENT_CONFIDENCE = 0.30


@dataclass(frozen=True)
class InputRule:
    """A named predicate that returns True when the text must be rejected"""
    name: str
    matches: Callable[[str], bool]
    reason: str


# Case-insensitive substring matches against the lowercased input
BLOCKED_PHRASES: Tuple[str, ...] = (
    "ignore previous instructions",
    "disregard all prior",
    "system prompt",
    "reveal your instructions",
    "show me your prompt",
    "what are your rules",
    "bypass security",
    "jailbreak",
    "injection",
    "</script>",
    "<script",
    "javascript:",
    "onerror=",
    "onclick=",
)

# Matched against the raw input
BLOCKED_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r"(?i)(ignore|forget|discard).*(previous|prior|above)"),
    re.compile(r"(?i)system\s*(prompt|message|instruction)"),
    re.compile(r"(?i)reveal.*(instruction|prompt|rule)"),
    re.compile(r"<[^>]*script[^>]*>"),
    re.compile(r"(?i)base64\s*\("),
)


def _is_blank(text: str) -> bool:
    return not text.strip()


def _is_too_long(text: str) -> bool:
    return len(text) > MAX_INPUT_LENGTH


def _phrase_rule(phrase: str) -> InputRule:
    return InputRule(
        name=f"phrase:{phrase}",
        matches=lambda text: phrase in text.strip().lower(),
        reason="input contains prohibited content",
    )


def _pattern_rule(pattern: re.Pattern) -> InputRule:
    return InputRule(
        name=f"pattern:{pattern.pattern}",
        matches=lambda text: pattern.search(text) is not None,
        reason="input contains prohibited patterns",
    )


def build_input_rules() -> List[InputRule]:
    """Ordered input rules: emptiness, length, blocked phrases, blocked patterns."""
    rules = [
        InputRule(name="empty", matches=_is_blank, reason="input cannot be empty"),
        InputRule(
            name="length",
            matches=_is_too_long,
            reason=f"input too long (max {MAX_INPUT_LENGTH} characters)",
        ),
    ]
    rules.extend(_phrase_rule(phrase) for phrase in BLOCKED_PHRASES)
    rules.extend(_pattern_rule(pattern) for pattern in BLOCKED_PATTERNS)
    return rules


# ============================================================================
# Response checks
# ============================================================================

# Text that would reveal the assistant's own operating instructions
META_DISCLOSURE_PHRASES: Tuple[str, ...] = (
    "I am Jai's internet representative",
    "third person",
    "system instructions",
    "my instructions",
    "I was programmed",
    "my prompt says",
)

# Third-person framing markers for answers about Jai
THIRD_PERSON_MARKERS: Tuple[str, ...] = ("jai", "he ")

# Key terms used by the advisory grounding heuristic
GROUNDING_KEY_TERMS: Tuple[str, ...] = (
    "tesla",
    "software",
    "engineer",
    "ai",
    "factory",
    "invoice",
    "hris",
)

# Responses shorter than this are never flagged as ungrounded
GROUNDING_MIN_RESPONSE_LENGTH = 100


# ============================================================================
# Sanitizers
# ============================================================================

SCRIPT_TAG_PATTERN = re.compile(r"(?is)<\s*script[^>]*>.*?</\s*script\s*>")
EVENT_HANDLER_PATTERN = re.compile(r"""(?i)\s*on\w+\s*=\s*["'][^"']*["']""")
JAVASCRIPT_URI_PATTERN = re.compile(r"(?i)javascript\s*:")

SANITIZERS: Tuple[re.Pattern, ...] = (
    SCRIPT_TAG_PATTERN,
    EVENT_HANDLER_PATTERN,
    JAVASCRIPT_URI_PATTERN,
)
