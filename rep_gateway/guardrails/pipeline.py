"""
Guardrail pipeline

Stateless, deterministic checks applied at fixed checkpoints of a chat turn:

- input: before any provider call
- intent: after classification, before the streaming call
- tool: on every tool call the provider emits mid-stream
- response: on the accumulated answer (advisory audit only)

Every check returns a GuardrailVerdict. Nothing here performs I/O other than
logging, so each check is cheap enough to run before the expensive step it
guards.
"""

from typing import Callable, Dict, List, Mapping, Optional

from loguru import logger

from rep_gateway.config.constants import REFUSAL_MESSAGE
from rep_gateway.guardrails import rules
from rep_gateway.models.domain import GuardrailVerdict, Intent, IntentType, ToolName


def _allow_intent(intent: Intent) -> GuardrailVerdict:
    return GuardrailVerdict.allow()


def _deny_intent(intent: Intent) -> GuardrailVerdict:
    return GuardrailVerdict.deny(f"intent '{intent.type.value}' is not allowed")


# One validator per IntentType member. A new member without an entry here
# fails the completeness check in GuardrailPipeline.__init__.
INTENT_VALIDATORS: Dict[IntentType, Callable[[Intent], GuardrailVerdict]] = {
    IntentType.QA_ABOUT_JAI: _allow_intent,
    IntentType.SCHEDULE_MEETING: _allow_intent,
    IntentType.CONTACT_LINKS: _allow_intent,
    IntentType.UNKNOWN: _deny_intent,
}


def _validate_schedule_meeting(parameters: Mapping[str, object]) -> GuardrailVerdict:
    """scheduleCalendlyMeeting requires meetingType; every value must be a string."""
    for param in ("meetingType",):
        if param not in parameters:
            return GuardrailVerdict.deny(f"missing required parameter: {param}")

    for key, value in parameters.items():
        if value is None:
            return GuardrailVerdict.deny(f"parameter '{key}' cannot be None")
        if not isinstance(value, str):
            return GuardrailVerdict.deny(f"parameter '{key}' must be a string")

    return GuardrailVerdict.allow()


TOOL_VALIDATORS: Dict[ToolName, Callable[[Mapping[str, object]], GuardrailVerdict]] = {
    ToolName.SCHEDULE_CALENDLY_MEETING: _validate_schedule_meeting,
}


class GuardrailPipeline:
    """Input, intent, tool and response checks plus HTML sanitising"""

    def __init__(self, input_rules: Optional[List[rules.InputRule]] = None):
        missing_intents = set(IntentType) - set(INTENT_VALIDATORS)
        missing_tools = set(ToolName) - set(TOOL_VALIDATORS)
        if missing_intents or missing_tools:
            raise ValueError(
                f"Guardrail validators incomplete: intents={sorted(m.value for m in missing_intents)}, "
                f"tools={sorted(m.value for m in missing_tools)}"
            )
        self.input_rules = input_rules if input_rules is not None else rules.build_input_rules()

    def validate_input(self, text: str) -> GuardrailVerdict:
        """Reject empty, oversized, or injection-looking input. First failing rule wins."""
        for rule in self.input_rules:
            if rule.matches(text):
                logger.warning(f"Input blocked by guardrail rule '{rule.name}'")
                return GuardrailVerdict.deny(rule.reason)
        return GuardrailVerdict.allow()

    def validate_intent(self, intent: Optional[Intent]) -> GuardrailVerdict:
        """
        Allow only the supported intent types, and only when the classifier is
        reasonably sure. Low confidence rejects even an allowed type.
        """
        if intent is None:
            return GuardrailVerdict.deny("intent cannot be None")

        verdict = INTENT_VALIDATORS[intent.type](intent)
        if not verdict.allowed:
            return verdict

        if intent.confidence < rules.MIN_INTENT_CONFIDENCE:
            return GuardrailVerdict.deny(f"intent confidence too low: {intent.confidence:.2f}")

        return GuardrailVerdict.allow()

    def validate_tool(self, tool) -> GuardrailVerdict:
        """
        Check a provider tool call against the closed tool set.

        ``tool`` is anything with ``name`` and ``parameters`` attributes
        (the API ToolCall model in practice).
        """
        if tool is None:
            return GuardrailVerdict.deny("tool cannot be None")

        tool_name = ToolName.lookup(tool.name)
        if tool_name is None:
            return GuardrailVerdict.deny(f"tool '{tool.name}' is not allowed")

        return TOOL_VALIDATORS[tool_name](tool.parameters or {})

    def validate_response(self, response: str, intent_type, grounding_text: str) -> GuardrailVerdict:
        """
        Check a generated answer for instruction leakage and third-person framing.

        The key-term overlap with ``grounding_text`` is advisory: a low score is
        logged, never rejected.
        """
        lower_response = response.lower()
        for indicator in rules.META_DISCLOSURE_PHRASES:
            if indicator.lower() in lower_response:
                logger.warning(f"System prompt leakage detected: '{indicator}'")
                return GuardrailVerdict.deny("response contains system information")

        if IntentType.parse(intent_type) is IntentType.QA_ABOUT_JAI and grounding_text:
            if not any(marker in lower_response for marker in rules.THIRD_PERSON_MARKERS):
                return GuardrailVerdict.deny("response must refer to Jai in third person")

            overlap = self.grounding_overlap(response, grounding_text)
            if len(response) > rules.GROUNDING_MIN_RESPONSE_LENGTH and overlap == 0:
                logger.warning("Response appears ungrounded from pack content")

        return GuardrailVerdict.allow()

    @staticmethod
    def grounding_overlap(response: str, grounding_text: str) -> int:
        """Count key terms present in both the response and the grounding text."""
        lower_response = response.lower()
        lower_grounding = grounding_text.lower()
        return sum(
            1 for term in rules.GROUNDING_KEY_TERMS
            if term in lower_grounding and term in lower_response
        )

    @staticmethod
    def sanitize_html(text: str) -> str:
        """Strip script blocks, inline event handlers and javascript: URIs."""
        for pattern in rules.SANITIZERS:
            text = pattern.sub("", text)
        return text

    @staticmethod
    def get_refusal_message() -> str:
        return REFUSAL_MESSAGE
