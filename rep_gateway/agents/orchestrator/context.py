"""
Orchestrator context - dependencies passed to workflow nodes, system prompt
and knowledge-pack injection
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from rep_gateway.config.constants import CONTACT_EMAIL, CONTACT_LINKEDIN, CONTACT_X
from rep_gateway.config.settings import settings
from rep_gateway.content.store import ContentStore
from rep_gateway.guardrails.pipeline import GuardrailPipeline
from rep_gateway.models.domain import ContentDocument, Intent, IntentType
from rep_gateway.providers.base import ProviderAdapter


@dataclass
class OrchestratorContext:
    """Shared, request-independent collaborators for the pre-stream workflow"""
    provider: ProviderAdapter
    content_store: ContentStore
    guardrails: GuardrailPipeline


SYSTEM_PROMPT_TEMPLATE = """You are Jai's internet representative. Always speak in third person about Jai.

Current date and time: {now} ({zone})

Your capabilities:
1. Answer questions about Jai using the provided context
2. Help schedule meetings with Jai using his Calendly link
3. Provide contact information (email: {email}, LinkedIn: {linkedin}, X: {x})

For meeting scheduling:
- When someone wants to schedule a meeting, use the scheduleCalendlyMeeting tool
- The tool will provide Jai's Calendly link for easy 30-minute meeting booking
- Always mention that meetings are in Pacific Time
- Be helpful and professional when directing people to use Calendly

Keep responses professional and helpful. Always refer to Jai in third person."""

CONTEXT_HEADER = "\n\nContext about Jai:\n"


def build_system_prompt(now: Optional[datetime] = None) -> str:
    """Core representative prompt stamped with the current time in the configured timezone."""
    now = now or datetime.now(settings.get_timezone())
    clock = now.strftime("%I:%M %p").lstrip("0")
    zone = getattr(now.tzinfo, "key", None) or now.tzname() or "local time"
    return SYSTEM_PROMPT_TEMPLATE.format(
        zone=zone,
        now=f"{now:%A, %B} {now.day}, {now.year} at {clock} {now:%Z}".rstrip(),
        email=CONTACT_EMAIL,
        linkedin=CONTACT_LINKEDIN,
        x=CONTACT_X,
    )


def grounding_text_for(intent: Intent, documents: Sequence[ContentDocument]) -> str:
    """
    Every pack's full text, verbatim, for questions about Jai; empty otherwise.

    No ranking, selection or truncation is applied.
    """
    if intent.type is not IntentType.QA_ABOUT_JAI or not documents:
        return ""
    return "".join(f"{document.content}\n" for document in documents)


def assemble_system_prompt(base_prompt: str, grounding_text: str) -> str:
    if not grounding_text:
        return base_prompt
    return base_prompt + CONTEXT_HEADER + grounding_text
