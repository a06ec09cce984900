"""
LangChain provider adapter

Implements the provider boundary on top of the LangChain chat model returned
by ``create_llm``: a cold, tool-less model for intent classification and a
tool-bound model for the streamed reply.
"""

from typing import AsyncIterator, List, Optional, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from loguru import logger

from rep_gateway.api.schemas.chat import ConversationMessage, ToolCall
from rep_gateway.config.settings import settings
from rep_gateway.llm.client import create_llm
from rep_gateway.llm.response_utils import extract_text_from_response, parse_json_object
from rep_gateway.models.domain import Intent, IntentType, ToolName
from rep_gateway.providers.base import StreamUnit
from rep_gateway.utils.errors import ProviderError


SCHEDULE_MEETING_TOOL = {
    "type": "function",
    "function": {
        "name": ToolName.SCHEDULE_CALENDLY_MEETING.value,
        "description": "Provide Jai's Calendly link for scheduling a 30-minute meeting",
        "parameters": {
            "type": "object",
            "properties": {
                "meetingType": {
                    "type": "string",
                    "description": "Type of meeting requested (e.g., 'general meeting', 'consultation', 'interview')",
                },
                "requestorName": {
                    "type": "string",
                    "description": "Name of the person requesting the meeting",
                },
            },
            "required": ["meetingType"],
        },
    },
}

CLASSIFICATION_PROMPT = """Classify the following user message into one of these intents:
- qa_about_jai: Questions about Jai's background, experience, skills, work, projects
- schedule_meeting: Requests to book, schedule, or arrange meetings with Jai
- contact_links: Requests for contact information, email, phone, LinkedIn
- unknown: Anything else that doesn't fit the above categories

Message: "{message}"

Respond with a JSON object: {{"type": "intent_type", "confidence": 0.0-1.0}}"""

# Returned when the classifier answers with something that is not JSON
FALLBACK_INTENT_CONFIDENCE = 0.5


def parse_intent(raw_text: str) -> Intent:
    """Turn classifier output into an Intent; unparseable output becomes unknown/0.5."""
    parsed = parse_json_object(raw_text)
    if parsed is None:
        logger.warning(f"Failed to parse intent JSON, defaulting to unknown: {raw_text[:200]!r}")
        return Intent(type=IntentType.UNKNOWN, confidence=FALLBACK_INTENT_CONFIDENCE)
    return Intent(type=IntentType.parse(parsed.get("type")), confidence=parsed.get("confidence", 0.0))


def to_langchain_messages(history: Sequence[ConversationMessage], system_prompt: str) -> List[BaseMessage]:
    """System prompt first, then the visible conversation in order."""
    messages: List[BaseMessage] = []
    if system_prompt:
        messages.append(SystemMessage(content=system_prompt))
    for message in history:
        if message.role == "user":
            messages.append(HumanMessage(content=message.content))
        elif message.role == "assistant":
            messages.append(AIMessage(content=message.content))
        else:
            messages.append(SystemMessage(content=message.content))
    return messages


class LangChainProvider:
    """Provider adapter backed by ChatOpenAI / ChatOllama"""

    def __init__(self, chat_llm=None, classifier_llm=None):
        self.classifier_llm = classifier_llm or create_llm(temperature=settings.classifier_temperature)
        self.chat_llm = self._bind_tools(chat_llm or create_llm())

    @staticmethod
    def _bind_tools(llm):
        try:
            return llm.bind_tools([SCHEDULE_MEETING_TOOL])
        except NotImplementedError:
            logger.warning(f"⚠️  {type(llm).__name__} does not support tool calling; scheduling tool disabled")
            return llm

    async def classify_intent(self, text: str) -> Intent:
        prompt = CLASSIFICATION_PROMPT.format(message=text)
        try:
            response = await self.classifier_llm.ainvoke([HumanMessage(content=prompt)])
        except Exception as e:
            raise ProviderError(f"failed to classify intent: {e}") from e

        intent = parse_intent(extract_text_from_response(response))
        logger.info(f"Message classified as: {intent.type.value} ({intent.confidence:.2f})")
        return intent

    async def stream_chat(
        self,
        history: Sequence[ConversationMessage],
        system_prompt: str,
    ) -> AsyncIterator[StreamUnit]:
        messages = to_langchain_messages(history, system_prompt)
        logger.debug(f"Starting provider stream ({len(messages)} messages)")

        gathered: Optional[BaseMessage] = None
        try:
            async for chunk in self.chat_llm.astream(messages):
                text = extract_text_from_response(chunk)
                if text:
                    yield StreamUnit.text(text)

                # Tool call arguments arrive in fragments; merge until the stream ends
                if getattr(chunk, "tool_call_chunks", None):
                    gathered = chunk if gathered is None else gathered + chunk
        except Exception as e:
            logger.error(f"Provider streaming error: {e}")
            yield StreamUnit.failure(ProviderError(str(e)))
            return

        if gathered is not None:
            for call in gathered.tool_calls:
                yield StreamUnit.tool_call(ToolCall(name=call["name"], parameters=call.get("args") or {}))
