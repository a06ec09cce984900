"""
Shared test fixtures: a scripted provider and a content store on disk
"""

import asyncio
import json

import pytest
from loguru import logger

from rep_gateway.api.schemas.chat import ChatRequest, ConversationMessage, ToolCall
from rep_gateway.content.store import ContentStore
from rep_gateway.models.domain import Intent, IntentType
from rep_gateway.providers.base import StreamUnit


class ScriptedProvider:
    """
    Provider adapter that replays a fixed intent and a fixed list of stream units.

    Records every call and whether the stream iterator was closed, so tests can
    check that the orchestrator skipped or abandoned provider work.
    """

    def __init__(self, intent=None, units=(), classify_error=None, first_unit_delay=0.0):
        self.intent = intent or Intent(type=IntentType.QA_ABOUT_JAI, confidence=0.9)
        self.units = list(units)
        self.classify_error = classify_error
        self.first_unit_delay = first_unit_delay
        self.classify_calls = []
        self.stream_calls = []
        self.units_pulled = 0
        self.closed = False

    async def classify_intent(self, text):
        self.classify_calls.append(text)
        if self.classify_error is not None:
            raise self.classify_error
        return self.intent

    async def stream_chat(self, history, system_prompt):
        self.stream_calls.append((list(history), system_prompt))
        try:
            if self.first_unit_delay:
                await asyncio.sleep(self.first_unit_delay)
            for unit in self.units:
                self.units_pulled += 1
                yield unit
        finally:
            self.closed = True


def user_request(*contents, session_id=None) -> ChatRequest:
    """ChatRequest with one user message per argument."""
    return ChatRequest(
        messages=[ConversationMessage(role="user", content=c) for c in contents],
        sessionId=session_id,
    )


def text_unit(content: str) -> StreamUnit:
    return StreamUnit.text(content)


def tool_unit(name: str, **parameters) -> StreamUnit:
    return StreamUnit.tool_call(ToolCall(name=name, parameters=parameters))


async def collect(events):
    """Drain an async iterator into a list."""
    return [event async for event in events]


@pytest.fixture
def content_dir(tmp_path):
    """Manifest with two packs plus one entry whose file is missing"""
    (tmp_path / "resume.md").write_text("Jai is a software engineer at Tesla.", encoding="utf-8")
    (tmp_path / "projects.md").write_text("Invoice automation for factory operations.", encoding="utf-8")
    manifest = {
        "packs": [
            {"id": "resume", "path": "content/resume.md", "topicHints": ["Experience", "skills"]},
            {"id": "projects", "path": "projects.md", "topicHints": ["side projects"]},
            {"id": "missing", "path": "missing.md", "topicHints": ["nothing"]},
        ]
    }
    (tmp_path / "packs.json").write_text(json.dumps(manifest), encoding="utf-8")
    return tmp_path


@pytest.fixture
def content_store(content_dir):
    store = ContentStore(content_dir)
    store.load()
    return store


@pytest.fixture
def log_messages():
    """Collect loguru WARNING+ messages emitted during the test"""
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)
