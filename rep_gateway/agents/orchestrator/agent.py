"""
Conversation Orchestrator

Sequences one chat turn through the guardrails, the provider and the content
store, and turns the provider stream into protocol events.

Pre-stream workflow (LangGraph):
    START → validate_input → classify → validate_intent → assemble_context → END
    (refusals route straight to END; errors raise out of the graph)

States:
    RECEIVED → INPUT_VALIDATED → INTENT_CLASSIFIED → INTENT_VALIDATED
             → CONTEXT_ASSEMBLED → STREAMING → COMPLETED | REFUSED | ERRORED | TIMED_OUT

Checks are ordered cheapest first: the syntactic input check runs before the
classification call, and the intent check runs before the streaming call.
"""

import asyncio
import time
import uuid
from typing import AsyncIterator, Optional

from langgraph.graph import StateGraph, END
from loguru import logger

from rep_gateway.api.schemas.chat import ChatRequest, ProtocolEvent, ToolCall
from rep_gateway.config.constants import (
    SCHEDULING_MESSAGE,
    STREAM_ERROR_MESSAGE,
    STREAM_START_ERROR_MESSAGE,
    STREAM_TIMEOUT_MESSAGE,
)
from rep_gateway.config.settings import settings
from rep_gateway.content.store import ContentStore
from rep_gateway.guardrails.pipeline import GuardrailPipeline
from rep_gateway.models.domain import StreamUnitKind, ToolName
from rep_gateway.providers.base import ProviderAdapter
from rep_gateway.agents.orchestrator.context import OrchestratorContext
from rep_gateway.agents.orchestrator.nodes import (
    assemble_context_node,
    classify_node,
    validate_input_node,
    validate_intent_node,
)
from rep_gateway.agents.orchestrator.state import ConversationState, TurnContext, TurnState
from rep_gateway.agents.orchestrator.streaming import ProviderStream


def _route_after_check(state: TurnState) -> str:
    """Stop at END once a guardrail has refused the turn."""
    return "stop" if state.get("next_step") == "stop" else "continue"


class ConversationOrchestrator:
    """
    Per-request state machine for the /chat endpoint.

    ``prepare`` runs everything up to the streaming call and raises for
    failures that must be reported as a plain HTTP error. ``stream`` yields the
    protocol events for a prepared turn.
    """

    def __init__(
        self,
        provider: ProviderAdapter,
        content_store: ContentStore,
        guardrails: Optional[GuardrailPipeline] = None,
        stream_timeout: Optional[float] = None,
        queue_depth: Optional[int] = None,
        response_audit: Optional[bool] = None,
    ):
        self.provider = provider
        self.content_store = content_store
        self.guardrails = guardrails or GuardrailPipeline()
        self.stream_timeout = stream_timeout if stream_timeout is not None else settings.sse_timeout_seconds
        self.queue_depth = queue_depth if queue_depth is not None else settings.stream_queue_depth
        self.response_audit = response_audit if response_audit is not None else settings.response_audit_enabled

        self.ctx = OrchestratorContext(
            provider=provider,
            content_store=content_store,
            guardrails=self.guardrails,
        )
        self.workflow = self._build_workflow()

    def _build_workflow(self):
        """Build the LangGraph pre-stream workflow."""
        ctx = self.ctx
        workflow = StateGraph(TurnState)

        async def classify(state: TurnState) -> TurnState:
            return await classify_node(state, ctx)

        workflow.add_node("validate_input", lambda s: validate_input_node(s, ctx))
        workflow.add_node("classify", classify)
        workflow.add_node("validate_intent", lambda s: validate_intent_node(s, ctx))
        workflow.add_node("assemble_context", lambda s: assemble_context_node(s, ctx))

        workflow.set_entry_point("validate_input")
        workflow.add_conditional_edges(
            "validate_input",
            _route_after_check,
            {"continue": "classify", "stop": END},
        )
        workflow.add_edge("classify", "validate_intent")
        workflow.add_conditional_edges(
            "validate_intent",
            _route_after_check,
            {"continue": "assemble_context", "stop": END},
        )
        workflow.add_edge("assemble_context", END)

        return workflow.compile()

    async def prepare(self, request: ChatRequest, request_id: Optional[str] = None) -> TurnContext:
        """
        Validate input, classify and validate intent, and assemble context.

        Returns a TurnContext in CONTEXT_ASSEMBLED or REFUSED state.

        Raises:
            RequestValidationError: no user-authored message in the request
            ProviderError: intent classification failed
        """
        turn = TurnContext(request_id=request_id or uuid.uuid4().hex, history=list(request.messages))
        initial_state: TurnState = {"turn": turn, "next_step": "continue"}

        final_state = await self.workflow.ainvoke(initial_state)
        return final_state["turn"]

    async def stream(self, turn: TurnContext) -> AsyncIterator[ProtocolEvent]:
        """Protocol events for a prepared turn, ending when the turn reaches a terminal state."""
        if turn.refused:
            yield ProtocolEvent.guardrail(self.guardrails.get_refusal_message())
            return

        started = time.monotonic()
        turn.transition(ConversationState.STREAMING)
        yield ProtocolEvent.connected()

        try:
            units = self.provider.stream_chat(turn.history, turn.system_prompt)
        except Exception as e:
            logger.error(f"Failed to start streaming chat: {e}")
            turn.transition(ConversationState.ERRORED)
            yield ProtocolEvent.error(STREAM_START_ERROR_MESSAGE)
            return

        stream = ProviderStream(units, queue_depth=self.queue_depth)
        stream.start()
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.stream_timeout

        try:
            while True:
                try:
                    unit = await stream.receive(deadline - loop.time())
                except asyncio.TimeoutError:
                    logger.warning("Streaming timeout")
                    turn.transition(ConversationState.TIMED_OUT)
                    yield ProtocolEvent.error(STREAM_TIMEOUT_MESSAGE)
                    return

                if unit is None:
                    turn.transition(ConversationState.COMPLETED)
                    logger.info(
                        f"Chat stream completed in {time.monotonic() - started:.2f}s "
                        f"(intent={turn.intent.type.value}, response_length={len(turn.response_text)})"
                    )
                    self._audit_response(turn)
                    return

                if unit.kind is StreamUnitKind.TEXT:
                    turn.response_parts.append(unit.content)
                    yield ProtocolEvent.text(unit.content)

                elif unit.kind is StreamUnitKind.TOOL_CALL:
                    event = self._intercept_tool(turn, unit.tool)
                    yield event
                    if turn.refused:
                        return

                else:
                    logger.error(f"Error in chat stream: {unit.error}")
                    turn.transition(ConversationState.ERRORED)
                    yield ProtocolEvent.error(STREAM_ERROR_MESSAGE)
                    return
        finally:
            stream.abandon()

    async def run(self, request: ChatRequest, request_id: Optional[str] = None) -> AsyncIterator[ProtocolEvent]:
        """prepare + stream in one call (pre-stream failures still raise)."""
        turn = await self.prepare(request, request_id=request_id)
        async for event in self.stream(turn):
            yield event

    def _intercept_tool(self, turn: TurnContext, tool: Optional[ToolCall]) -> ProtocolEvent:
        """
        Validate a provider tool call and decide what the caller sees.

        A rejected tool refuses the turn. The scheduling tool is rewritten into
        the canned Calendly text; any other accepted tool is forwarded as-is.
        """
        verdict = self.guardrails.validate_tool(tool)
        if not verdict.allowed:
            logger.warning(f"Tool call failed validation: {verdict.reason}")
            turn.transition(ConversationState.REFUSED)
            return ProtocolEvent.guardrail(self.guardrails.get_refusal_message())

        logger.info(f"Tool call proposed: {tool.name} {tool.parameters}")

        if ToolName.lookup(tool.name) is ToolName.SCHEDULE_CALENDLY_MEETING:
            return ProtocolEvent.text(SCHEDULING_MESSAGE)
        return ProtocolEvent.tool_call(tool)

    def _audit_response(self, turn: TurnContext) -> None:
        """Run the response guardrail on the finished answer. Logged only; never alters output."""
        if not self.response_audit or turn.intent is None:
            return
        verdict = self.guardrails.validate_response(turn.response_text, turn.intent.type, turn.grounding_text)
        if not verdict.allowed:
            logger.warning(f"Response audit flagged completed stream: {verdict.reason}")
