"""
Main FastAPI application for the representative chat gateway

This module creates and configures the FastAPI application with:
- Content packs loaded once at startup
- The conversation orchestrator wired to the configured LLM provider
- Request id, access logging, security header and CORS middleware
- Chat streaming, health and privacy routes
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError as BodyValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from rep_gateway import __version__
from rep_gateway.agents.orchestrator import ConversationOrchestrator
from rep_gateway.api.middleware import REQUEST_ID_HEADER, RequestContextMiddleware, SecurityHeadersMiddleware
from rep_gateway.api.routes import chat, health
from rep_gateway.api.schemas.chat import ErrorResponse
from rep_gateway.config.settings import settings
from rep_gateway.content.store import ContentStore
from rep_gateway.providers.base import ProviderAdapter
from rep_gateway.utils.errors import GatewayError, ProviderError

STATUS_TEXT = {
    400: "Bad Request",
    500: "Internal Server Error",
}


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=STATUS_TEXT.get(status_code, "Error"),
            message=message,
            code=status_code,
        ).model_dump(),
    )


def _describe_validation_error(exc: BodyValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


def create_app(
    provider: Optional[ProviderAdapter] = None,
    content_store: Optional[ContentStore] = None,
) -> FastAPI:
    """
    Build the application.

    Tests pass a fake provider and a preloaded content store; in production
    both are created during startup from settings.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup: load content packs and wire the orchestrator.
        Shutdown: log only; nothing is held open between requests.
        """
        logger.info(
            f"🚀 Starting representative gateway (environment={settings.environment}, "
            f"build={settings.build_sha}, timezone={settings.timezone})"
        )

        store = content_store
        if store is None:
            store = ContentStore(settings.content_dir_resolved)
            store.load()

        adapter = provider
        if adapter is None:
            from rep_gateway.llm.client import describe_provider, validate_ollama_model
            from rep_gateway.providers.langchain_provider import LangChainProvider

            logger.info(f"✅ LLM Provider: {describe_provider()}")
            if settings.llm_provider.lower() == "ollama":
                validate_ollama_model()
            adapter = LangChainProvider()

        app.state.content_store = store
        app.state.orchestrator = ConversationOrchestrator(adapter, store)
        logger.info(f"🔄 Streaming endpoint at POST /chat ({len(store.get_all_documents())} content packs)")

        yield

        logger.info("🛑 Representative gateway shutting down")

    app = FastAPI(
        title="Representative Chat Gateway",
        description=(
            "Streams guardrailed answers about Jai over Server-Sent Events. "
            "POST /chat with the visible conversation; read `data:` frames until the connection closes."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    @app.exception_handler(BodyValidationError)
    async def body_validation_handler(request: Request, exc: BodyValidationError):
        message = _describe_validation_error(exc)
        logger.warning(f"Rejected malformed request: {message}")
        return _error_response(400, message)

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        if isinstance(exc, ProviderError):
            return _error_response(exc.status_code, "Failed to process request")
        return _error_response(exc.status_code, str(exc))

    # Middleware runs outermost-last-added: request context wraps everything
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.allowed_origin],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=[
            "Accept",
            "Content-Type",
            "Content-Length",
            "Accept-Encoding",
            "X-CSRF-Token",
            "Authorization",
            REQUEST_ID_HEADER,
            "Cache-Control",
        ],
        expose_headers=[REQUEST_ID_HEADER],
        max_age=300,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(chat.router)
    app.include_router(health.router)

    return app


app = create_app()
