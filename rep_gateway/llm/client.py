"""
LLM client factory

Creates the LangChain chat model for the configured provider.
"""

from typing import Optional
from loguru import logger

from rep_gateway.config.settings import settings


def describe_provider() -> str:
    """One-line provider summary for startup logs (API key masked)."""
    provider = settings.llm_provider.lower()
    if provider == "openai":
        key = settings.openai_api_key
        if not key:
            return f"OpenAI | Model: {settings.openai_model} | OPENAI_API_KEY not set"
        masked_key = key[:8] + "..." + key[-4:] if len(key) > 12 else "***"
        return f"OpenAI | Model: {settings.openai_model} | API key loaded: {masked_key}"
    if provider == "ollama":
        return f"Ollama | Base URL: {settings.ollama_base_url} | Model: {settings.ollama_model}"
    return f"Unknown provider '{settings.llm_provider}'"


def validate_ollama_model(model: Optional[str] = None) -> bool:
    """Check that the configured Ollama model is pulled on the server."""
    import httpx

    model_to_use = model or settings.ollama_model
    try:
        response = httpx.get(f"{settings.ollama_base_url}/api/tags", timeout=3.0)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(
            f"⚠️  Could not reach Ollama at {settings.ollama_base_url} to validate model: {e}"
        )
        return False

    available_models = [m.get("name", "").split(":")[0] for m in response.json().get("models", [])]
    if model_to_use.split(":")[0] not in available_models:
        logger.error(
            f"❌ Ollama model '{model_to_use}' is not available on the server. "
            f"Available models: {', '.join(available_models) if available_models else 'None'}. "
            f"To install: ollama pull {model_to_use}"
        )
        return False

    logger.debug(f"✅ Ollama model '{model_to_use}' is available")
    return True


def create_llm(temperature: Optional[float] = None, max_completion_tokens: Optional[int] = None, model: Optional[str] = None):
    """
    Factory function to create appropriate LLM based on provider configuration.

    Args:
        temperature: Generation temperature (defaults to settings.openai_temperature)
        max_completion_tokens: Max tokens for completion (defaults to settings.max_output_tokens)
        model: Model name (defaults to provider-specific model)

    Returns:
        LangChain ChatModel instance (ChatOpenAI or ChatOllama)
    """
    provider = settings.llm_provider.lower()
    max_tokens = max_completion_tokens or settings.max_output_tokens
    temperature = temperature if temperature is not None else settings.openai_temperature

    if provider == "openai":
        from langchain_openai import ChatOpenAI

        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required when LLM_PROVIDER=openai")

        return ChatOpenAI(
            model=model or settings.openai_model,
            api_key=settings.openai_api_key,
            temperature=temperature,
            max_completion_tokens=max_tokens,
            streaming=True,
        )

    elif provider == "ollama":
        from langchain_community.chat_models import ChatOllama

        return ChatOllama(
            model=model or settings.ollama_model,
            base_url=settings.ollama_base_url,
            temperature=temperature,
            num_predict=max_tokens,  # Ollama uses num_predict instead of max_completion_tokens
        )

    else:
        raise ValueError(f"Unsupported LLM provider: {provider}. Supported: 'openai', 'ollama'")
