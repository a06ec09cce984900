"""
Configuration management for the gateway.
Loads settings from environment variables and the project .env file.
"""

from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from loguru import logger

# Find project root (where .env and content/ live)
# This file is at rep_gateway/config/settings.py, so project root is 3 levels up
_project_root = Path(__file__).resolve().parent.parent.parent

PROJECT_ROOT = _project_root

_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(dotenv_path=_env_file, override=True)
    logger.debug(f"Loaded .env from: {_env_file}")
else:
    logger.debug(f".env file not found at: {_env_file}, using process environment")


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Server
    port: int = Field(default=8080)
    allowed_origin: str = Field(default="http://localhost:3000")
    environment: str = Field(default="development")
    build_sha: str = Field(default="local")
    log_level: str = Field(default="INFO")

    # LLM Provider Selection
    llm_provider: str = Field(default="openai")  # Options: "openai" | "ollama"

    # OpenAI Configuration
    openai_api_key: str = Field(default="")
    openai_model: str = Field(default="gpt-4o-mini")
    openai_temperature: float = Field(default=0.7)

    # Intent classification runs colder than the chat model
    classifier_temperature: float = Field(default=0.3)

    # Ollama Configuration
    ollama_base_url: str = Field(default="http://localhost:11434")
    ollama_model: str = Field(default="llama3")

    # Token Limits
    max_output_tokens: int = Field(default=2048)

    # Streaming
    sse_timeout_seconds: float = Field(default=300.0)  # Per-request deadline for the provider stream
    stream_queue_depth: int = Field(default=1, ge=1)  # Max provider chunks buffered ahead of the consumer

    # Response audit (observational validate_response on completed streams)
    response_audit_enabled: bool = Field(default=True)

    # Content packs
    content_dir: str = Field(default="content")

    # Timezone used in the system prompt and scheduling copy
    timezone: str = Field(default="America/Los_Angeles")

    class Config:
        env_file = str(_project_root / ".env")
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def content_dir_resolved(self) -> Path:
        """Content directory as an absolute path (relative paths hang off the project root)"""
        path = Path(self.content_dir)
        if not path.is_absolute():
            path = _project_root / path
        return path

    def get_timezone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


# Create global settings instance
settings = Settings()
