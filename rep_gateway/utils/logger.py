"""
Logging utility with loguru.
Provides structured logging with file rotation and per-request context.
"""

import sys
from pathlib import Path

from loguru import logger

from rep_gateway.config.settings import settings, PROJECT_ROOT


def setup_logger(level: str | None = None, log_dir: Path | None = None):
    """
    Configure loguru logger with console and file outputs.

    The console format includes the request id bound via
    ``logger.contextualize(request_id=...)`` by the request middleware.
    """
    logger.remove()
    logger.configure(extra={"request_id": "-"})

    logger.add(
        sys.stdout,
        colorize=True,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
            "<magenta>{extra[request_id]}</magenta> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
        ),
        level=level or settings.log_level,
    )

    log_dir = log_dir or PROJECT_ROOT / "data" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_dir / "gateway.log",
        rotation="10 MB",
        retention="1 week",
        compression="zip",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[request_id]} | {name}:{function}:{line} - {message}",
        level="DEBUG",
    )

    logger.info("Logger initialized")
    return logger
