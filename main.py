"""
Representative Chat Gateway server

Usage:
    python main.py            # reload on code changes when ENVIRONMENT=development
    python main.py --no-reload
"""

import argparse

import uvicorn
from loguru import logger

from rep_gateway.config.settings import settings, PROJECT_ROOT
from rep_gateway.utils.logger import setup_logger


def main():
    """Start the FastAPI server"""
    parser = argparse.ArgumentParser(description="Run the representative chat gateway")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument("--no-reload", action="store_true", help="Disable auto-reload in development")
    args = parser.parse_args()

    setup_logger()
    reload = settings.environment == "development" and not args.no_reload

    logger.info("=" * 80)
    logger.info("Representative Chat Gateway - API Server")
    logger.info("=" * 80)
    logger.info(f"Server will be available at: http://localhost:{args.port}")
    logger.info(f"API Documentation: http://localhost:{args.port}/docs")
    logger.info(f"Health Check: http://localhost:{args.port}/healthz")
    logger.info(f"Chat Streaming: POST http://localhost:{args.port}/chat")
    logger.info("=" * 80)

    uvicorn.run(
        "rep_gateway.api.app:app",
        host=args.host,
        port=args.port,
        reload=reload,
        reload_dirs=[str(PROJECT_ROOT / "rep_gateway")] if reload else None,
        log_level=settings.log_level.lower(),
        access_log=False,
        timeout_graceful_shutdown=30,
    )


if __name__ == "__main__":
    main()
