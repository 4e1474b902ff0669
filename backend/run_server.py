"""Standalone script to run the API server.

Run from the backend directory:
    python run_server.py

The listen port comes from the PORT environment variable (default 3000).
"""

import logging

import uvicorn

from voicebot.config import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def main() -> None:
    """Run the FastAPI app under uvicorn."""
    logger.info("Server listening on port %d", settings.port)
    logger.info("WebSocket proxy available at /ws/realtime on the same port")
    uvicorn.run(
        "voicebot.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
