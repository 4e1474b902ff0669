"""FastAPI application entry point with lifespan management."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from voicebot.api.errors import add_exception_handlers
from voicebot.api.realtime import realtime_proxy
from voicebot.api.router import api_router
from voicebot.config import settings
from voicebot.dependencies import close_llm_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle."""
    logger.info("Starting voice chatbot backend...")
    if not settings.provider_configured:
        logger.warning("OPENAI_API_KEY is not set; chat and realtime endpoints will return 500")

    yield

    await close_llm_client()
    logger.info("Voice chatbot backend shut down cleanly")


app = FastAPI(
    title="Voice Chatbot API",
    description="Persona chatbot relay for chat completions, streaming and realtime voice",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)

# Mount API routes
app.include_router(api_router, prefix="/api")

# Mount WebSocket endpoint (outside /api prefix to match frontend expectations)
app.websocket("/ws/realtime")(realtime_proxy)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
