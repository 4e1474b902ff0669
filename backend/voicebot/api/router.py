"""Central API router that aggregates all route modules."""

from fastapi import APIRouter

from voicebot.api.auth import router as auth_router
from voicebot.api.chat import router as chat_router
from voicebot.api.health import router as health_router
from voicebot.api.realtime import router as realtime_router

api_router = APIRouter()

api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(chat_router, prefix="/chat", tags=["chat"])
api_router.include_router(realtime_router, prefix="/realtime", tags=["realtime"])
