"""Health check endpoint for infrastructure monitoring."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from voicebot.config import Settings, get_settings

router = APIRouter()

SERVICE_NAME = "voice-chatbot-backend"


@router.get("")
async def health_check(
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Report liveness and whether the provider key is configured."""
    return {
        "ok": True,
        "service": SERVICE_NAME,
        "time": datetime.now(timezone.utc).isoformat(),
        "provider_configured": settings.provider_configured,
    }
