"""Realtime voice endpoints: ephemeral session minting and the socket proxy."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import APIRouter, Depends, WebSocket

from voicebot.api.errors import APIError
from voicebot.dependencies import get_llm_client, get_realtime_connector
from voicebot.llm.errors import ProviderError
from voicebot.llm.openai_client import OpenAIClient
from voicebot.realtime.proxy import Connector, RealtimeProxy

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/session")
async def create_session(
    llm_client: OpenAIClient = Depends(get_llm_client),
) -> dict[str, Any]:
    """Mint an ephemeral credential the browser can use directly."""
    if not llm_client.configured:
        raise APIError(500, "Missing OPENAI_API_KEY")

    try:
        data = await llm_client.create_realtime_session()
    except (ProviderError, httpx.HTTPError) as exc:
        logger.error("Realtime session error: %s", exc)
        raise APIError(500, "Failed to create realtime session")

    return {
        "client_secret": data.get("client_secret"),
        "session_id": data.get("id"),
    }


async def realtime_proxy(
    websocket: WebSocket,
    llm_client: OpenAIClient = Depends(get_llm_client),
    connect: Connector = Depends(get_realtime_connector),
) -> None:
    """Bridge the browser socket to the provider's realtime endpoint."""
    await RealtimeProxy(websocket, llm_client, connect).run()
