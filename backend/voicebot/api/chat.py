"""Chat endpoints: single-shot replies and the streaming relay."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from voicebot.api.errors import APIError
from voicebot.config import Settings, get_settings
from voicebot.dependencies import get_llm_client
from voicebot.llm.errors import EmptyCompletionError, ProviderHTTPError
from voicebot.llm.openai_client import OpenAIClient
from voicebot.llm.prompts import build_messages
from voicebot.llm.relay import SSE_HEADERS, relay_tokens
from voicebot.models.messages import ChatReply, ChatRequest, ChatTurn

logger = logging.getLogger(__name__)
router = APIRouter()


def _require_provider(llm_client: OpenAIClient) -> None:
    if not llm_client.configured:
        raise APIError(500, "Missing OPENAI_API_KEY")


@router.post("", response_model=ChatReply)
async def chat(
    payload: ChatRequest,
    llm_client: OpenAIClient = Depends(get_llm_client),
) -> ChatReply:
    """Return the persona's full reply to one message."""
    _require_provider(llm_client)

    message = payload.text()
    if message is None:
        raise APIError(400, "Invalid message")

    messages = build_messages(message, payload.history)
    try:
        reply = await llm_client.complete(messages)
    except EmptyCompletionError:
        raise APIError(502, "Empty response from model")
    except ProviderHTTPError as exc:
        raise APIError(500, "Chat failed", details=exc.payload)
    except httpx.HTTPError as exc:
        logger.error("Chat transport error: %s", exc)
        raise APIError(500, "Chat failed", details=str(exc) or type(exc).__name__)

    return ChatReply(reply=reply)


def _stream_response(
    llm_client: OpenAIClient,
    settings: Settings,
    message: Optional[str],
    history: Optional[Sequence[ChatTurn]] = None,
) -> StreamingResponse:
    _require_provider(llm_client)
    if message is None:
        raise APIError(400, "Missing message")

    tokens = llm_client.stream_tokens(build_messages(message, history))
    return StreamingResponse(
        relay_tokens(tokens, heartbeat_interval=settings.sse_heartbeat_seconds),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("/stream")
async def chat_stream(
    message: str = Query(default=""),
    llm_client: OpenAIClient = Depends(get_llm_client),
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    """Stream the reply to ``?message=`` as server-sent events."""
    return _stream_response(llm_client, settings, message or None)


@router.post("/stream")
async def chat_stream_post(
    payload: ChatRequest,
    llm_client: OpenAIClient = Depends(get_llm_client),
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    """Stream the reply to a JSON body, optionally with prior turns."""
    return _stream_response(llm_client, settings, payload.text(), payload.history)
