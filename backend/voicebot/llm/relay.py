"""Relay a provider token stream to the browser as server-sent events.

Frames produced for the client::

    data: {"token": "Hi"}      one per text delta, in order
    : ping                     heartbeat while the upstream is quiet
    data: {"error": "..."}     upstream or transport failure
    data: [DONE]               always the last frame
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator

import httpx

from voicebot.llm.errors import ProviderError
from voicebot.llm.sse import DONE_SENTINEL

logger = logging.getLogger(__name__)

HEARTBEAT_FRAME = ": ping\n\n"
DONE_FRAME = f"data: {DONE_SENTINEL}\n\n"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

_END = object()


def format_event(payload: dict[str, Any]) -> str:
    """Serialize one JSON payload as an SSE data frame."""
    return f"data: {json.dumps(payload)}\n\n"


async def relay_tokens(
    tokens: AsyncIterator[str],
    *,
    heartbeat_interval: float = 15.0,
) -> AsyncIterator[str]:
    """Yield SSE frames for ``tokens`` until the stream ends.

    A producer task drains ``tokens`` into a queue so the consumer can
    interleave heartbeats while waiting. When the consumer is closed
    (client disconnect) the producer is cancelled, which closes the
    upstream response held open by ``tokens``.
    """
    queue: asyncio.Queue = asyncio.Queue()

    async def pump() -> None:
        try:
            async for token in tokens:
                await queue.put(format_event({"token": token}))
        except ProviderError as exc:
            logger.error("Upstream stream could not be established: %s", exc)
            await queue.put(format_event({"error": "Upstream error"}))
        except httpx.HTTPError as exc:
            logger.error("Upstream stream failed: %s", exc)
            await queue.put(format_event({"error": "Stream failed"}))
        except Exception:
            logger.exception("Unexpected error while relaying stream")
            await queue.put(format_event({"error": "Stream failed"}))
        finally:
            queue.put_nowait(_END)

    producer = asyncio.create_task(pump())
    try:
        while True:
            try:
                frame = await asyncio.wait_for(queue.get(), timeout=heartbeat_interval)
            except asyncio.TimeoutError:
                yield HEARTBEAT_FRAME
                continue
            if frame is _END:
                break
            yield frame
        yield DONE_FRAME
    finally:
        if not producer.done():
            producer.cancel()
        await asyncio.gather(producer, return_exceptions=True)
