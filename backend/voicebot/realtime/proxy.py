"""Bidirectional WebSocket proxy to the provider's realtime endpoint.

Protocol with the browser:
    Client sends JSON: {"type": "connect"} to open the upstream session
    Server sends JSON: {"type": "connected"} once the upstream socket is open
    Afterwards every frame is forwarded verbatim in both directions.
    Failures are reported as {"type": "error", "error": "..."} before teardown.

The proxy never parses audio or event frames; its only job is to keep the
long-lived API key on the server.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Optional

import anyio
import websockets
from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from voicebot.llm.errors import MissingAPIKeyError
from voicebot.llm.openai_client import OpenAIClient, ephemeral_token

logger = logging.getLogger(__name__)

# Opens the upstream socket: ``await connect(url, additional_headers=...)``.
Connector = Callable[..., Awaitable[Any]]


class RealtimeProxy:
    """Relay frames between one browser socket and one provider socket."""

    def __init__(
        self,
        websocket: WebSocket,
        llm_client: OpenAIClient,
        connect: Connector = websockets.connect,
    ) -> None:
        self._websocket = websocket
        self._llm_client = llm_client
        self._connect = connect
        self._upstream: Any = None

    async def run(self) -> None:
        """Serve the client socket until either side closes."""
        await self._websocket.accept()
        logger.info("Realtime client connected")

        try:
            if not await self._wait_for_connect():
                return
            self._upstream = await self._open_upstream()
            await self._websocket.send_json({"type": "connected"})
            logger.info("Realtime upstream connected")
            await self._relay()
        except WebSocketDisconnect:
            logger.info("Realtime client disconnected")
        except MissingAPIKeyError as exc:
            logger.error("Realtime proxy unavailable: %s", exc)
            await self._send_error(str(exc))
        except Exception as exc:
            logger.exception("Realtime proxy error")
            await self._send_error(str(exc))
        finally:
            with anyio.CancelScope(shield=True):
                await self._teardown()

    async def _wait_for_connect(self) -> bool:
        """Block until the client asks to connect; False if it leaves first."""
        while True:
            message = await self._websocket.receive()
            if message["type"] == "websocket.disconnect":
                return False
            raw = message.get("text")
            if not raw:
                continue
            try:
                data = json.loads(raw)
            except ValueError:
                logger.debug("Ignoring non-JSON frame before connect")
                continue
            if isinstance(data, dict) and data.get("type") == "connect":
                return True

    async def _open_upstream(self) -> Any:
        session = await self._llm_client.create_realtime_session()
        token = ephemeral_token(session)
        return await self._connect(
            self._llm_client.realtime_url(),
            additional_headers={
                "Authorization": f"Bearer {token}",
                "OpenAI-Beta": "realtime=v1",
            },
        )

    async def _relay(self) -> None:
        """Run both forwarding directions until one of them ends.

        Whichever direction finishes first cancels the other. An exception
        from either direction is re-raised once both have stopped.
        """
        errors: list[Exception] = []

        async with anyio.create_task_group() as tg:

            async def forward(direction: Callable[[], Awaitable[None]]) -> None:
                try:
                    await direction()
                except Exception as exc:
                    errors.append(exc)
                finally:
                    tg.cancel_scope.cancel()

            tg.start_soon(forward, self._client_to_upstream, name="client->upstream")
            tg.start_soon(forward, self._upstream_to_client, name="upstream->client")

        if errors:
            raise errors[0]

    async def _client_to_upstream(self) -> None:
        while True:
            message = await self._websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info("Realtime client closed the socket")
                return
            if message.get("text") is not None:
                await self._upstream.send(message["text"])
            elif message.get("bytes") is not None:
                await self._upstream.send(message["bytes"])

    async def _upstream_to_client(self) -> None:
        try:
            async for message in self._upstream:
                if isinstance(message, bytes):
                    await self._websocket.send_bytes(message)
                else:
                    await self._websocket.send_text(message)
        except websockets.ConnectionClosed as exc:
            logger.info("Realtime upstream closed: %s", exc)
            return
        logger.info("Realtime upstream closed")

    def _client_open(self) -> bool:
        return (
            self._websocket.application_state == WebSocketState.CONNECTED
            and self._websocket.client_state == WebSocketState.CONNECTED
        )

    async def _send_error(self, detail: str) -> None:
        if not self._client_open():
            return
        try:
            await self._websocket.send_json({"type": "error", "error": detail})
        except (WebSocketDisconnect, RuntimeError) as exc:
            logger.debug("Could not report error to realtime client: %s", exc)

    async def _teardown(self) -> None:
        upstream: Optional[Any] = self._upstream
        self._upstream = None
        if upstream is not None:
            await upstream.close()

        if self._client_open():
            try:
                await self._websocket.close()
            except RuntimeError as exc:
                logger.debug("Realtime client socket already closed: %s", exc)
