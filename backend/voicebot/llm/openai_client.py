"""OpenAI REST client for chat completions and realtime sessions.

Talks to the REST endpoints directly with httpx so the streamed body can
be fed through our own event-stream decoder.
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Optional
from urllib.parse import urlencode

import httpx

from voicebot.config import Settings, settings as default_settings
from voicebot.llm.errors import EmptyCompletionError, MissingAPIKeyError, ProviderHTTPError
from voicebot.llm.sse import aiter_events
from voicebot.persona.loader import get_voice_instructions

logger = logging.getLogger(__name__)


def _error_payload(response: httpx.Response) -> Any:
    """Provider error body as JSON when possible, raw text otherwise."""
    try:
        return response.json()
    except ValueError:
        return response.text


def _first_message_text(data: Any) -> Optional[str]:
    """``choices[0].message.content`` stripped, or None if absent."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(content, str):
        return None
    return content.strip() or None


def extract_delta_text(data: str) -> Optional[str]:
    """Pull ``choices[0].delta.content`` out of one streamed event payload.

    Returns None for payloads that are not JSON or carry no text (role
    headers, finish markers, usage blocks).
    """
    try:
        chunk = json.loads(data)
        token = chunk["choices"][0]["delta"].get("content")
    except (ValueError, KeyError, IndexError, TypeError, AttributeError):
        logger.debug("Skipping malformed stream frame: %r", data[:120])
        return None
    if isinstance(token, str) and token:
        return token
    return None


def ephemeral_token(session_data: dict[str, Any]) -> str:
    """Return the client secret value from a realtime session response."""
    secret = session_data.get("client_secret")
    if isinstance(secret, dict):
        secret = secret.get("value")
    if not isinstance(secret, str) or not secret:
        raise EmptyCompletionError("Realtime session response has no client_secret")
    return secret


class OpenAIClient:
    """Async client for the provider's REST API.

    The underlying ``httpx.AsyncClient`` is created on first use and
    released by :meth:`close`.
    """

    def __init__(
        self,
        config: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = config or default_settings
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def configured(self) -> bool:
        return self._settings.provider_configured

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._settings.openai_base_url,
                timeout=httpx.Timeout(self._settings.openai_timeout_sec),
                transport=self._transport,
            )
            logger.info(
                "OpenAIClient initialized (base_url=%s, model=%s)",
                self._settings.openai_base_url,
                self._settings.openai_model,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
        logger.info("OpenAIClient closed")

    def _headers(self) -> dict[str, str]:
        if not self.configured:
            raise MissingAPIKeyError()
        return {
            "Authorization": f"Bearer {self._settings.openai_api_key.strip()}",
            "Content-Type": "application/json",
        }

    def _completion_body(self, messages: list[dict[str, str]], *, stream: bool) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self._settings.openai_model,
            "messages": messages,
            "temperature": self._settings.chat_temperature,
            "max_tokens": self._settings.chat_max_tokens,
        }
        if stream:
            body["stream"] = True
        return body

    async def complete(self, messages: list[dict[str, str]]) -> str:
        """Run one completion and return the first choice's text.

        Raises:
            MissingAPIKeyError: No API key configured; nothing was sent.
            ProviderHTTPError: The provider answered with an error status.
            EmptyCompletionError: The answer carried no text.
            httpx.HTTPError: Transport failure or timeout.
        """
        headers = self._headers()
        response = await self._http().post(
            "/chat/completions",
            json=self._completion_body(messages, stream=False),
            headers=headers,
        )

        if response.is_error:
            payload = _error_payload(response)
            logger.error(
                "Chat completion failed %d: %s",
                response.status_code,
                str(payload)[:200],
            )
            raise ProviderHTTPError(response.status_code, payload)

        try:
            data = response.json()
        except ValueError:
            data = None

        reply = _first_message_text(data)
        if reply is None:
            logger.error("Chat completion returned no text: %s", response.text[:200])
            raise EmptyCompletionError("Empty response from model")
        return reply

    async def stream_tokens(self, messages: list[dict[str, str]]) -> AsyncIterator[str]:
        """Open a streamed completion and yield text deltas in order.

        The upstream response stays open only while the generator is being
        consumed; closing or cancelling the consumer closes it too.
        """
        headers = self._headers()
        timeout = httpx.Timeout(self._settings.openai_timeout_sec, read=None)

        async with self._http().stream(
            "POST",
            "/chat/completions",
            json=self._completion_body(messages, stream=True),
            headers=headers,
            timeout=timeout,
        ) as response:
            if response.is_error:
                await response.aread()
                payload = _error_payload(response)
                logger.error(
                    "Streamed completion failed %d: %s",
                    response.status_code,
                    str(payload)[:200],
                )
                raise ProviderHTTPError(response.status_code, payload)

            async for event in aiter_events(response.aiter_bytes()):
                if event.is_done:
                    return
                token = extract_delta_text(event.data)
                if token is not None:
                    yield token

    async def create_realtime_session(self) -> dict[str, Any]:
        """Mint an ephemeral credential for a voice session.

        Returns the provider's session object; ``client_secret`` and ``id``
        are the fields callers need.
        """
        headers = self._headers()
        body = {
            "model": self._settings.openai_realtime_model,
            "instructions": get_voice_instructions(),
            "voice": self._settings.realtime_voice,
            "tools": [],
            "tool_choice": "auto",
            "temperature": self._settings.chat_temperature,
            "max_response_output_tokens": self._settings.chat_max_tokens,
        }
        response = await self._http().post("/realtime/sessions", json=body, headers=headers)

        if response.is_error:
            payload = _error_payload(response)
            logger.error(
                "Realtime session creation failed %d: %s",
                response.status_code,
                str(payload)[:200],
            )
            raise ProviderHTTPError(response.status_code, payload)

        try:
            data = response.json()
        except ValueError as exc:
            raise EmptyCompletionError("Realtime session response is not JSON") from exc
        if not isinstance(data, dict):
            raise EmptyCompletionError("Realtime session response is not an object")
        return data

    def realtime_url(self) -> str:
        """Provider realtime socket URL for the configured voice model."""
        query = urlencode({"model": self._settings.openai_realtime_model})
        return f"{self._settings.openai_realtime_url}?{query}"
