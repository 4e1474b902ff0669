"""Dependency injection providers for FastAPI."""

import websockets

from voicebot.llm.openai_client import OpenAIClient
from voicebot.memory.session_store import InMemorySessionStore, SessionStore
from voicebot.realtime.proxy import Connector

# Process-wide singletons, created on first use
_session_store: InMemorySessionStore | None = None
_llm_client: OpenAIClient | None = None


def get_session_store() -> SessionStore:
    """Return singleton session store instance."""
    global _session_store
    if _session_store is None:
        _session_store = InMemorySessionStore()
    return _session_store


def get_llm_client() -> OpenAIClient:
    """Return singleton OpenAIClient instance."""
    global _llm_client
    if _llm_client is None:
        _llm_client = OpenAIClient()
    return _llm_client


def get_realtime_connector() -> Connector:
    """Return the callable that opens the upstream realtime socket."""
    return websockets.connect


async def close_llm_client() -> None:
    """Release the provider HTTP client, if one was created."""
    global _llm_client
    if _llm_client is not None:
        await _llm_client.close()
        _llm_client = None
