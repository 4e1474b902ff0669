"""Shared test fixtures for the voice chatbot backend."""

from collections.abc import AsyncGenerator, Callable, Generator
from typing import Any, Optional

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from voicebot.config import Settings, get_settings
from voicebot.dependencies import get_llm_client, get_session_store
from voicebot.llm.openai_client import OpenAIClient
from voicebot.main import app
from voicebot.memory.session_store import InMemorySessionStore

Handler = Callable[[httpx.Request], Any]


class ProviderMock:
    """Stand-in for the provider's REST API, recording every request."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Optional[Handler] = None

    def __call__(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        if self.handler is None:
            return httpx.Response(500, json={"error": {"message": "no handler configured"}})
        return self.handler(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)


def make_settings(**overrides: Any) -> Settings:
    """Settings isolated from the developer's .env file."""
    values: dict[str, Any] = {"openai_api_key": "sk-test"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


@pytest.fixture
def provider() -> ProviderMock:
    return ProviderMock()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def llm_client(test_settings: Settings, provider: ProviderMock) -> OpenAIClient:
    return OpenAIClient(test_settings, transport=httpx.MockTransport(provider))


@pytest.fixture
def unconfigured_client(provider: ProviderMock) -> OpenAIClient:
    """Provider client with no API key, still wired to the mock."""
    return OpenAIClient(
        make_settings(openai_api_key=""), transport=httpx.MockTransport(provider)
    )


@pytest.fixture(autouse=True)
def overrides(
    test_settings: Settings,
    session_store: InMemorySessionStore,
    llm_client: OpenAIClient,
) -> Generator[dict, None, None]:
    """Route the app's dependencies to per-test instances."""
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_llm_client] = lambda: llm_client
    yield app.dependency_overrides
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def ws_client() -> TestClient:
    """Synchronous client for WebSocket endpoints."""
    return TestClient(app)
