"""Exceptions raised by the provider client."""

from typing import Any


class ProviderError(Exception):
    """Base class for failures talking to the LLM provider."""


class MissingAPIKeyError(ProviderError):
    """No API key is configured, so no request was attempted."""

    def __init__(self) -> None:
        super().__init__("Missing OPENAI_API_KEY")


class ProviderHTTPError(ProviderError):
    """The provider answered with a non-success status."""

    def __init__(self, status_code: int, payload: Any) -> None:
        super().__init__(f"Provider returned HTTP {status_code}")
        self.status_code = status_code
        self.payload = payload


class EmptyCompletionError(ProviderError):
    """The provider answered 2xx but carried no usable text."""
