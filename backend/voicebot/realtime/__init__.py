"""Realtime module - WebSocket proxy to the provider's realtime voice API."""

from .proxy import Connector, RealtimeProxy

__all__ = ["Connector", "RealtimeProxy"]
