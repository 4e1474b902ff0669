"""In-memory store for login sessions.

Sessions live only in process memory and are lost on restart. There is
no server-side expiry: a session stays valid until logout, and only the
cookie ``Max-Age`` limits how long a browser presents it.
"""

from __future__ import annotations

import secrets
from typing import Dict, Optional, Protocol

from voicebot.models.sessions import Session

TOKEN_BYTES = 32


def generate_session_id() -> str:
    """Return an unguessable 64-character hex token."""
    return secrets.token_hex(TOKEN_BYTES)


class SessionStore(Protocol):
    """Minimal storage interface used by the auth endpoint."""

    def get(self, session_id: str) -> Optional[Session]: ...

    def put(self, session: Session) -> None: ...

    def delete(self, session_id: str) -> bool: ...


class InMemorySessionStore:
    """Dict-backed ``SessionStore``.

    Every operation completes without awaiting, so callers on the event
    loop never observe a partially applied change.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def put(self, session: Session) -> None:
        self._sessions[session.id] = session

    def delete(self, session_id: str) -> bool:
        """Remove a session. Returns False if it was not present."""
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)
