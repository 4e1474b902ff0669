"""Session and login models."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Session(BaseModel):
    """Server-side login state, keyed by the session token."""

    id: str
    user_id: int
    username: str
    created_at: datetime = Field(default_factory=_utcnow)


class LoginRequest(BaseModel):
    """Credentials posted to ``/api/auth``."""

    username: Optional[str] = None
    password: Optional[str] = None


class UserInfo(BaseModel):
    username: str


class LoginResponse(BaseModel):
    success: bool
    message: str
    user: Optional[UserInfo] = None


class AuthStatus(BaseModel):
    authenticated: bool
    user: Optional[UserInfo] = None
