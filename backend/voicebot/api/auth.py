"""Demo login endpoints backed by the in-memory session store."""

from __future__ import annotations

import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Response
from fastapi.responses import JSONResponse

from voicebot.config import Settings, get_settings
from voicebot.dependencies import get_session_store
from voicebot.memory.session_store import SessionStore, generate_session_id
from voicebot.models.sessions import AuthStatus, LoginRequest, LoginResponse, Session, UserInfo

logger = logging.getLogger(__name__)
router = APIRouter()

SESSION_COOKIE = "sessionId"
DEMO_USER_ID = 1


def _credentials_match(payload: LoginRequest, settings: Settings) -> bool:
    if payload.username is None or payload.password is None:
        return False
    # Evaluate both comparisons so timing does not reveal which one failed.
    user_ok = secrets.compare_digest(
        payload.username.encode("utf-8"), settings.demo_username.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        payload.password.encode("utf-8"), settings.demo_password.encode("utf-8")
    )
    return user_ok and password_ok


def _set_session_cookie(response: Response, session_id: str, max_age: int) -> None:
    response.set_cookie(
        SESSION_COOKIE,
        session_id,
        max_age=max_age,
        path="/",
        httponly=True,
        secure=True,
        samesite="strict",
    )


@router.post("", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    store: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
):
    """Validate the demo credential and issue a session cookie."""
    if not _credentials_match(payload, settings):
        logger.info("Rejected login for username=%r", payload.username)
        return JSONResponse(
            status_code=401,
            content=LoginResponse(success=False, message="Invalid credentials").model_dump(
                exclude_none=True
            ),
        )

    session = Session(
        id=generate_session_id(),
        user_id=DEMO_USER_ID,
        username=settings.demo_username,
    )
    store.put(session)
    _set_session_cookie(response, session.id, settings.session_max_age)
    logger.info("Login successful for username=%s", session.username)

    return LoginResponse(
        success=True,
        message="Login successful",
        user=UserInfo(username=session.username),
    )


@router.get("", response_model=AuthStatus, response_model_exclude_none=True)
async def check_session(
    session_id: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
    store: SessionStore = Depends(get_session_store),
):
    """Report whether the session cookie maps to a live session."""
    session = store.get(session_id) if session_id else None
    if session is None:
        return JSONResponse(status_code=401, content={"authenticated": False})

    return AuthStatus(authenticated=True, user=UserInfo(username=session.username))


@router.delete("", response_model=LoginResponse, response_model_exclude_none=True)
async def logout(
    response: Response,
    session_id: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
    store: SessionStore = Depends(get_session_store),
):
    """Forget the session (if any) and clear the cookie. Always succeeds."""
    if session_id and store.delete(session_id):
        logger.info("Session logged out")
    response.delete_cookie(
        SESSION_COOKIE, path="/", httponly=True, secure=True, samesite="strict"
    )

    return LoginResponse(success=True, message="Logout successful")


@router.api_route("", methods=["PUT", "PATCH"], include_in_schema=False)
async def method_not_allowed() -> JSONResponse:
    return JSONResponse(
        status_code=405,
        content={"success": False, "message": "Method not allowed"},
        headers={"Allow": "GET, POST, DELETE"},
    )
