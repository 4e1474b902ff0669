"""Error responses shaped as ``{"error": ..., "details": ...}``."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Raised by route handlers to produce a JSON error response."""

    def __init__(self, status_code: int, error: str, details: Optional[Any] = None) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details

    def to_content(self) -> dict[str, Any]:
        content: dict[str, Any] = {"error": self.error}
        if self.details is not None:
            content["details"] = self.details
        return content


def add_exception_handlers(app: FastAPI) -> None:
    """Register the error handlers on the FastAPI app.

    - APIError → its own status and ``{error, details?}`` body
    - RequestValidationError → 400 ``Invalid request`` with the validation errors
    """

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info("Rejected request to %s: %s", request.url.path, exc.errors())
        error = APIError(400, "Invalid request", details=_plain_errors(exc))
        return JSONResponse(status_code=400, content=error.to_content())


def _plain_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Validation errors reduced to JSON-safe location/message pairs."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
