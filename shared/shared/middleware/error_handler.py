"""Uniform JSON error envelope for every service.

Shape::

    {"error": {"code": "...", "kind": "...", "message": "..."}, "request_id": "..."}

``HTTPException.detail`` may be a plain string (code derived from the status)
or a dict carrying ``code``/``kind``/``message`` set by a controller.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

_STATUS_KINDS: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "VALIDATION_ERROR",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHENTICATED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_409_CONFLICT: "CONFLICT",
    422: "VALIDATION_ERROR",
    status.HTTP_429_TOO_MANY_REQUESTS: "RATE_LIMITED",
    status.HTTP_502_BAD_GATEWAY: "UPSTREAM_FAILURE",
}


def _kind_for_status(status_code: int) -> str:
    if status_code in _STATUS_KINDS:
        return _STATUS_KINDS[status_code]
    return "INTERNAL_ERROR" if status_code >= 500 else "HTTP_ERROR"


def error_body(
    request: Request,
    *,
    code: str,
    kind: str,
    message: str,
    **extra: Any,
) -> dict:
    error: dict[str, Any] = {"code": code, "kind": kind, "message": message}
    error.update(extra)
    return {
        "error": error,
        "request_id": getattr(request.state, "request_id", None),
    }


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    kind = _kind_for_status(exc.status_code)
    if isinstance(exc.detail, dict):
        body = error_body(
            request,
            code=exc.detail.get("code", kind),
            kind=exc.detail.get("kind", kind),
            message=exc.detail.get("message", ""),
        )
    else:
        body = error_body(request, code=kind, kind=kind, message=str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=body,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            request,
            code="VALIDATION_ERROR",
            kind="VALIDATION_ERROR",
            message="Validation failed",
            issues=jsonable_encoder(exc.errors(), exclude={"ctx", "url"}),
        ),
    )


async def error_envelope_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(
                request,
                code="INTERNAL_ERROR",
                kind="INTERNAL_ERROR",
                message="An unexpected error occurred",
            ),
        )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
