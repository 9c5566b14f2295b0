"""Problem+JSON utilities and global exception handlers.

Defines the RFC7807 media type and handler callables that turn ordering
errors, request validation errors and unexpected failures into
application/problem+json responses.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from kanban_order.http.error_mapping import ORDERING_ERROR_MAP
from kanban_order.logic.errors import InvariantViolation, OrderingError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def _problem(status: int, title: str, detail: str, **extra: object) -> JSONResponse:
    body = {"title": title, "status": status, "detail": detail, **extra}
    return JSONResponse(body, status_code=status, media_type=PROBLEM_MEDIA_TYPE)


async def handle_ordering_error(request: Request, exc: OrderingError) -> JSONResponse:  # noqa: D401
    mapping = ORDERING_ERROR_MAP.get(exc.code, ORDERING_ERROR_MAP["ORDERING_ERROR"])
    status = int(mapping["status"])
    if isinstance(exc, InvariantViolation) or status >= 500:
        # Internal detail stays in the logs
        logger.error("ordering_error code=%s path=%s", exc.code, request.url.path, exc_info=exc)
        return _problem(status, str(mapping["title"]), "ordering invariant violated; nothing was saved", code=exc.code)
    logger.info("error_handler.handle code=%s path=%s", exc.code, request.url.path)
    return _problem(status, str(mapping["title"]), exc.message, code=exc.code)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    return _problem(
        422,
        "Invalid Request",
        "Request validation failed",
        code="REQUEST_VALIDATION_FAILED",
        errors=jsonable_encoder(exc.errors()),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return _problem(500, "Internal Server Error", "unexpected error")


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "handle_ordering_error",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
