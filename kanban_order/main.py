from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from kanban_order.config import load_config
from kanban_order.db.base import get_engine
from kanban_order.db.schema import create_schema
from kanban_order.http.problem import (
    handle_ordering_error,
    handle_request_validation_error,
    handle_unexpected_error,
)
from kanban_order.logging_setup import configure_logging
from kanban_order.logic.errors import OrderingError
from kanban_order.routes import api_router

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def create_app() -> FastAPI:
    """Build the FastAPI application.

    Configures logging before anything else, creates the schema when
    ``auto_create_schema`` is enabled, registers the problem+json handlers
    and mounts the routers under ``/api/v1``.
    """
    configure_logging()
    cfg = load_config()
    if cfg.auto_create_schema:
        create_schema(get_engine())

    app = FastAPI(title="Kanban ordering service")
    app.add_exception_handler(OrderingError, handle_ordering_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.include_router(api_router, prefix=API_PREFIX)
    logger.info(
        "app.created auto_create_schema=%s reject_out_of_range=%s",
        cfg.auto_create_schema,
        cfg.ordering.reject_out_of_range_placement,
    )
    return app


__all__ = ["create_app", "API_PREFIX"]
