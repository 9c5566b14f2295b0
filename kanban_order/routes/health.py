"""Liveness probe with a database round trip."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError

from kanban_order.db.base import get_engine

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", summary="Service and database health")
def health() -> JSONResponse:
    try:
        with get_engine().connect() as conn:
            conn.execute(sql_text("SELECT 1")).fetchone()
    except SQLAlchemyError as e:
        logger.error("Health DB check failed", exc_info=True)
        return JSONResponse({"status": "degraded", "db": False, "reason": str(e)}, status_code=503)
    return JSONResponse({"status": "ok", "db": True})


__all__ = ["router"]
