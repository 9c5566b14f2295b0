"""FastAPI application package for the Kanban ordering service.

This package exposes a small FastAPI application factory around the
ordered-position engine. Ordering logic lives in `kanban_order/logic/` and
route handlers in `kanban_order/routes/`.
"""

from __future__ import annotations

from kanban_order.main import create_app

__all__ = ["create_app"]
