"""APIRouter registration for the Kanban ordering service."""

from __future__ import annotations

from fastapi import APIRouter

from kanban_order.routes.cards import router as cards_router
from kanban_order.routes.checklists import router as checklists_router
from kanban_order.routes.health import router as health_router
from kanban_order.routes.lists import router as lists_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["Health"])
api_router.include_router(lists_router, tags=["Lists"])
api_router.include_router(cards_router, tags=["Cards"])
api_router.include_router(checklists_router, tags=["Checklists"])

__all__ = ["api_router"]
