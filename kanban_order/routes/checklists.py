"""Checklist and checklist item ordering routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter

from kanban_order.logic import repository_positions as repo
from kanban_order.models.requests import (
    ChecklistCreate,
    ChecklistItemCreate,
    ChecklistItemMove,
    IndexMove,
)

router = APIRouter()


@router.get("/cards/{card_public_id}/checklists", summary="Live checklists of a card in order")
def get_card_checklists(card_public_id: str) -> list[dict]:
    card_id = repo.checklists.resolve_parent_public_id(card_public_id)
    return repo.checklists.list_live(card_id)


@router.post("/cards/{card_public_id}/checklists", status_code=201, summary="Create a checklist at a position")
def create_checklist(card_public_id: str, body: ChecklistCreate) -> dict:
    card_id = repo.checklists.resolve_parent_public_id(card_public_id)
    return repo.checklists.create_at(card_id, body.position, {"name": body.name})


@router.patch("/checklists/{checklist_public_id}/position", summary="Move a checklist within its card")
def move_checklist(checklist_public_id: str, body: IndexMove) -> dict:
    checklist_id = repo.checklists.resolve_public_id(checklist_public_id)
    return repo.checklists.move_to(checklist_id, new_index=body.index)


@router.delete("/checklists/{checklist_public_id}", summary="Soft-delete a checklist and its items")
def delete_checklist(checklist_public_id: str) -> dict:
    checklist_id = repo.checklists.resolve_public_id(checklist_public_id)
    return repo.checklists.soft_delete(checklist_id)


@router.get("/checklists/{checklist_public_id}/items", summary="Live items of a checklist in order")
def get_checklist_items(checklist_public_id: str) -> list[dict]:
    checklist_id = repo.checklist_items.resolve_parent_public_id(checklist_public_id)
    return repo.checklist_items.list_live(checklist_id)


@router.post("/checklists/{checklist_public_id}/items", status_code=201, summary="Create a checklist item at a position")
def create_checklist_item(checklist_public_id: str, body: ChecklistItemCreate) -> dict:
    checklist_id = repo.checklist_items.resolve_parent_public_id(checklist_public_id)
    return repo.checklist_items.create_at(
        checklist_id,
        body.position,
        {"title": body.title, "completed": body.completed},
    )


@router.patch("/checklist-items/{item_public_id}/position", summary="Move a checklist item")
def move_checklist_item(item_public_id: str, body: ChecklistItemMove) -> dict:
    item_id = repo.checklist_items.resolve_public_id(item_public_id)
    new_checklist_id: Optional[int] = None
    if body.checklist_public_id is not None:
        new_checklist_id = repo.checklist_items.resolve_parent_public_id(body.checklist_public_id)
    return repo.checklist_items.move_to(item_id, new_index=body.index, new_parent_id=new_checklist_id)


@router.delete("/checklist-items/{item_public_id}", summary="Soft-delete a checklist item")
def delete_checklist_item(item_public_id: str) -> dict:
    item_id = repo.checklist_items.resolve_public_id(item_public_id)
    return repo.checklist_items.soft_delete(item_id)


__all__ = ["router"]
