"""Card ordering routes: cards within a list, including moves between lists."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter

from kanban_order.logic import repository_positions as repo
from kanban_order.models.requests import CardCreate, CardMove

router = APIRouter()


@router.get("/lists/{list_public_id}/cards", summary="Live cards of a list in order")
def get_list_cards(list_public_id: str) -> list[dict]:
    list_id = repo.cards.resolve_parent_public_id(list_public_id)
    return repo.cards.list_live(list_id)


@router.post("/lists/{list_public_id}/cards", status_code=201, summary="Create a card at a position")
def create_card(list_public_id: str, body: CardCreate) -> dict:
    list_id = repo.cards.resolve_parent_public_id(list_public_id)
    return repo.cards.create_at(
        list_id,
        body.position,
        {"title": body.title, "description": body.description},
    )


@router.patch("/cards/{card_public_id}/position", summary="Move a card within or across lists")
def move_card(card_public_id: str, body: CardMove) -> dict:
    card_id = repo.cards.resolve_public_id(card_public_id)
    new_list_id: Optional[int] = None
    if body.list_public_id is not None:
        new_list_id = repo.cards.resolve_parent_public_id(body.list_public_id)
    return repo.cards.move_to(card_id, new_index=body.index, new_parent_id=new_list_id)


@router.delete("/cards/{card_public_id}", summary="Soft-delete a card and its checklists")
def delete_card(card_public_id: str) -> dict:
    card_id = repo.cards.resolve_public_id(card_public_id)
    return repo.cards.soft_delete(card_id)


__all__ = ["router"]
