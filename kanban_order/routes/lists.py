"""List ordering routes: lists within a board."""

from __future__ import annotations

from fastapi import APIRouter

from kanban_order.logic import repository_positions as repo
from kanban_order.models.requests import IndexMove, ListCreate

router = APIRouter()


@router.get("/boards/{board_public_id}/lists", summary="Live lists of a board in order")
def get_board_lists(board_public_id: str) -> list[dict]:
    board_id = repo.lists.resolve_parent_public_id(board_public_id)
    return repo.lists.list_live(board_id)


@router.post("/boards/{board_public_id}/lists", status_code=201, summary="Create a list at a position")
def create_list(board_public_id: str, body: ListCreate) -> dict:
    board_id = repo.lists.resolve_parent_public_id(board_public_id)
    return repo.lists.create_at(board_id, body.position, {"name": body.name})


@router.patch("/lists/{list_public_id}/position", summary="Move a list within its board")
def move_list(list_public_id: str, body: IndexMove) -> dict:
    list_id = repo.lists.resolve_public_id(list_public_id)
    return repo.lists.move_to(list_id, new_index=body.index)


@router.delete("/lists/{list_public_id}", summary="Soft-delete a list and its cards")
def delete_list(list_public_id: str) -> dict:
    list_id = repo.lists.resolve_public_id(list_public_id)
    return repo.lists.soft_delete(list_id)


__all__ = ["router"]
