"""Position assignment for new and relocated entities.

Positions are always derived from the live rows at call time (``MAX(index)``
or the requested slot); no running counter is kept per parent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union
import logging

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from kanban_order.logic.entity_kinds import EntityKind
from kanban_order.logic.position_shifts import shift_for_insert

logger = logging.getLogger(__name__)

PLACEMENT_START = "start"
PLACEMENT_END = "end"

Placement = Union[str, int]


@dataclass(frozen=True)
class PositionAssignment:
    """Index for the new row and the sibling shift needed to make room.

    ``shift_from`` is None when no sibling moves (append). Otherwise every
    live sibling with ``index >= shift_from`` moves by ``delta``.
    """

    index: int
    shift_from: Optional[int] = None
    delta: int = 0


def last_live_index(
    conn: Connection,
    kind: EntityKind,
    parent_id: int,
    exclude_id: Optional[int] = None,
) -> Optional[int]:
    """Return ``MAX(index)`` over live rows of a parent, or None when empty."""
    params = {"pid": parent_id}
    exclude_sql = ""
    if exclude_id is not None:
        exclude_sql = " AND id <> :exclude_id"
        params["exclude_id"] = exclude_id
    row = conn.execute(
        sql_text(
            f'SELECT MAX("index") FROM {kind.table_name} '
            f"WHERE {kind.parent_column} = :pid AND deleted_at IS NULL{exclude_sql}"
        ),
        params,
    ).fetchone()
    if row is None or row[0] is None:
        return None
    return int(row[0])


def count_live(conn: Connection, kind: EntityKind, parent_id: int) -> int:
    """Return the number of live rows under a parent."""
    row = conn.execute(
        sql_text(f"SELECT COUNT(*) FROM {kind.table_name} WHERE {kind.parent_column} = :pid AND deleted_at IS NULL"),
        {"pid": parent_id},
    ).fetchone()
    return int(row[0]) if row and row[0] is not None else 0


def _explicit_index(placement: Placement) -> Optional[int]:
    # bool is an int subclass but never a meaningful slot
    if isinstance(placement, bool):
        raise ValueError(f"unsupported placement: {placement!r}")
    if isinstance(placement, int):
        return placement
    return None


def assign_position_on_create(
    conn: Connection,
    kind: EntityKind,
    parent_id: int,
    placement: Placement,
) -> PositionAssignment:
    """Compute where a new row under ``parent_id`` goes.

    - ``"end"``: one past the highest live index (0 for an empty parent); no shift.
    - ``"start"``: index 0; every live sibling shifts +1.
    - explicit ``int``: that index, taken literally; siblings at or after it
      shift +1. Values past the live count are not clamped and leave a gap
      for the auditor to report.
    """
    explicit = _explicit_index(placement)
    if explicit is not None:
        return PositionAssignment(index=explicit, shift_from=explicit, delta=1)
    if placement == PLACEMENT_START:
        return PositionAssignment(index=0, shift_from=0, delta=1)
    if placement == PLACEMENT_END:
        last = last_live_index(conn, kind, parent_id)
        return PositionAssignment(index=0 if last is None else last + 1)
    raise ValueError(f"unsupported placement: {placement!r}")


def open_position(conn: Connection, kind: EntityKind, parent_id: int, placement: Placement) -> int:
    """Assign a position for a new row and shift siblings to make room.

    Returns the index the caller must write on the new row.
    """
    assignment = assign_position_on_create(conn, kind, parent_id, placement)
    if assignment.shift_from is not None:
        shift_for_insert(conn, kind, parent_id, assignment.shift_from)
    logger.debug(
        "positions.assigned kind=%s parent_id=%s placement=%s index=%s shifted=%s",
        kind,
        parent_id,
        placement,
        assignment.index,
        assignment.shift_from is not None,
    )
    return assignment.index


def resolve_move_target(
    conn: Connection,
    kind: EntityKind,
    dest_parent_id: int,
    entity_id: int,
    new_index: Optional[int],
) -> int:
    """Return the destination index for a move, appending when none is given.

    The moved row itself is excluded from the ``MAX(index)`` scan so that
    "move to end" within the same parent lands on the last slot.
    """
    if new_index is not None:
        return int(new_index)
    last = last_live_index(conn, kind, dest_parent_id, exclude_id=entity_id)
    return 0 if last is None else last + 1


__all__ = [
    "PLACEMENT_START",
    "PLACEMENT_END",
    "Placement",
    "PositionAssignment",
    "assign_position_on_create",
    "count_live",
    "last_live_index",
    "open_position",
    "resolve_move_target",
]
