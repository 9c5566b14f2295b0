"""Sibling index shifting for inserts, moves and soft-deletes.

Every shift is one set-based conditional UPDATE over the live rows of a
parent, never a read-modify-write loop, so concurrent callers on the same
parent are serialised by the store's row locks rather than racing on values
read into the application. All functions run on a caller-supplied connection
inside an open transaction and never commit.
"""

from __future__ import annotations

import logging

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from kanban_order.logic.entity_kinds import EntityKind

logger = logging.getLogger(__name__)


def shift_for_insert(conn: Connection, kind: EntityKind, parent_id: int, target_index: int) -> None:
    """Open a gap at ``target_index``: live siblings at or after it shift +1."""
    result = conn.execute(
        sql_text(
            f"""
            UPDATE {kind.table_name}
            SET "index" = "index" + 1
            WHERE {kind.parent_column} = :pid AND "index" >= :target AND deleted_at IS NULL
            """
        ),
        {"pid": parent_id, "target": int(target_index)},
    )
    logger.debug(
        "positions.shift_insert kind=%s parent_id=%s target=%s rows=%s",
        kind,
        parent_id,
        target_index,
        result.rowcount,
    )


def move_same_parent(
    conn: Connection,
    kind: EntityKind,
    parent_id: int,
    current_index: int,
    new_index: int,
    entity_id: int,
) -> None:
    """Move one row from ``current_index`` to ``new_index`` within its parent.

    The siblings in between shift by one toward the vacated slot and the
    moved row (matched by id) takes ``new_index`` in the same CASE statement.
    Equal indices are a no-op.
    """
    current_index = int(current_index)
    new_index = int(new_index)
    if current_index == new_index:
        logger.debug("positions.move_same_parent.noop kind=%s entity_id=%s index=%s", kind, entity_id, new_index)
        return

    if current_index < new_index:
        # Forward: rows in (current, new] slide back one slot
        delta = "- 1"
        in_range = '"index" > :cur AND "index" <= :new'
    else:
        # Backward: rows in [new, current) slide forward one slot
        delta = "+ 1"
        in_range = '"index" >= :new AND "index" < :cur'

    result = conn.execute(
        sql_text(
            f"""
            UPDATE {kind.table_name}
            SET "index" = CASE
                WHEN id = :eid THEN :new
                ELSE "index" {delta}
            END
            WHERE {kind.parent_column} = :pid
              AND deleted_at IS NULL
              AND (id = :eid OR ({in_range}))
            """
        ),
        {"pid": parent_id, "eid": entity_id, "cur": current_index, "new": new_index},
    )
    logger.debug(
        "positions.move_same_parent kind=%s parent_id=%s entity_id=%s from=%s to=%s rows=%s",
        kind,
        parent_id,
        entity_id,
        current_index,
        new_index,
        result.rowcount,
    )


def move_cross_parent(
    conn: Connection,
    kind: EntityKind,
    source_parent_id: int,
    current_index: int,
    dest_parent_id: int,
    new_index: int,
    entity_id: int,
) -> None:
    """Move one row to another parent, closing the source gap and opening one at the destination.

    The three statements touch disjoint parents (plus the moved row) and
    must commit together; callers run them inside one transaction.
    """
    closed = conn.execute(
        sql_text(
            f"""
            UPDATE {kind.table_name}
            SET "index" = "index" - 1
            WHERE {kind.parent_column} = :src AND "index" > :cur AND deleted_at IS NULL AND id <> :eid
            """
        ),
        {"src": source_parent_id, "cur": int(current_index), "eid": entity_id},
    )
    shift_for_insert(conn, kind, dest_parent_id, new_index)
    moved = conn.execute(
        sql_text(
            f"""
            UPDATE {kind.table_name}
            SET {kind.parent_column} = :dest, "index" = :new
            WHERE id = :eid AND deleted_at IS NULL
            """
        ),
        {"dest": dest_parent_id, "new": int(new_index), "eid": entity_id},
    )
    logger.debug(
        "positions.move_cross_parent kind=%s entity_id=%s from=%s:%s to=%s:%s closed=%s moved=%s",
        kind,
        entity_id,
        source_parent_id,
        current_index,
        dest_parent_id,
        new_index,
        closed.rowcount,
        moved.rowcount,
    )


def shift_for_delete(conn: Connection, kind: EntityKind, parent_id: int, deleted_index: int) -> None:
    """Close the gap left by a soft-deleted row: live siblings after it shift -1.

    The deleted row must already carry ``deleted_at`` so its stale index is
    left untouched.
    """
    result = conn.execute(
        sql_text(
            f"""
            UPDATE {kind.table_name}
            SET "index" = "index" - 1
            WHERE {kind.parent_column} = :pid AND "index" > :deleted AND deleted_at IS NULL
            """
        ),
        {"pid": parent_id, "deleted": int(deleted_index)},
    )
    logger.debug(
        "positions.shift_delete kind=%s parent_id=%s deleted_index=%s rows=%s",
        kind,
        parent_id,
        deleted_index,
        result.rowcount,
    )


__all__ = ["shift_for_insert", "move_same_parent", "move_cross_parent", "shift_for_delete"]
