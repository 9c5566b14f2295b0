"""Per-kind facades over the ordered-position engine.

A ``PositionRepository`` binds the generic engine to one entity kind and
exposes create / move / soft-delete. Each mutating call opens exactly one
transaction, checks existence before any shift, runs the assigner and shift
executor, writes the row, runs the consistency audit over every affected
parent and returns the refreshed row. Current positions are always re-read
inside that transaction; caller-supplied prior indices are never trusted.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
import logging
import uuid

from sqlalchemy import Table, insert, select, update
from sqlalchemy.engine import Connection, Engine

from kanban_order.config import load_config
from kanban_order.db.base import get_engine, transaction
from kanban_order.logic.consistency_audit import audit_and_repair
from kanban_order.logic.entity_kinds import CARD, CHECKLIST, CHECKLIST_ITEM, LIST, EntityKind
from kanban_order.logic.errors import ConflictingPlacement, NotFound
from kanban_order.logic.position_assigner import (
    PLACEMENT_END,
    Placement,
    count_live,
    open_position,
    resolve_move_target,
)
from kanban_order.logic.position_shifts import move_cross_parent, move_same_parent, shift_for_delete

logger = logging.getLogger(__name__)

# Columns owned by the engine; callers cannot set them through ``values``
_RESERVED_COLUMNS = {"id", "index", "deleted_at"}


def generate_public_id() -> str:
    return uuid.uuid4().hex[:12]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _row_to_dict(row: Any) -> Dict[str, Any]:
    return dict(row._mapping)


def fetch_row(conn: Connection, table: Table, entity_id: int) -> Optional[Dict[str, Any]]:
    """Return a row by internal id regardless of its deleted state."""
    row = conn.execute(select(table).where(table.c.id == entity_id)).fetchone()
    return _row_to_dict(row) if row is not None else None


def require_live_parent(conn: Connection, kind: EntityKind, parent_id: int) -> None:
    parent = kind.parent_table
    row = conn.execute(
        select(parent.c.id).where(parent.c.id == parent_id, parent.c.deleted_at.is_(None))
    ).fetchone()
    if row is None:
        raise NotFound(
            f"{kind.parent_table_name} {parent_id} not found",
            kind=kind.parent_table_name,
            id=parent_id,
        )


def require_live_entity(conn: Connection, kind: EntityKind, entity_id: int) -> Tuple[int, int]:
    """Return ``(parent_id, index)`` of a live row or raise ``NotFound``."""
    table = kind.table
    row = conn.execute(
        select(table.c[kind.parent_column], table.c["index"]).where(
            table.c.id == entity_id, table.c.deleted_at.is_(None)
        )
    ).fetchone()
    if row is None:
        raise NotFound(f"{kind} {entity_id} not found", kind=kind.name, id=entity_id)
    return int(row[0]), int(row[1])


def _cascade_soft_delete(
    conn: Connection,
    kind: EntityKind,
    parent_ids: List[int],
    deleted_at: datetime,
) -> Dict[str, int]:
    """Soft-delete the live descendants of ``parent_ids`` (rows of ``kind``).

    Children leave the ordering together with their whole parent, so none of
    them is renumbered. Returns the number of rows deleted per child kind.
    """
    counts: Dict[str, int] = {}
    if not parent_ids:
        return counts
    for child in kind.children:
        table = child.table
        fk = table.c[child.parent_column]
        child_ids = [
            int(r[0])
            for r in conn.execute(
                select(table.c.id).where(fk.in_(parent_ids), table.c.deleted_at.is_(None))
            ).fetchall()
        ]
        if not child_ids:
            continue
        conn.execute(update(table).where(table.c.id.in_(child_ids)).values(deleted_at=deleted_at))
        counts[child.name] = counts.get(child.name, 0) + len(child_ids)
        for name, n in _cascade_soft_delete(conn, child, child_ids, deleted_at).items():
            counts[name] = counts.get(name, 0) + n
    return counts


class PositionRepository:
    """Ordering facade for one entity kind."""

    def __init__(
        self,
        kind: EntityKind,
        engine: Optional[Engine] = None,
        reject_out_of_range: Optional[bool] = None,
    ) -> None:
        self.kind = kind
        self._engine = engine
        self._reject_out_of_range = reject_out_of_range

    @property
    def engine(self) -> Engine:
        return self._engine or get_engine()

    def _rejects_out_of_range(self) -> bool:
        if self._reject_out_of_range is not None:
            return self._reject_out_of_range
        return load_config().ordering.reject_out_of_range_placement

    def _check_range(self, index: int, upper: int, parent_id: int) -> None:
        if index < 0 or index > upper:
            raise ConflictingPlacement(
                f"{self.kind} index {index} outside 0..{upper} for parent {parent_id}",
                kind=self.kind.name,
                parent_id=parent_id,
                index=index,
            )

    # -- reads ---------------------------------------------------------

    def get(self, entity_id: int) -> Dict[str, Any]:
        with self.engine.connect() as conn:
            row = fetch_row(conn, self.kind.table, entity_id)
        if row is None:
            raise NotFound(f"{self.kind} {entity_id} not found", kind=self.kind.name, id=entity_id)
        return row

    def list_live(self, parent_id: int) -> List[Dict[str, Any]]:
        """Return live rows of a parent ordered by ``(index, id)``."""
        table = self.kind.table
        with self.engine.connect() as conn:
            rows = conn.execute(
                select(table)
                .where(table.c[self.kind.parent_column] == parent_id, table.c.deleted_at.is_(None))
                .order_by(table.c["index"].asc(), table.c.id.asc())
            ).fetchall()
        return [_row_to_dict(r) for r in rows]

    def resolve_public_id(self, public_id: str) -> int:
        return self._resolve(self.kind.table, public_id)

    def resolve_parent_public_id(self, public_id: str) -> int:
        return self._resolve(self.kind.parent_table, public_id)

    def _resolve(self, table: Table, public_id: str) -> int:
        with self.engine.connect() as conn:
            row = conn.execute(
                select(table.c.id).where(table.c.public_id == public_id, table.c.deleted_at.is_(None))
            ).fetchone()
        if row is None:
            raise NotFound(f"{table.name} {public_id} not found", kind=table.name, public_id=public_id)
        return int(row[0])

    # -- writes --------------------------------------------------------

    def create_at(
        self,
        parent_id: int,
        placement: Placement = PLACEMENT_END,
        values: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Insert a new row under ``parent_id`` at ``placement`` ("start", "end" or an index)."""
        kind = self.kind
        fields = dict(values or {})
        reserved = (_RESERVED_COLUMNS | {kind.parent_column}) & set(fields)
        if reserved:
            raise ValueError(f"columns managed by the ordering engine: {sorted(reserved)}")
        fields.setdefault("public_id", generate_public_id())

        explicit = isinstance(placement, int) and not isinstance(placement, bool)
        with transaction(self.engine) as conn:
            require_live_parent(conn, kind, parent_id)
            if explicit and self._rejects_out_of_range():
                self._check_range(placement, count_live(conn, kind, parent_id), parent_id)
            index = open_position(conn, kind, parent_id, placement)
            result = conn.execute(
                insert(kind.table).values(**fields, **{kind.parent_column: parent_id, "index": index})
            )
            entity_id = int(result.inserted_primary_key[0])
            audit_and_repair(conn, kind, [parent_id], placed=(entity_id, parent_id) if explicit else None)
            row = fetch_row(conn, kind.table, entity_id)

        logger.info(
            "positions.create kind=%s entity_id=%s parent_id=%s placement=%s index=%s",
            kind,
            entity_id,
            parent_id,
            placement,
            index,
        )
        return row  # type: ignore[return-value]

    def move_to(
        self,
        entity_id: int,
        new_index: Optional[int] = None,
        new_parent_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Move a row to ``new_index`` under ``new_parent_id`` (default: its current parent).

        Omitting ``new_index`` moves the row to the end of the destination.
        """
        kind = self.kind
        with transaction(self.engine) as conn:
            source_parent_id, current_index = require_live_entity(conn, kind, entity_id)
            dest_parent_id = source_parent_id if new_parent_id is None else int(new_parent_id)
            same_parent = dest_parent_id == source_parent_id
            if not same_parent:
                require_live_parent(conn, kind, dest_parent_id)

            target = resolve_move_target(conn, kind, dest_parent_id, entity_id, new_index)
            if new_index is not None and self._rejects_out_of_range():
                live = count_live(conn, kind, dest_parent_id)
                self._check_range(target, live - 1 if same_parent else live, dest_parent_id)

            if same_parent:
                move_same_parent(conn, kind, source_parent_id, current_index, target, entity_id)
            else:
                move_cross_parent(conn, kind, source_parent_id, current_index, dest_parent_id, target, entity_id)
            audit_and_repair(
                conn,
                kind,
                {source_parent_id, dest_parent_id},
                placed=(entity_id, dest_parent_id) if new_index is not None else None,
            )
            row = fetch_row(conn, kind.table, entity_id)

        logger.info(
            "positions.move kind=%s entity_id=%s from=%s:%s to=%s:%s",
            kind,
            entity_id,
            source_parent_id,
            current_index,
            dest_parent_id,
            target,
        )
        return row  # type: ignore[return-value]

    def soft_delete(self, entity_id: int, deleted_at: Optional[datetime] = None) -> Dict[str, Any]:
        """Soft-delete a row, close its gap and cascade to its descendants.

        The deleted row keeps its last index, which is never read again.
        """
        kind = self.kind
        table = kind.table
        stamp = deleted_at or _utcnow()
        with transaction(self.engine) as conn:
            parent_id, index = require_live_entity(conn, kind, entity_id)
            conn.execute(
                update(table)
                .where(table.c.id == entity_id, table.c.deleted_at.is_(None))
                .values(deleted_at=stamp)
            )
            shift_for_delete(conn, kind, parent_id, index)
            cascaded = _cascade_soft_delete(conn, kind, [entity_id], stamp)
            audit_and_repair(conn, kind, [parent_id])
            row = fetch_row(conn, table, entity_id)

        logger.info(
            "positions.soft_delete kind=%s entity_id=%s parent_id=%s index=%s cascaded=%s",
            kind,
            entity_id,
            parent_id,
            index,
            cascaded,
        )
        return row  # type: ignore[return-value]

    def soft_delete_all_by_parent(
        self,
        parent_ids: Iterable[int],
        deleted_at: Optional[datetime] = None,
    ) -> List[int]:
        """Soft-delete every live row under the given parents, with cascade.

        Used when the parents themselves are going away, so nothing is
        renumbered. Returns the ids of the rows deleted at this level.
        """
        kind = self.kind
        table = kind.table
        pids = sorted({int(p) for p in parent_ids})
        if not pids:
            return []
        stamp = deleted_at or _utcnow()
        fk = table.c[kind.parent_column]
        with transaction(self.engine) as conn:
            ids = [
                int(r[0])
                for r in conn.execute(
                    select(table.c.id).where(fk.in_(pids), table.c.deleted_at.is_(None)).order_by(table.c.id)
                ).fetchall()
            ]
            if ids:
                conn.execute(update(table).where(table.c.id.in_(ids)).values(deleted_at=stamp))
                _cascade_soft_delete(conn, kind, ids, stamp)
            audit_and_repair(conn, kind, pids)

        logger.info("positions.soft_delete_all kind=%s parent_ids=%s deleted=%s", kind, pids, len(ids))
        return ids


lists = PositionRepository(LIST)
cards = PositionRepository(CARD)
checklists = PositionRepository(CHECKLIST)
checklist_items = PositionRepository(CHECKLIST_ITEM)


__all__ = [
    "PositionRepository",
    "fetch_row",
    "generate_public_id",
    "require_live_entity",
    "require_live_parent",
    "lists",
    "cards",
    "checklists",
    "checklist_items",
]
