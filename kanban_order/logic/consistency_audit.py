"""Post-mutation audit and repair of per-parent index density.

Runs as its own phase after every mutating operation, inside the same
transaction. Duplicates are repaired by a deterministic compaction ordered by
``(index, id)``; anything still wrong afterwards (duplicates, or a gap that
was not caused by duplicates) raises ``InvariantViolation`` so the
transaction rolls back instead of committing a corrupt ordering.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, NamedTuple, Optional, Tuple
import logging

from sqlalchemy import bindparam
from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from kanban_order.logic.entity_kinds import EntityKind
from kanban_order.logic.errors import InvariantViolation

logger = logging.getLogger(__name__)


class DuplicatePosition(NamedTuple):
    parent_id: int
    index: int
    count: int


@dataclass(frozen=True)
class RepairResult:
    ok: bool
    repaired_parents: FrozenSet[int] = field(default_factory=frozenset)


def _normalise_parent_ids(parent_ids: Iterable[int | None]) -> List[int]:
    return sorted({int(p) for p in parent_ids if p is not None})


def find_duplicate_positions(conn: Connection, kind: EntityKind, parent_ids: Iterable[int]) -> List[DuplicatePosition]:
    """Return every ``(parent, index)`` pair held by more than one live row."""
    pids = _normalise_parent_ids(parent_ids)
    if not pids:
        return []
    stmt = sql_text(
        f"""
        SELECT {kind.parent_column}, "index", COUNT(*)
        FROM {kind.table_name}
        WHERE {kind.parent_column} IN :pids AND deleted_at IS NULL
        GROUP BY {kind.parent_column}, "index"
        HAVING COUNT(*) > 1
        ORDER BY {kind.parent_column}, "index"
        """
    ).bindparams(bindparam("pids", expanding=True))
    rows = conn.execute(stmt, {"pids": pids}).fetchall()
    return [DuplicatePosition(int(r[0]), int(r[1]), int(r[2])) for r in rows]


def find_non_dense_parents(conn: Connection, kind: EntityKind, parent_ids: Iterable[int]) -> List[int]:
    """Return parents whose live indices are not exactly ``0..n-1``."""
    pids = _normalise_parent_ids(parent_ids)
    if not pids:
        return []
    stmt = sql_text(
        f"""
        SELECT {kind.parent_column}, COUNT(*), COUNT(DISTINCT "index"), MIN("index"), MAX("index")
        FROM {kind.table_name}
        WHERE {kind.parent_column} IN :pids AND deleted_at IS NULL
        GROUP BY {kind.parent_column}
        ORDER BY {kind.parent_column}
        """
    ).bindparams(bindparam("pids", expanding=True))
    bad: List[int] = []
    for parent_id, total, distinct, lowest, highest in conn.execute(stmt, {"pids": pids}).fetchall():
        total = int(total)
        if int(distinct) != total or int(lowest) != 0 or int(highest) != total - 1:
            bad.append(int(parent_id))
    return bad


def find_out_of_range_row(conn: Connection, kind: EntityKind, entity_id: int, parent_id: int) -> Optional[int]:
    """Return the index of a just-placed live row when it lies past ``count - 1``, else None."""
    row = conn.execute(
        sql_text(
            f"""
            SELECT placed."index", (
                SELECT COUNT(*) FROM {kind.table_name}
                WHERE {kind.parent_column} = :pid AND deleted_at IS NULL
            )
            FROM {kind.table_name} AS placed
            WHERE placed.id = :eid AND placed.{kind.parent_column} = :pid AND placed.deleted_at IS NULL
            """
        ),
        {"eid": entity_id, "pid": parent_id},
    ).fetchone()
    if row is None:
        return None
    index, live = int(row[0]), int(row[1])
    return index if index > live - 1 else None


def compact_positions(conn: Connection, kind: EntityKind, parent_ids: Iterable[int]) -> FrozenSet[int]:
    """Re-sequence live rows of each parent to ``0..n-1`` ordered by ``(index, id)``.

    Only rows whose index changes are written, in a single executemany.
    Returns the parents that had at least one row renumbered.
    """
    pids = _normalise_parent_ids(parent_ids)
    if not pids:
        return frozenset()
    stmt = sql_text(
        f"""
        SELECT id, {kind.parent_column}, "index"
        FROM {kind.table_name}
        WHERE {kind.parent_column} IN :pids AND deleted_at IS NULL
        ORDER BY {kind.parent_column} ASC, "index" ASC, id ASC
        """
    ).bindparams(bindparam("pids", expanding=True))
    rows = conn.execute(stmt, {"pids": pids}).fetchall()

    updates: list[dict] = []
    touched: set[int] = set()
    position = 0
    previous_parent = None
    for row_id, parent_id, current in rows:
        if parent_id != previous_parent:
            position = 0
            previous_parent = parent_id
        if int(current) != position:
            updates.append({"id": int(row_id), "new_index": position})
            touched.add(int(parent_id))
        position += 1

    if updates:
        conn.execute(
            sql_text(f'UPDATE {kind.table_name} SET "index" = :new_index WHERE id = :id'),
            updates,
        )
    logger.info(
        "positions.compacted kind=%s parents=%s rows_renumbered=%s",
        kind,
        pids,
        len(updates),
    )
    return frozenset(touched)


def audit_and_repair(
    conn: Connection,
    kind: EntityKind,
    parent_ids: Iterable[int | None],
    placed: Optional[Tuple[int, int]] = None,
) -> RepairResult:
    """Check the given parents for duplicate or non-dense indices and repair duplicates.

    ``placed`` is ``(entity_id, parent_id)`` of a row just written at an
    explicit index. It is checked against the live count before any
    compaction runs.

    Returns ``RepairResult(ok=True, ...)`` listing the parents that were
    compacted. Raises ``InvariantViolation`` (carrying an ``ok=False`` result)
    when the placed row is out of range, when duplicates survive compaction
    or when a parent has a gap.
    """
    pids = _normalise_parent_ids(parent_ids)
    if not pids:
        return RepairResult(ok=True)

    if placed is not None:
        entity_id, parent_id = placed
        index = find_out_of_range_row(conn, kind, entity_id, parent_id)
        if index is not None:
            logger.error(
                "positions.audit.out_of_range kind=%s entity_id=%s parent_id=%s index=%s",
                kind,
                entity_id,
                parent_id,
                index,
            )
            raise InvariantViolation(
                f"Invariant violation: {kind} {entity_id} placed at index {index} past the end of parent {parent_id}",
                result=RepairResult(ok=False),
                kind=kind.name,
                parent_ids=[parent_id],
            )

    repaired: FrozenSet[int] = frozenset()
    duplicates = find_duplicate_positions(conn, kind, pids)
    if duplicates:
        logger.warning(
            "positions.audit.duplicates_found kind=%s parents=%s duplicates=%s",
            kind,
            pids,
            [tuple(d) for d in duplicates],
        )
        repaired = compact_positions(conn, kind, pids)
        remaining = find_duplicate_positions(conn, kind, pids)
        if remaining:
            result = RepairResult(ok=False, repaired_parents=repaired)
            logger.error(
                "positions.audit.duplicates_remain kind=%s parents=%s duplicates=%s",
                kind,
                pids,
                [tuple(d) for d in remaining],
            )
            raise InvariantViolation(
                f"Invariant violation: duplicate {kind} indices remain after compaction in parents {pids}",
                result=result,
                kind=kind.name,
                parent_ids=pids,
            )
        logger.warning("positions.audit.repaired kind=%s parents=%s", kind, sorted(repaired))

    gaps = find_non_dense_parents(conn, kind, pids)
    if gaps:
        result = RepairResult(ok=False, repaired_parents=repaired)
        logger.error("positions.audit.non_dense kind=%s parents=%s", kind, gaps)
        raise InvariantViolation(
            f"Invariant violation: non-dense {kind} indices in parents {gaps}",
            result=result,
            kind=kind.name,
            parent_ids=gaps,
        )
    return RepairResult(ok=True, repaired_parents=repaired)


__all__ = [
    "DuplicatePosition",
    "RepairResult",
    "audit_and_repair",
    "compact_positions",
    "find_duplicate_positions",
    "find_non_dense_parents",
    "find_out_of_range_row",
]
