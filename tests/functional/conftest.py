"""Functional test bootstrap for the ordering engine.

Every test gets its own file-backed SQLite database under pytest's tmp_path,
so transactions, rollbacks and separate connections behave like a real
store. ``TEST_DATABASE_URL`` points the module-level engine (and therefore
the module-level repositories) at that file.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Tuple

import pytest
from sqlalchemy import insert, select, text as sql_text, update

from kanban_order.db.base import get_engine, reset_engine
from kanban_order.db.schema import create_schema
from kanban_order.logic.entity_kinds import CARD, CHECKLIST, CHECKLIST_ITEM, LIST, EntityKind
from kanban_order.logic.repository_positions import generate_public_id
from kanban_order.models.entities import Board

# Human-readable column per kind, used as the test label
LABEL_COLUMN = {
    LIST.name: "name",
    CARD.name: "title",
    CHECKLIST.name: "name",
    CHECKLIST_ITEM.name: "title",
}


class Seeder:
    """Writes rows straight into the tables, bypassing the engine.

    Lets tests build exact (including corrupted) index layouts.
    """

    def __init__(self, engine) -> None:
        self.engine = engine

    def board(self, name: str = "Board") -> int:
        with self.engine.begin() as conn:
            result = conn.execute(insert(Board.__table__).values(public_id=generate_public_id(), name=name))
            return int(result.inserted_primary_key[0])

    def rows(self, kind: EntityKind, parent_id: int, layout: Iterable[Tuple[str, int]]) -> Dict[str, int]:
        """Insert ``(label, index)`` pairs in order; ids therefore ascend in layout order."""
        ids: Dict[str, int] = {}
        with self.engine.begin() as conn:
            for label, index in layout:
                result = conn.execute(
                    insert(kind.table).values(
                        public_id=generate_public_id(),
                        **{LABEL_COLUMN[kind.name]: label, kind.parent_column: parent_id, "index": index},
                    )
                )
                ids[label] = int(result.inserted_primary_key[0])
        return ids

    def dense(self, kind: EntityKind, parent_id: int, labels: Iterable[str]) -> Dict[str, int]:
        return self.rows(kind, parent_id, [(label, i) for i, label in enumerate(labels)])

    def list_with_cards(self, board_id: int, name: str, labels: Iterable[str]) -> Tuple[int, Dict[str, int]]:
        existing = self.live_count(LIST, board_id)
        list_id = self.rows(LIST, board_id, [(name, existing)])[name]
        return list_id, self.dense(CARD, list_id, labels)

    def mark_deleted(self, kind: EntityKind, entity_id: int) -> None:
        """Set ``deleted_at`` without touching any index."""
        table = kind.table
        with self.engine.begin() as conn:
            conn.execute(update(table).where(table.c.id == entity_id).values(deleted_at=datetime.now(timezone.utc)))

    def total_rows(self, kind: EntityKind) -> int:
        with self.engine.connect() as conn:
            return int(conn.execute(sql_text(f"SELECT COUNT(*) FROM {kind.table_name}")).scalar_one())

    def live_count(self, kind: EntityKind, parent_id: int) -> int:
        with self.engine.connect() as conn:
            return int(
                conn.execute(
                    sql_text(
                        f"SELECT COUNT(*) FROM {kind.table_name} WHERE {kind.parent_column} = :p AND deleted_at IS NULL"
                    ),
                    {"p": parent_id},
                ).scalar_one()
            )

    def layout(self, kind: EntityKind, parent_id: int) -> List[Tuple[str, int]]:
        """Live ``(label, index)`` pairs ordered by index then id."""
        table = kind.table
        label_col = table.c[LABEL_COLUMN[kind.name]]
        with self.engine.connect() as conn:
            rows = conn.execute(
                select(label_col, table.c["index"])
                .where(table.c[kind.parent_column] == parent_id, table.c.deleted_at.is_(None))
                .order_by(table.c["index"], table.c.id)
            ).fetchall()
        return [(str(r[0]), int(r[1])) for r in rows]

    def index_of(self, kind: EntityKind, entity_id: int) -> int:
        table = kind.table
        with self.engine.connect() as conn:
            return int(conn.execute(select(table.c["index"]).where(table.c.id == entity_id)).scalar_one())

    def assert_dense(self, kind: EntityKind, parent_id: int) -> None:
        layout = self.layout(kind, parent_id)
        assert [index for _, index in layout] == list(range(len(layout))), f"not dense: {layout}"


@pytest.fixture
def engine(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'ordering.db'}"
    monkeypatch.setenv("TEST_DATABASE_URL", url)
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.delenv("ORDERING_REJECT_OUT_OF_RANGE", raising=False)
    monkeypatch.chdir(tmp_path)
    reset_engine()
    eng = get_engine()
    create_schema(eng)
    yield eng
    reset_engine()


@pytest.fixture
def seed(engine) -> Seeder:
    return Seeder(engine)


@pytest.fixture
def board_id(seed) -> int:
    return seed.board()
