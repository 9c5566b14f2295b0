"""Entity kinds that share the ordered-position engine.

Each kind binds the generic engine to one table, its parent foreign key and
the parent table used for existence checks. Table and column names are
interpolated into SQL, so kinds must only ever be built from the constants
declared here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from sqlalchemy import Table

from kanban_order.models.entities import Board, BoardList, Card, Checklist, ChecklistItem


@dataclass(frozen=True, eq=False)
class EntityKind:
    name: str
    table: Table
    parent_column: str
    parent_table: Table
    # Kinds soft-deleted together with a row of this kind
    children: Tuple["EntityKind", ...] = ()

    @property
    def table_name(self) -> str:
        return self.table.name

    @property
    def parent_table_name(self) -> str:
        return self.parent_table.name

    def __str__(self) -> str:
        return self.name


CHECKLIST_ITEM = EntityKind(
    name="checklist_item",
    table=ChecklistItem.__table__,
    parent_column="checklist_id",
    parent_table=Checklist.__table__,
)
CHECKLIST = EntityKind(
    name="checklist",
    table=Checklist.__table__,
    parent_column="card_id",
    parent_table=Card.__table__,
    children=(CHECKLIST_ITEM,),
)
CARD = EntityKind(
    name="card",
    table=Card.__table__,
    parent_column="list_id",
    parent_table=BoardList.__table__,
    children=(CHECKLIST,),
)
LIST = EntityKind(
    name="list",
    table=BoardList.__table__,
    parent_column="board_id",
    parent_table=Board.__table__,
    children=(CARD,),
)

ALL_KINDS: Tuple[EntityKind, ...] = (LIST, CARD, CHECKLIST, CHECKLIST_ITEM)


__all__ = ["EntityKind", "LIST", "CARD", "CHECKLIST", "CHECKLIST_ITEM", "ALL_KINDS"]
