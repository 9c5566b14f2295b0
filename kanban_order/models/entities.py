"""ORM models for boards and the four ordered entity tables.

Every ordered table carries ``index`` (dense per parent among live rows) and
``deleted_at`` (soft-delete marker). There is no unique constraint over
(parent, index): soft-deleted rows keep a stale index and the shift
statements may pass through transient duplicates inside a transaction.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base


Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Board(Base):  # type: ignore[valid-type]
    __tablename__ = "board"

    id = Column(Integer, primary_key=True, autoincrement=True)
    public_id = Column(String(12), nullable=False, unique=True)
    name = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)


class BoardList(Base):  # type: ignore[valid-type]
    __tablename__ = "list"
    __table_args__ = (Index("ix_list_board_id_index", "board_id", "index"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    public_id = Column(String(12), nullable=False, unique=True)
    name = Column(Text, nullable=False)
    board_id = Column(Integer, ForeignKey("board.id", ondelete="CASCADE"), nullable=False)
    index = Column("index", Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)


class Card(Base):  # type: ignore[valid-type]
    __tablename__ = "card"
    __table_args__ = (Index("ix_card_list_id_index", "list_id", "index"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    public_id = Column(String(12), nullable=False, unique=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    list_id = Column(Integer, ForeignKey("list.id", ondelete="CASCADE"), nullable=False)
    index = Column("index", Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)


class Checklist(Base):  # type: ignore[valid-type]
    __tablename__ = "card_checklist"
    __table_args__ = (Index("ix_card_checklist_card_id_index", "card_id", "index"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    public_id = Column(String(12), nullable=False, unique=True)
    name = Column(Text, nullable=False)
    card_id = Column(Integer, ForeignKey("card.id", ondelete="CASCADE"), nullable=False)
    index = Column("index", Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)


class ChecklistItem(Base):  # type: ignore[valid-type]
    __tablename__ = "card_checklist_item"
    __table_args__ = (Index("ix_card_checklist_item_checklist_id_index", "checklist_id", "index"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    public_id = Column(String(12), nullable=False, unique=True)
    title = Column(Text, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    checklist_id = Column(Integer, ForeignKey("card_checklist.id", ondelete="CASCADE"), nullable=False)
    index = Column("index", Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True)


__all__ = ["Base", "Board", "BoardList", "Card", "Checklist", "ChecklistItem"]
