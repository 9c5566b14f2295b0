"""Request bodies for the ordering routes.

``position`` accepts "start", "end" or an explicit zero-based index. Indices
are never clamped; the engine (or the optional placement guard) decides what
an out-of-range index means.
"""

from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

PositionField = Union[Literal["start", "end"], NonNegativeInt]


class _Body(BaseModel):
    model_config = ConfigDict(extra="forbid")


class _CreateBody(_Body):
    position: PositionField = "end"


class ListCreate(_CreateBody):
    name: str = Field(min_length=1, max_length=255)


class CardCreate(_CreateBody):
    title: str = Field(min_length=1, max_length=2000)
    description: Optional[str] = Field(default=None, max_length=10000)


class ChecklistCreate(_CreateBody):
    name: str = Field(min_length=1, max_length=255)


class ChecklistItemCreate(_CreateBody):
    title: str = Field(min_length=1, max_length=500)
    completed: bool = False


class IndexMove(_Body):
    index: Optional[int] = Field(default=None, ge=0)


class CardMove(IndexMove):
    list_public_id: Optional[str] = Field(default=None, min_length=1)


class ChecklistItemMove(IndexMove):
    checklist_public_id: Optional[str] = Field(default=None, min_length=1)


__all__ = [
    "ListCreate",
    "CardCreate",
    "ChecklistCreate",
    "ChecklistItemCreate",
    "IndexMove",
    "CardMove",
    "ChecklistItemMove",
]
