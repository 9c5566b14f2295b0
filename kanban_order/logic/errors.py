"""Exception taxonomy for the ordering engine.

All errors abort the surrounding transaction. The HTTP layer maps them to
problem+json responses through ``kanban_order.http.error_mapping``.
"""

from __future__ import annotations

from typing import Any, Optional


class OrderingError(Exception):
    """Base class for ordering engine failures."""

    code = "ORDERING_ERROR"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class NotFound(OrderingError):
    """Entity or parent is missing or already soft-deleted."""

    code = "NOT_FOUND"


class ConflictingPlacement(OrderingError):
    """Explicit target index outside the live range, rejected before shifting."""

    code = "CONFLICTING_PLACEMENT"


class InvariantViolation(OrderingError):
    """Duplicate or non-dense indices survived the repair pass.

    Indicates an engine bug or an out-of-band write to the index column; the
    operation is never committed.
    """

    code = "ORDERING_INVARIANT_VIOLATION"

    def __init__(self, message: str, result: Optional[Any] = None, **context: Any) -> None:
        super().__init__(message, **context)
        self.result = result


__all__ = ["OrderingError", "NotFound", "ConflictingPlacement", "InvariantViolation"]
