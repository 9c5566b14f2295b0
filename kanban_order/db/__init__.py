"""Database bootstrap utilities for the Kanban ordering service.

Convenience imports for engine construction, the transaction boundary used
by every ordering operation, and schema creation.
"""

from kanban_order.db.base import get_engine, reset_engine, transaction
from kanban_order.db.schema import create_schema, drop_schema

__all__ = [
    "get_engine",
    "reset_engine",
    "transaction",
    "create_schema",
    "drop_schema",
]
