"""Central error mapping for ordering failures.

Single source of truth for mapping engine exceptions to problem+json codes,
titles and HTTP statuses. Handlers must read from here instead of hardcoding
strings or numbers.
"""

from __future__ import annotations

ORDERING_ERROR_MAP = {
    "NOT_FOUND": {"status": 404, "title": "Not Found"},
    "CONFLICTING_PLACEMENT": {"status": 409, "title": "Conflict"},
    "ORDERING_INVARIANT_VIOLATION": {"status": 500, "title": "Internal Server Error"},
    "ORDERING_ERROR": {"status": 500, "title": "Internal Server Error"},
}

__all__ = ["ORDERING_ERROR_MAP"]
