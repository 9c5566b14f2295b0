"""Schema bootstrap for local development and tests.

Production deployments are expected to manage the schema with their own
migration tooling; this module only creates or drops the tables declared in
``kanban_order.models.entities``.
"""

from __future__ import annotations

import logging

from sqlalchemy.engine import Engine

from kanban_order.models.entities import Base

logger = logging.getLogger(__name__)


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes that do not exist yet."""
    Base.metadata.create_all(engine)
    logger.info("db.schema.created tables=%s", sorted(Base.metadata.tables))


def drop_schema(engine: Engine) -> None:
    Base.metadata.drop_all(engine)
    logger.info("db.schema.dropped")


__all__ = ["create_schema", "drop_schema"]
