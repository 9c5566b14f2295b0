"""Configuration utilities for the Kanban ordering service.

This module loads application configuration with the following rules:
- Primary source: `kanban_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("kanban_config.json")
DEFAULT_DSN = "sqlite+pysqlite:///:memory:"
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


class DatabaseConfig(BaseModel):
    dsn: str
    echo: bool = Field(default=False)

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v.strip()


class OrderingConfig(BaseModel):
    # Reject explicit indices past the live count instead of letting the
    # auditor fail the transaction.
    reject_out_of_range_placement: bool = Field(default=False)


class AppConfig(BaseModel):
    database: DatabaseConfig
    ordering: OrderingConfig = Field(default_factory=OrderingConfig)
    auto_create_schema: bool = Field(default=True)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) kanban_config.json at project root (primary base)
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    dsn = _env("DATABASE_URL") or _read_config_file("database.url") or _base("database.dsn") or DEFAULT_DSN
    echo_text = _env("DATABASE_ECHO") or _read_config_file("database.echo") or _base("database.echo", "false")
    reject_text = (
        _env("ORDERING_REJECT_OUT_OF_RANGE")
        or _read_config_file("ordering.reject_out_of_range")
        or _base("ordering.reject_out_of_range_placement", "false")
    )
    auto_schema_text = _env("AUTO_CREATE_SCHEMA") or _read_config_file("auto_create_schema") or _base("auto_create_schema", "true")

    # Boolean tokens ("true", "0", "yes", ...) are coerced by pydantic
    try:
        return AppConfig(
            database=DatabaseConfig(dsn=dsn, echo=str(echo_text).strip()),
            ordering=OrderingConfig(reject_out_of_range_placement=str(reject_text).strip()),
            auto_create_schema=str(auto_schema_text).strip(),
        )
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "OrderingConfig",
    "load_config",
]
