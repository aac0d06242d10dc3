"""Configuration utilities for the query asserter harness.

This module loads harness configuration with the following rules:
- Primary source: `query_asserter_config.json` at the working directory root.
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
ROOT_CONFIG_FILE = Path("query_asserter_config.json")
logger = logging.getLogger(__name__)

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}


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


class SqliteConfig(BaseModel):
    # None -> named shared in-memory databases
    store_dir: Optional[str] = None


class SqlCaptureConfig(BaseModel):
    enabled: bool = Field(default=True)
    max_statements: int = Field(default=1000, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")

    @field_validator("level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        upper = str(v).strip().upper()
        if upper not in _LOG_LEVELS:
            raise ValueError(f"logging.level must be one of {sorted(_LOG_LEVELS)}")
        return upper


class HarnessConfig(BaseModel):
    sqlite: SqliteConfig = Field(default_factory=SqliteConfig)
    capture: SqlCaptureConfig = Field(default_factory=SqlCaptureConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            return data if isinstance(data, dict) else {}
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def _as_bool(text: object) -> bool:
    return str(text).strip().lower() in {"1", "true", "yes", "on"}


def load_config() -> HarnessConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) query_asserter_config.json at the working directory root
    4) Defaults suitable for local test runs
    """

    base = _read_json_file(ROOT_CONFIG_FILE)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    # SQLite test stores
    store_dir = (
        _env("QUERY_ASSERTER_SQLITE_STORE_DIR")
        or _read_config_file("sqlite.store_dir")
        or _base("sqlite.store_dir")
    )

    # SQL capture
    capture_text = _env("QUERY_ASSERTER_CAPTURE_SQL") or _read_config_file("capture.enabled") or _base("capture.enabled", "true")
    max_statements_text = (
        _env("QUERY_ASSERTER_CAPTURE_MAX_STATEMENTS")
        or _read_config_file("capture.max_statements")
        or _base("capture.max_statements", "1000")
    )

    # Logging
    level = _env("QUERY_ASSERTER_LOG_LEVEL") or _read_config_file("logging.level") or _base("logging.level", "INFO")

    try:
        return HarnessConfig(
            sqlite=SqliteConfig(store_dir=store_dir or None),
            capture=SqlCaptureConfig(
                enabled=_as_bool(capture_text),
                max_statements=str(max_statements_text).strip(),
            ),
            logging=LoggingConfig(level=level),
        )
    except PydanticValidationError as e:
        logger.error("Invalid harness configuration: %s", e)
        raise


__all__ = [
    "HarnessConfig",
    "SqliteConfig",
    "SqlCaptureConfig",
    "LoggingConfig",
    "load_config",
]
