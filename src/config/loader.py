from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_TABLE,
    CsvOptions,
    DatabaseConfig,
    ImportConfig,
    ImportLimits,
)

"""Config loader.

Responsibilities:
- Load YAML config (config/import.yml by default)
- Validate against config_schema.json (unknown keys rejected)
- Apply defaults for every missing section
- IMPORT_OWNER_ID environment variable overrides owner_id
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/import.yml")
OWNER_ENV = "IMPORT_OWNER_ID"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing/invalid, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def build_config(data: dict[str, Any]) -> ImportConfig:
    """Build ImportConfig from already-parsed config data."""
    _validate_config_schema(data)

    csv_raw = data.get("csv") or {}
    limits_raw = data.get("limits") or {}
    db_raw = data.get("database") or {}
    defaults = ImportLimits()

    owner = os.getenv(OWNER_ENV) or data.get("owner_id")
    return ImportConfig(
        table=data.get("table", DEFAULT_TABLE),
        owner_id=owner,
        csv=CsvOptions(
            delimiter=csv_raw.get("delimiter", ","),
            encoding=csv_raw.get("encoding", "utf-8-sig"),
        ),
        limits=ImportLimits(
            max_file_bytes=limits_raw.get("max_file_bytes", defaults.max_file_bytes),
            max_rows=limits_raw.get("max_rows", defaults.max_rows),
            attachment_max_file_bytes=limits_raw.get(
                "attachment_max_file_bytes", defaults.attachment_max_file_bytes
            ),
            attachment_max_files=limits_raw.get("attachment_max_files", defaults.attachment_max_files),
        ),
        field_aliases={k: list(v) for k, v in (data.get("field_aliases") or {}).items()},
        database=DatabaseConfig(
            host=db_raw.get("host"),
            port=db_raw.get("port"),
            user=db_raw.get("user"),
            password=db_raw.get("password"),
            database=db_raw.get("database"),
            dsn=db_raw.get("dsn"),
        ),
    )


def load_config(path: Path) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")
    return build_config(data)
