from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the litigation case importer.

These are the typed domain view of config/import.yml. The loader in
src/config/loader.py validates the raw YAML and builds these objects; every
section is optional and falls back to the defaults below.
"""

DEFAULT_TABLE = "litigation_cases"

# 5 MB: case-import spreadsheets
DEFAULT_MAX_FILE_BYTES = 5 * 1024 * 1024
DEFAULT_MAX_ROWS = 1000
# dispute attachments (pass-through upload, no parsing)
DEFAULT_ATTACHMENT_MAX_FILE_BYTES = 500 * 1024 * 1024
DEFAULT_ATTACHMENT_MAX_FILES = 50


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class CsvOptions:
    """Delimited-text decoding options."""
    delimiter: str = ","
    encoding: str = "utf-8-sig"  # BOM 付き UTF-8 も読める


@dataclass(frozen=True)
class ImportLimits:
    """Size and row ceilings enforced before anything reaches storage."""
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES
    max_rows: int = DEFAULT_MAX_ROWS
    attachment_max_file_bytes: int = DEFAULT_ATTACHMENT_MAX_FILE_BYTES
    attachment_max_files: int = DEFAULT_ATTACHMENT_MAX_FILES


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for the import process."""
    table: str = DEFAULT_TABLE  # Target table for bulk insert
    owner_id: str | None = None  # user_id stamped on every inserted row
    csv: CsvOptions = field(default_factory=CsvOptions)
    limits: ImportLimits = field(default_factory=ImportLimits)
    # logical field -> extra header aliases appended after the built-in ones
    field_aliases: dict[str, list[str]] = field(default_factory=dict)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
