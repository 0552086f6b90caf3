from __future__ import annotations

import argparse
import os
import sys
from contextlib import contextmanager
from pathlib import Path

import psycopg2
from dotenv import load_dotenv

from src.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from src.logging.init import enable_debug, log_summary, setup_logging
from src.models.config_models import ImportConfig
from src.services.attachments import attachments_from_paths, validate_attachments
from src.services.importer import ProcessingError, import_files
from src.services.summary import render_summary_line
from src.tabular.aliases import resolve_aliases
from src.tabular.errors import ImportRejectedError
from src.tabular.normalizer import build_batch, lookup_field
from src.tabular.reader import file_extension, parse, validate_file

"""CLI implementation.

    python -m src.cli cases.xlsx more.csv --owner <user-id>

- Load .env and config/import.yml
- Import each file in its own transaction (mock mode with --dry-run or
  DISABLE_DB_CONNECT=1)
- Print one SUMMARY line; exit code 0 = all imported, 2 = some file failed,
  1 = fatal (config / missing owner / database unreachable)
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _dsn(cfg: ImportConfig) -> str:
    """Resolve connection info: env DSN > env PG* > config database section."""
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def _db_connection(cfg: ImportConfig):  # pragma: no cover (thin wrapper; tested via mocks)
    """psycopg2 connection + cursor. autocommit so the importer's explicit
    BEGIN/COMMIT/ROLLBACK are the only transaction boundaries."""
    conn = psycopg2.connect(_dsn(cfg))
    conn.autocommit = True
    try:
        with conn.cursor() as cur:
            yield cur
    finally:
        conn.close()


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Bulk import litigation cases from CSV/XLSX/XLS files")
    p.add_argument("files", nargs="*", type=Path, help="Files to import")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to import.yml")
    p.add_argument("--owner", default=None, help="User id that will own the imported cases")
    p.add_argument("--dry-run", action="store_true", help="Normalize and report without inserting")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print resolved headers & first records then exit")
    p.add_argument("--attachments", action="store_true", help="Validate files as dispute attachments only")
    return p.parse_args(argv)


def _inspect_data(cfg: ImportConfig, files: list[Path]) -> int:
    aliases = resolve_aliases(cfg.field_aliases)
    code = EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        try:
            validate_file(f.name, f.stat().st_size, cfg.limits)
            rows = parse(f.read_bytes(), file_extension(f.name), cfg.csv)
            batch = build_batch(rows, cfg.limits, aliases)
        except (ImportRejectedError, OSError) as e:
            print(f"  error: {e}")
            code = EXIT_PARTIAL_FAILURE
            continue
        headers = rows[0].headers() if rows else []
        # ヘッダ名自身を値にして lookup すると一致したヘッダが返る
        by_header = {h: h for h in headers}
        resolved = {name: lookup_field(by_header, names) for name, names in aliases.items()}
        print(f"  headers={headers}")
        print(f"  resolved={resolved}")
        print(f"  rows={len(rows)} valid={len(batch)} skipped={batch.skipped_count}")
        for record in batch.records[:3]:
            print(f"    {record.to_dict()}")
    return code


def _check_attachments(cfg: ImportConfig, files: list[Path], logger) -> int:
    try:
        total = validate_attachments(attachments_from_paths(files), cfg.limits)
    except ImportRejectedError as e:
        logger.error(f"attachments rejected ({e.reason.value}): {e.message}")
        return EXIT_PARTIAL_FAILURE
    except OSError as e:
        logger.error(f"attachments: {e}")
        return EXIT_FATAL
    logger.info(f"attachments ok: files={len(files)} bytes={total}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみ sys.argv を読む (テストで [] を渡すため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    load_dotenv(dotenv_path=Path(".env"), override=True)

    if args.debug:
        enable_debug()
        logger.debug("debug mode enabled")

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    files: list[Path] = args.files
    if args.attachments:
        return _check_attachments(cfg, files, logger)
    if args.inspect_data:
        return _inspect_data(cfg, files)

    owner_id = args.owner or cfg.owner_id
    logger.info(f"Importing {len(files)} file(s) into {cfg.table}")

    db_mode = "mock"
    try:
        if args.dry_run or not files or os.getenv("DISABLE_DB_CONNECT") == "1":
            result = import_files(files, cfg, cursor=None, owner_id=owner_id)
        else:
            try:
                with _db_connection(cfg) as cur:
                    db_mode = "live"
                    result = import_files(files, cfg, cursor=cur, owner_id=owner_id)
            except psycopg2.OperationalError as db_e:
                logger.error(f"database connection failed: {db_e}")
                return EXIT_FATAL
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    logger.info(f"mode={db_mode} total_rows={result.total_inserted_rows}")
    for fr in result.file_results or []:
        if fr.partial:
            logger.warning(f"{fr.file_name}: imported {fr.inserted_rows}, {fr.skipped_rows} rows skipped")

    # log_summary が "SUMMARY " を付与するので除去
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL
