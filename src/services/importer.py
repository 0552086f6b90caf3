from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import psycopg2

from ..db.batch_insert import BatchInsertError, insert_case_records
from ..logging.error_log import ErrorLogBuffer
from ..models.case_record import CaseBatch
from ..models.config_models import ImportConfig
from ..models.processing_result import FileStatus, ImportResult, ProcessingResult
from ..tabular.aliases import resolve_aliases
from ..tabular.errors import ImportRejectedError, NoValidRowsError
from ..tabular.normalizer import build_batch
from ..tabular.reader import file_extension, parse, validate_file
from .progress import ImportProgress

"""Import service: uploaded file -> validated CaseBatch -> bulk insert.

Each file is imported independently inside its own transaction. Rejections
(unsupported extension, oversize, too many rows, unreadable file, no valid
rows) and database failures end that file's import with a FAILED result;
nothing from a failed file is inserted. Without a cursor the service runs in
mock (dry-run) mode and only reports what would be inserted.
"""

logger = logging.getLogger(__name__)

MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
DATABASE_INSERT_ERROR = "DATABASE_INSERT_ERROR"
FILE_READ_ERROR = "FILE_READ_ERROR"
TRANSACTION_ROLLBACK_ERROR = "TRANSACTION_ROLLBACK_ERROR"


class ProcessingError(Exception):
    """Fatal error that prevents a run from starting."""


def load_case_batch(path: Path, config: ImportConfig | None = None) -> CaseBatch:
    """Validate, parse and normalize one uploaded file.

    Raises:
        ImportRejectedError: any of the file-level rejections, including
            NoValidRowsError when nothing insertable remains
        OSError: the file cannot be read
    """
    config = config or ImportConfig()
    validate_file(path.name, path.stat().st_size, config.limits)
    data = path.read_bytes()
    rows = parse(data, file_extension(path.name), config.csv)
    if not rows:
        raise NoValidRowsError("no valid rows found: the file has no data rows")

    batch = build_batch(rows, config.limits, resolve_aliases(config.field_aliases))
    if not batch.records:
        raise NoValidRowsError(
            f"no valid rows found: all {len(rows)} rows lack parties or forum"
        )
    return batch


def _failed(path: Path, start: datetime, error_type: str, message: str, skipped: int = 0) -> ImportResult:
    return ImportResult(
        file_name=path.name,
        status=FileStatus.FAILED,
        inserted_rows=0,
        skipped_rows=skipped,
        elapsed_seconds=(datetime.now(UTC) - start).total_seconds(),
        error_type=error_type,
        error=message,
    )


def _rollback(cursor: Any, file_name: str, error_log: ErrorLogBuffer) -> None:
    try:
        cursor.execute("ROLLBACK")
    except psycopg2.Error as e:
        # 元のエラーを上書きしない
        logger.warning("%s: rollback failed: %s", file_name, e)
        error_log.add(file_name, TRANSACTION_ROLLBACK_ERROR, str(e))


def import_file(
    path: Path,
    config: ImportConfig | None = None,
    cursor: Any = None,
    owner_id: str | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ImportResult:
    """Import a single file and report the outcome.

    Args:
        path: uploaded CSV/XLSX/XLS file
        config: import configuration (defaults when None)
        cursor: psycopg2 cursor; None = mock mode (nothing inserted)
        owner_id: user id stamped on every inserted row
        error_log: buffer receiving rejection and skipped-row records

    Returns:
        ImportResult; rejections are reported, never raised
    """
    config = config or ImportConfig()
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    start = datetime.now(UTC)
    name = path.name

    try:
        batch = load_case_batch(path, config)
    except ImportRejectedError as e:
        logger.error("%s rejected (%s): %s", name, e.reason.value, e.message)
        error_log.add(name, e.reason.value, e.message)
        return _failed(path, start, e.reason.value, e.message)
    except OSError as e:
        logger.error("%s: cannot read file: %s", name, e)
        error_log.add(name, FILE_READ_ERROR, str(e))
        return _failed(path, start, FILE_READ_ERROR, str(e))

    for row_number in batch.skipped_rows:
        error_log.add(name, MISSING_REQUIRED_FIELD, "parties and forum are required", row=row_number)
    if batch.skipped_count:
        logger.warning("%s: %d rows skipped due to missing required fields", name, batch.skipped_count)

    if cursor is None:
        logger.debug("%s: mock mode, %d records not inserted", name, len(batch))
        return ImportResult(
            file_name=name,
            status=FileStatus.SUCCESS,
            inserted_rows=len(batch),
            skipped_rows=batch.skipped_count,
            elapsed_seconds=(datetime.now(UTC) - start).total_seconds(),
        )

    try:
        cursor.execute("BEGIN")
        result = insert_case_records(cursor, config.table, batch.records, owner_id)
        cursor.execute("COMMIT")
    except (BatchInsertError, psycopg2.Error) as e:
        _rollback(cursor, name, error_log)
        logger.error("%s: insert failed, transaction rolled back: %s", name, e)
        error_log.add(name, DATABASE_INSERT_ERROR, str(e))
        return _failed(path, start, DATABASE_INSERT_ERROR, str(e), skipped=batch.skipped_count)

    inserted_ids = [rv[0] for rv in result.returned_values or [] if rv]
    logger.info("%s: imported %d cases into %s", name, result.inserted_rows, config.table)
    logger.debug("%s: inserted ids %s", name, inserted_ids)
    return ImportResult(
        file_name=name,
        status=FileStatus.SUCCESS,
        inserted_rows=result.inserted_rows,
        skipped_rows=batch.skipped_count,
        elapsed_seconds=(datetime.now(UTC) - start).total_seconds(),
        inserted_ids=inserted_ids,
    )


def import_files(
    paths: Sequence[Path],
    config: ImportConfig | None = None,
    cursor: Any = None,
    owner_id: str | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ProcessingResult:
    """Import files one after another and aggregate the results.

    Raises:
        ProcessingError: live mode (cursor given) without an owner id
    """
    config = config or ImportConfig()
    owner_id = owner_id or config.owner_id
    if cursor is not None and not owner_id:
        raise ProcessingError("owner id is required to insert cases (--owner or IMPORT_OWNER_ID)")

    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    results: list[ImportResult] = []

    with ImportProgress(len(paths)) as progress:
        for path in paths:
            progress.begin(path)
            result = import_file(path, config, cursor=cursor, owner_id=owner_id, error_log=error_log)
            results.append(result)
            progress.record(result)

    try:
        log_path = error_log.flush()
    except OSError as e:
        logger.warning("could not write error log: %s", e)
    else:
        if log_path is not None:
            logger.info("error log written: %s", log_path)

    end_time = datetime.now(UTC)
    elapsed_seconds = (end_time - start_time).total_seconds()
    throughput_rps = progress.inserted_rows / elapsed_seconds if elapsed_seconds > 0 else 0.0

    return ProcessingResult(
        success_files=progress.succeeded,
        failed_files=progress.failed,
        total_inserted_rows=progress.inserted_rows,
        total_skipped_rows=progress.skipped_rows,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed_seconds,
        throughput_rows_per_sec=throughput_rps,
        file_results=results,
    )
