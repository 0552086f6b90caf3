from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from psycopg2.extras import execute_values

from ..models.case_record import DB_COLUMNS, CaseRecord

"""Bulk insert collaborator for normalized case records.

psycopg2.extras.execute_values による一括 INSERT。The caller owns the
transaction (BEGIN/COMMIT/ROLLBACK); this module only issues the INSERT and
wraps driver failures in BatchInsertError. No retries.
"""

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

class BatchInsertError(Exception):
    pass

@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int
    returned_values: list[tuple[Any, ...]] | None = None

def _quote_table(table: str) -> str:
    if not _IDENTIFIER.match(table):
        raise BatchInsertError(f"invalid table name: {table!r}")
    return ".".join(f'"{part}"' for part in table.split("."))

def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    returning: str | None = None,
    page_size: int = 1000,
) -> InsertResult:
    """Perform a batched INSERT using psycopg2.extras.execute_values.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: target table ("name" or "schema.name")
    columns: insert columns, in the order of each row
    rows: row value sequences
    returning: column to return (e.g. "id"); None for no RETURNING clause
    page_size: execute_values page size
    """
    rows_list = [tuple(r) for r in rows]
    if not rows_list:
        return InsertResult(inserted_rows=0, returned_values=[] if returning else None)

    cols_sql = ",".join(f'"{c}"' for c in columns)
    sql = f"INSERT INTO {_quote_table(table)} ({cols_sql}) VALUES %s"
    if returning:
        sql += f' RETURNING "{returning}"'

    try:
        # fetch=True: 全ページ分の RETURNING 結果をまとめて受け取る
        returned = execute_values(cursor, sql, rows_list, page_size=page_size, fetch=bool(returning))
    except Exception as e:
        raise BatchInsertError(str(e)) from e

    return InsertResult(
        inserted_rows=len(rows_list),
        returned_values=list(returned) if returning and returned is not None else None,
    )

def insert_case_records(
    cursor: Any,
    table: str,
    records: Sequence[CaseRecord],
    owner_id: str | None,
    page_size: int = 1000,
) -> InsertResult:
    """Insert CaseRecords, stamping owner_id on each row; returns generated ids."""
    return batch_insert(
        cursor,
        table=table,
        columns=DB_COLUMNS,
        rows=(r.to_db_row(owner_id) for r in records),
        returning="id",
        page_size=page_size,
    )
