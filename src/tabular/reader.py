from __future__ import annotations

import io
from pathlib import PurePath
from typing import Any

import pandas as pd

from ..models.config_models import CsvOptions, ImportLimits
from ..models.import_row import ImportRow
from .errors import FileTooLargeError, ParseError, UnsupportedExtensionError

"""Upload validation and format-specific parsing.

- validate_file: extension allow-list + size ceiling, checked before any bytes are read
- parse: CSV / XLSX / XLS bytes -> list[ImportRow]

The whole file is materialized once through pandas; there is no streaming.
"""

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "PREFERRED_SHEET",
    "file_extension",
    "validate_file",
    "parse",
]

SUPPORTED_EXTENSIONS = (".csv", ".xlsx", ".xls")
PREFERRED_SHEET = "Sheet1"

_EXCEL_ENGINES = {
    ".xlsx": "openpyxl",
    ".xls": "xlrd",
}


def file_extension(name: str) -> str:
    return PurePath(name).suffix.lower()


def validate_file(name: str, size: int, limits: ImportLimits | None = None) -> None:
    """Reject unsupported or oversized uploads.

    Raises:
        UnsupportedExtensionError: extension is not .csv/.xlsx/.xls
        FileTooLargeError: size exceeds limits.max_file_bytes
    """
    limits = limits or ImportLimits()
    ext = file_extension(name)
    if ext not in SUPPORTED_EXTENSIONS:
        raise UnsupportedExtensionError(
            f"unsupported file type '{ext or name}': expected one of {', '.join(SUPPORTED_EXTENSIONS)}"
        )
    if size > limits.max_file_bytes:
        raise FileTooLargeError(
            f"file '{name}' is {size} bytes, limit is {limits.max_file_bytes} bytes"
        )


def parse(data: bytes, extension: str, csv_options: CsvOptions | None = None) -> list[ImportRow]:
    """Decode raw upload bytes into ImportRows.

    Parameters
    ----------
    data: file contents
    extension: declared extension (".csv", ".xlsx", ".xls"; case-insensitive)
    csv_options: delimiter / encoding for delimited text

    Raises:
        UnsupportedExtensionError: unknown extension
        ParseError: the bytes cannot be decoded as the declared format
    """
    ext = extension.lower() if extension.startswith(".") else f".{extension.lower()}"
    if ext == ".csv":
        df = _read_csv(data, csv_options or CsvOptions())
    elif ext in _EXCEL_ENGINES:
        df = _read_workbook(data, ext)
    else:
        raise UnsupportedExtensionError(f"unsupported file type '{extension}'")
    return _frame_to_rows(df)


def _read_csv(data: bytes, options: CsvOptions) -> pd.DataFrame:
    try:
        # 全セル文字列のまま読む (NA 文字列の自動変換は行わない)
        return pd.read_csv(
            io.BytesIO(data),
            sep=options.delimiter,
            encoding=options.encoding,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except Exception as e:
        raise ParseError(f"could not read delimited text: {e}") from e


def _read_workbook(data: bytes, ext: str) -> pd.DataFrame:
    try:
        xls = pd.ExcelFile(io.BytesIO(data), engine=_EXCEL_ENGINES[ext])
        names = [str(n) for n in xls.sheet_names]
        if not names:
            raise ParseError("workbook has no sheets")
        sheet = PREFERRED_SHEET if PREFERRED_SHEET in names else names[0]
        return xls.parse(sheet, header=0, keep_default_na=False)
    except ParseError:
        raise
    except Exception as e:
        raise ParseError(f"could not read {ext} workbook: {e}") from e


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):  # pragma: no cover - array-like cell
        return False


def _frame_to_rows(df: pd.DataFrame) -> list[ImportRow]:
    """Header from the first row, blank rows skipped, absent cells -> ""."""
    if df.empty:
        return []
    columns = [str(c).strip() for c in df.columns]
    # numpy スカラーを Python オブジェクトへ
    frame = df.astype(object)
    rows: list[ImportRow] = []
    for raw in frame.itertuples(index=False, name=None):
        if all(_is_blank(v) for v in raw):
            continue
        cells = ["" if (v is None or (not isinstance(v, str) and _is_blank(v))) else v for v in raw]
        rows.append(ImportRow(row_number=len(rows) + 1, values=_merge_cells(columns, cells)))
    return rows


def _merge_cells(columns: list[str], cells: list[Any]) -> dict[str, Any]:
    # 空白だけ違うヘッダは trim 後に同名になる: 最初の非空セルを残す
    values: dict[str, Any] = {}
    for header, cell in zip(columns, cells, strict=False):
        if header not in values or _is_blank(values[header]):
            values[header] = cell
    return values
