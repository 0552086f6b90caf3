from __future__ import annotations

import logging
import math
import numbers
import re
from collections.abc import Mapping, Sequence
from datetime import date, datetime, timedelta
from typing import Any

import pandas as pd

from ..models.case_record import CaseBatch, CaseRecord
from ..models.config_models import ImportLimits
from ..models.import_row import ImportRow
from . import aliases as fields
from .errors import TooManyRowsError

"""Row normalization: ImportRow -> CaseRecord.

Pipeline per row: sanitize every cell -> resolve each logical field through
its header aliases -> coerce to the target type. Coercion never raises; an
unusable cell becomes None (or the row-position default for the serial
number). Only rows lacking parties or forum are dropped.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "AMOUNT_CEILING",
    "SERIAL_MAX",
    "sanitize_cell",
    "lookup_field",
    "coerce_date",
    "coerce_amount",
    "coerce_serial",
    "coerce_text",
    "build_case_record",
    "build_batch",
]

FORMULA_PREFIXES = "=+-@"
AMOUNT_CEILING = 999_999_999_999
SERIAL_MAX = 2_147_483_647  # sr_no は PostgreSQL integer

PARTIES_MAX = 500
FORUM_MAX = 200
PARTICULARS_MAX = 1000
LONG_TEXT_MAX = 2000

# Excel の日付シリアル値の起点 (1900 leap-year bug 込み)
_EXCEL_EPOCH = date(1899, 12, 30)
_EXCEL_SERIAL_MAX = 2_958_465  # 9999-12-31

_DATE_SEPARATORS = re.compile(r"[-/]")
_LEADING_INT = re.compile(r"\s*(\d+)")
_CURRENCY_PREFIX = re.compile(r"^[^\d.\-]*?[A-Za-z]+\.")
# pandas は "now" / "today" を実行時刻として解釈する
_RELATIVE_DATE_WORDS = frozenset({"now", "today"})


def sanitize_cell(value: Any) -> Any:
    """Neutralize spreadsheet formula injection in text cells.

    Leading ``= + - @`` characters are removed (together with any whitespace
    between them) and the result is trimmed. Non-text values pass through.
    """
    if not isinstance(value, str):
        return value
    text = value.strip()
    while text and text[0] in FORMULA_PREFIXES:
        text = text[1:].lstrip()
    return text


def _header_key(header: Any) -> str:
    return " ".join(str(header).split()).casefold()


def _compact_key(header: Any) -> str:
    return re.sub(r"[\W_]+", "", str(header).casefold())


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def lookup_field(row: Mapping[str, Any], candidates: Sequence[str]) -> Any | None:
    """Return the first non-empty cell whose header matches an alias.

    Aliases are tried in order, first by case-insensitive trimmed header,
    then by header with punctuation and spaces removed ("sr no" == "Sr. No.").
    """
    exact: dict[str, Any] = {}
    loose: dict[str, Any] = {}
    for header, value in row.items():
        if _is_empty(value):
            continue
        exact.setdefault(_header_key(header), value)
        loose.setdefault(_compact_key(header), value)

    for alias in candidates:
        key = _header_key(alias)
        if key in exact:
            return exact[key]
    for alias in candidates:
        key = _compact_key(alias)
        if key and key in loose:
            return loose[key]
    return None


def _parse_day_first(text: str) -> date | None:
    parts = _DATE_SEPARATORS.split(text)
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None
    day, month, year = (int(p) for p in parts)
    if len(parts[2]) == 2:
        year += 2000
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _parse_generic(text: str) -> date | None:
    if text.casefold() in _RELATIVE_DATE_WORDS:
        return None
    try:
        ts = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return ts.date()


def _from_excel_serial(value: float) -> date | None:
    if not math.isfinite(value) or value < 1 or value > _EXCEL_SERIAL_MAX:
        return None
    return _EXCEL_EPOCH + timedelta(days=int(value))


def coerce_date(value: Any) -> date | None:
    """Interpret a cell as a calendar date.

    Text is read as dd-mm-yyyy / dd/mm/yyyy first and falls back to generic
    parsing; datetimes lose their time of day; numbers are Excel serials.
    Anything else is None.
    """
    if _is_empty(value) or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
        return _parse_day_first(text) or _parse_generic(text)
    if isinstance(value, datetime):
        if pd.isna(value):
            return None
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, numbers.Real):
        return _from_excel_serial(float(value))
    return None


def _parse_amount_text(text: str) -> float | None:
    # "Rs." / "INR" などの通貨接頭辞を先に落とす (その "." は小数点ではない)
    rest = _CURRENCY_PREFIX.sub("", text.strip())
    kept = re.sub(r"[^0-9.\-]", "", rest)
    if not any(ch.isdigit() for ch in kept):
        return None
    negative = kept.startswith("-")
    digits = re.sub(r"[^0-9.]", "", kept)
    try:
        amount = float(digits)
    except ValueError:
        # e.g. "1.234.567"
        return None
    return -amount if negative else amount


def coerce_amount(value: Any) -> float | None:
    """Interpret a cell as a non-negative amount no larger than AMOUNT_CEILING.

    "Rs. 10,000" -> 10000.0. Negative, non-finite and oversize values are
    rejected (None), never clamped.
    """
    if _is_empty(value) or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        amount: float | None = float(value)
    elif isinstance(value, str):
        amount = _parse_amount_text(value)
    else:
        return None
    if amount is None:
        return None
    if not math.isfinite(amount):
        logger.warning("amount is not a finite number: %r", value)
        return None
    if amount < 0 or amount > AMOUNT_CEILING:
        logger.warning("amount out of range 0..%d, ignored: %r", AMOUNT_CEILING, value)
        return None
    return amount


def coerce_serial(value: Any, default: int) -> int:
    """Positive integer serial number up to SERIAL_MAX, or default (the row position)."""
    if _is_empty(value) or isinstance(value, bool):
        return default
    number: int | None = None
    if isinstance(value, numbers.Real):
        as_float = float(value)
        if math.isfinite(as_float):
            number = int(as_float)
    elif isinstance(value, str):
        m = _LEADING_INT.match(value)
        if m:
            number = int(m.group(1))
    if number is None or not 1 <= number <= SERIAL_MAX:
        return default
    return number


def coerce_text(value: Any, limit: int) -> str | None:
    """Trimmed text capped at limit characters; empty -> None."""
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        text = str(int(value))
    elif isinstance(value, datetime):
        text = value.date().isoformat() if not pd.isna(value) else ""
    else:
        text = str(value).strip()
    text = text[:limit]
    return text or None


def build_case_record(
    row: ImportRow, field_aliases: Mapping[str, Sequence[str]] | None = None
) -> CaseRecord:
    """Map one ImportRow to a CaseRecord (which may be invalid)."""
    table = field_aliases or fields.FIELD_ALIASES
    cells = {header: sanitize_cell(v) for header, v in row.values.items()}

    def get(name: str) -> Any | None:
        return lookup_field(cells, table[name])

    return CaseRecord(
        serial_number=coerce_serial(get(fields.SERIAL_NUMBER), default=row.row_number),
        parties=coerce_text(get(fields.PARTIES), PARTIES_MAX) or "",
        forum=coerce_text(get(fields.FORUM), FORUM_MAX) or "",
        particulars=coerce_text(get(fields.PARTICULARS), PARTICULARS_MAX),
        start_date=coerce_date(get(fields.START_DATE)),
        last_hearing_date=coerce_date(get(fields.LAST_HEARING_DATE)),
        next_hearing_date=coerce_date(get(fields.NEXT_HEARING_DATE)),
        amount_involved=coerce_amount(get(fields.AMOUNT_INVOLVED)),
        treatment_resolution=coerce_text(get(fields.TREATMENT_RESOLUTION), LONG_TEXT_MAX),
        remarks=coerce_text(get(fields.REMARKS), LONG_TEXT_MAX),
    )


def build_batch(
    rows: Sequence[ImportRow],
    limits: ImportLimits | None = None,
    field_aliases: Mapping[str, Sequence[str]] | None = None,
) -> CaseBatch:
    """Normalize all rows and keep only insertable records.

    Raises:
        TooManyRowsError: more than limits.max_rows rows (checked before any
            record is built)
    """
    limits = limits or ImportLimits()
    if len(rows) > limits.max_rows:
        raise TooManyRowsError(
            f"file has {len(rows)} data rows, limit is {limits.max_rows}"
        )

    records: list[CaseRecord] = []
    skipped: list[int] = []
    for row in rows:
        record = build_case_record(row, field_aliases)
        if record.is_valid:
            records.append(record)
        else:
            skipped.append(row.row_number)

    logger.debug("built batch rows=%d valid=%d skipped=%d", len(rows), len(records), len(skipped))
    return CaseBatch(records=records, skipped_count=len(skipped), skipped_rows=skipped)
