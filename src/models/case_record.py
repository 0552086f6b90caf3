from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

"""CaseRecord: the normalized output unit of a bulk import."""

__all__ = [
    "CaseRecord",
    "CaseBatch",
    "DB_COLUMNS",
    "IMPORTED_STATUS",
]

IMPORTED_STATUS = "Active"

# Column order used for INSERT (litigation_cases table)
DB_COLUMNS: tuple[str, ...] = (
    "sr_no",
    "parties",
    "forum",
    "particular",
    "start_date",
    "last_hearing_date",
    "next_hearing_date",
    "amount_involved",
    "treatment_resolution",
    "remarks",
    "status",
    "user_id",
)


@dataclass(frozen=True)
class CaseRecord:
    """A litigation case built from one ImportRow.

    A record is insertable only when both parties and forum are non-empty;
    see is_valid. Ownership and the generated id are assigned by storage.
    """
    serial_number: int
    parties: str
    forum: str
    particulars: str | None = None
    start_date: date | None = None
    last_hearing_date: date | None = None
    next_hearing_date: date | None = None
    amount_involved: float | None = None
    treatment_resolution: str | None = None
    remarks: str | None = None
    status: str = IMPORTED_STATUS

    @property
    def is_valid(self) -> bool:
        return bool(self.parties.strip()) and bool(self.forum.strip())

    def to_db_row(self, owner_id: str | None) -> tuple[Any, ...]:
        """Values in DB_COLUMNS order. Dates go out as ISO strings."""
        return (
            self.serial_number,
            self.parties,
            self.forum,
            self.particulars,
            _iso(self.start_date),
            _iso(self.last_hearing_date),
            _iso(self.next_hearing_date),
            self.amount_involved,
            self.treatment_resolution,
            self.remarks,
            self.status,
            owner_id,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "serial_number": self.serial_number,
            "parties": self.parties,
            "forum": self.forum,
            "particulars": self.particulars,
            "start_date": _iso(self.start_date),
            "last_hearing_date": _iso(self.last_hearing_date),
            "next_hearing_date": _iso(self.next_hearing_date),
            "amount_involved": self.amount_involved,
            "treatment_resolution": self.treatment_resolution,
            "remarks": self.remarks,
            "status": self.status,
        }


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class CaseBatch:
    """Valid records of one import (input order kept) plus what was dropped."""
    records: list[CaseRecord]
    skipped_count: int = 0
    skipped_rows: list[int] = field(default_factory=list)  # 1-based row numbers

    def __len__(self) -> int:
        return len(self.records)
