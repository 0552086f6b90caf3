from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

"""Processing result models for the litigation case importer.

ImportResult describes the outcome of importing one uploaded file;
ProcessingResult aggregates a whole CLI run and feeds the SUMMARY line.
"""


class FileStatus(Enum):
    """Outcome of a single file import.

    - SUCCESS: records were inserted (possibly with some rows skipped)
    - FAILED: the file was rejected or the insert was rolled back
    """
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ImportResult:
    """Per-file import outcome.

    error_type holds the RejectReason value (or DATABASE_INSERT_ERROR) when
    status is FAILED, so callers can surface a descriptive message.
    """
    file_name: str
    status: FileStatus
    inserted_rows: int = 0
    skipped_rows: int = 0
    elapsed_seconds: float = 0.0
    error_type: str | None = None
    error: str | None = None
    inserted_ids: list[object] | None = None  # RETURNING id (live mode only)

    @property
    def partial(self) -> bool:
        """True when the import succeeded but some rows were dropped."""
        return self.status == FileStatus.SUCCESS and self.skipped_rows > 0


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results for one run over one or more files."""
    success_files: int
    failed_files: int
    total_inserted_rows: int
    total_skipped_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float  # total_inserted / elapsed
    file_results: list[ImportResult] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
