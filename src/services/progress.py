from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.processing_result import FileStatus, ImportResult

"""Per-run import progress.

ImportProgress keeps the running tallies of an import run (files succeeded /
failed, cases inserted, rows skipped) and mirrors them on a tqdm bar when
stdout is a TTY. Without a TTY only the tallies are kept.
"""

__all__ = [
    "ImportProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ImportProgress:
    def __init__(self, total_files: int, *, description: str = "Importing cases") -> None:
        self.total_files = total_files
        self.description = description
        self.succeeded = 0
        self.failed = 0
        self.inserted_rows = 0
        self.skipped_rows = 0

        self.pbar: TqdmType[Any] | None = None
        if is_tty_enabled():
            self.pbar = tqdm(total=total_files, desc=description, unit="file", ncols=80, ascii=True)

    @property
    def done(self) -> int:
        return self.succeeded + self.failed

    def begin(self, path: Path) -> None:
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({path.name})")

    def record(self, result: ImportResult) -> None:
        """Count one finished file. Rows of failed files are not counted."""
        if result.status is FileStatus.SUCCESS:
            self.succeeded += 1
            self.inserted_rows += result.inserted_rows
            self.skipped_rows += result.skipped_rows
        else:
            self.failed += 1

        if self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)
            self.pbar.set_postfix(
                ok=self.succeeded,
                failed=self.failed,
                cases=self.inserted_rows,
                skipped=self.skipped_rows,
            )

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ImportProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
