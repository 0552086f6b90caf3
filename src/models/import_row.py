from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""ImportRow model for the litigation case importer.

ImportRow represents a single data line of an uploaded CSV/XLSX/XLS file
exactly as the parser produced it: trimmed headers mapped to loosely typed
cells. It is consumed once by the normalizer and never stored.
"""

__all__ = [
    "ImportRow",
]


@dataclass(frozen=True)
class ImportRow:
    """One parsed input line.

    row_number is 1-based over data rows (the header line is not counted) and
    doubles as the default serial number. Absent cells are "" rather than None
    so downstream code sees a uniform type.
    """
    row_number: int
    values: dict[str, Any]  # header -> str | int | float | datetime | ""

    def headers(self) -> list[str]:
        return list(self.values.keys())
