from __future__ import annotations

from enum import Enum

"""Rejection taxonomy for uploaded files.

Every rejection is fatal for the whole file and is surfaced to the user as a
message; none is retried. Per-cell coercion problems are not errors at all,
they degrade to None.
"""

__all__ = [
    "RejectReason",
    "ImportRejectedError",
    "UnsupportedExtensionError",
    "FileTooLargeError",
    "TooManyFilesError",
    "TooManyRowsError",
    "ParseError",
    "NoValidRowsError",
]


class RejectReason(Enum):
    UNSUPPORTED_EXTENSION = "UNSUPPORTED_EXTENSION"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    TOO_MANY_FILES = "TOO_MANY_FILES"
    TOO_MANY_ROWS = "TOO_MANY_ROWS"
    PARSE_ERROR = "PARSE_ERROR"
    NO_VALID_ROWS = "NO_VALID_ROWS"


class ImportRejectedError(Exception):
    """Base class: the file (or attachment set) was rejected wholesale."""

    reason: RejectReason

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnsupportedExtensionError(ImportRejectedError):
    reason = RejectReason.UNSUPPORTED_EXTENSION


class FileTooLargeError(ImportRejectedError):
    reason = RejectReason.FILE_TOO_LARGE


class TooManyFilesError(ImportRejectedError):
    reason = RejectReason.TOO_MANY_FILES


class TooManyRowsError(ImportRejectedError):
    reason = RejectReason.TOO_MANY_ROWS


class ParseError(ImportRejectedError):
    reason = RejectReason.PARSE_ERROR


class NoValidRowsError(ImportRejectedError):
    reason = RejectReason.NO_VALID_ROWS
