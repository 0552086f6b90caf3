"""Tabular import normalizer: validate, parse and normalize case spreadsheets."""

from .errors import (
    FileTooLargeError,
    ImportRejectedError,
    NoValidRowsError,
    ParseError,
    RejectReason,
    TooManyFilesError,
    TooManyRowsError,
    UnsupportedExtensionError,
)
from .normalizer import (
    build_batch,
    build_case_record,
    coerce_amount,
    coerce_date,
    lookup_field,
    sanitize_cell,
)
from .reader import parse, validate_file

__all__ = [
    "FileTooLargeError",
    "ImportRejectedError",
    "NoValidRowsError",
    "ParseError",
    "RejectReason",
    "TooManyFilesError",
    "TooManyRowsError",
    "UnsupportedExtensionError",
    "build_batch",
    "build_case_record",
    "coerce_amount",
    "coerce_date",
    "lookup_field",
    "parse",
    "sanitize_cell",
    "validate_file",
]
