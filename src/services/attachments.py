from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from ..models.config_models import ImportLimits
from ..tabular.errors import FileTooLargeError, TooManyFilesError

"""Attachment checks for the dispute-creation upload.

Attachments are stored as-is by the object storage collaborator; nothing is
parsed. Only the file count and per-file size ceilings apply.
"""

__all__ = [
    "Attachment",
    "validate_attachments",
    "attachments_from_paths",
]


@dataclass(frozen=True)
class Attachment:
    name: str
    size: int  # bytes


def attachments_from_paths(paths: Sequence[Path]) -> list[Attachment]:
    return [Attachment(name=p.name, size=p.stat().st_size) for p in paths]


def validate_attachments(files: Sequence[Attachment], limits: ImportLimits | None = None) -> int:
    """Validate an attachment set; returns the total size in bytes.

    Raises:
        TooManyFilesError: more than limits.attachment_max_files files
        FileTooLargeError: any file above limits.attachment_max_file_bytes
    """
    limits = limits or ImportLimits()
    if len(files) > limits.attachment_max_files:
        raise TooManyFilesError(
            f"{len(files)} attachments selected, limit is {limits.attachment_max_files}"
        )
    oversize = [a for a in files if a.size > limits.attachment_max_file_bytes]
    if oversize:
        names = ", ".join(a.name for a in oversize)
        raise FileTooLargeError(
            f"attachment(s) exceed {limits.attachment_max_file_bytes} bytes: {names}"
        )
    return sum(a.size for a in files)
