from __future__ import annotations

from pathlib import Path

import pytest

from src.models.config_models import ImportLimits
from src.services.attachments import Attachment, attachments_from_paths, validate_attachments
from src.tabular.errors import FileTooLargeError, RejectReason, TooManyFilesError

MB = 1024 * 1024


def test_within_limits_returns_total():
    files = [Attachment("notice.pdf", 2 * MB), Attachment("reply.docx", MB)]
    assert validate_attachments(files) == 3 * MB


def test_per_file_ceiling():
    files = [Attachment("ok.pdf", MB), Attachment("video.mp4", 500 * MB + 1)]
    with pytest.raises(FileTooLargeError) as e:
        validate_attachments(files)
    assert "video.mp4" in str(e.value)


def test_exactly_500mb_allowed():
    assert validate_attachments([Attachment("big.zip", 500 * MB)]) == 500 * MB


def test_file_count_ceiling():
    files = [Attachment(f"f{i}.pdf", 1) for i in range(51)]
    with pytest.raises(TooManyFilesError) as e:
        validate_attachments(files)
    assert e.value.reason is RejectReason.TOO_MANY_FILES
    assert validate_attachments(files[:50]) == 50


def test_configured_limits():
    limits = ImportLimits(attachment_max_files=1, attachment_max_file_bytes=10)
    with pytest.raises(TooManyFilesError):
        validate_attachments([Attachment("a", 1), Attachment("b", 1)], limits)


def test_from_paths(tmp_path: Path):
    p = tmp_path / "notice.pdf"
    p.write_bytes(b"x" * 42)
    assert attachments_from_paths([p]) == [Attachment("notice.pdf", 42)]
