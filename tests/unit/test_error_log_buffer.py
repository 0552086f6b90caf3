from __future__ import annotations

import json
from pathlib import Path

from src.logging.error_log import ErrorLogBuffer, ErrorRecord

KEYS = {"timestamp", "file", "row", "error_type", "message"}


def test_error_record_json_line():
    rec = ErrorRecord.create(file="cases.csv", row=4, error_type="MISSING_REQUIRED_FIELD", message="forum")
    data = json.loads(rec.to_json_line())
    assert data["file"] == "cases.csv"
    assert data["row"] == 4
    assert data["timestamp"].endswith("Z")
    assert set(data.keys()) == KEYS


def test_flush_writes_json_lines(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    buf.add("a.xlsx", "FILE_TOO_LARGE", "too big")
    buf.add("b.csv", "MISSING_REQUIRED_FIELD", "forum", row=3)
    path = buf.flush()
    assert path is not None and path.exists()
    lines = [json.loads(x) for x in path.read_text(encoding="utf-8").splitlines()]
    assert [x["row"] for x in lines] == [-1, 3]
    assert all(set(x.keys()) == KEYS for x in lines)
    assert len(buf) == 0


def test_flush_appends_to_same_file(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path)
    buf.add("a.csv", "PARSE_ERROR", "x")
    first = buf.flush()
    buf.add("a.csv", "PARSE_ERROR", "y")
    second = buf.flush()
    assert first == second
    assert len(second.read_text(encoding="utf-8").splitlines()) == 2


def test_empty_flush_creates_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()
