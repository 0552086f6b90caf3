# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pandas as pd
import pytest

from src.logging.init import reset_logging


@pytest.fixture(autouse=True)
def _clean_logging(monkeypatch):
    # 前テストの capsys ストリームを掴んだハンドラを残さない
    reset_logging()
    monkeypatch.delenv("IMPORT_OWNER_ID", raising=False)
    monkeypatch.delenv("DISABLE_DB_CONNECT", raising=False)
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """table: litigation_cases
owner_id: 7f1c2a64-0000-4000-8000-000000000001
csv:
  delimiter: ","
  encoding: utf-8-sig
limits:
  max_file_bytes: 5242880
  max_rows: 1000
field_aliases:
  parties: [Litigants]
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


CSV_HEADER = "Sr. No.,Parties,Forum,Particulars,Start Date,Next Hearing Date,Amount Involved,Remarks\n"


@pytest.fixture()
def cases_csv(temp_workdir: Path) -> Path:
    """Two valid rows and one row missing its forum."""
    p = temp_workdir / "data" / "cases.csv"
    p.write_text(
        CSV_HEADER
        + "1,Acme Corp vs State,High Court,Recovery suit,05-03-2024,12/04/2024,\"Rs. 12,34,567.50\",=cmd\n"
        + "2,Beta Ltd vs Gamma,District Court,,01-01-2023,,5000,\n"
        + "3,Acme Corp,,,,,,\n",
        encoding="utf-8",
    )
    return p


def make_excel(path: Path, sheets: dict[str, list[dict[str, object]]]) -> Path:
    """Write one DataFrame per sheet with a header row (sheet order kept)."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, index=False)
    return path


@pytest.fixture()
def excel_factory():
    return make_excel
