from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from src.cli import main as cli_main
from src.services.importer import import_files, load_case_batch

"""End-to-end runs over generated spreadsheets (mock DB mode)."""


def _workbook_rows() -> list[dict[str, object]]:
    return [
        {
            "Sr No": 1,
            "Party": "Acme Corp vs Revenue Dept",
            "Court": "ITAT Mumbai",
            "Particular": "Assessment year 2019-20",
            "Start Date": datetime(2023, 6, 1),
            "Last Hearing Date": "05-03-2024",
            "Next Hearing": "",
            "Amount": 250000.0,
            "Treatment / Resolution": "Provision not required",
            "Remarks": "+follow up",
        },
        {
            "Sr No": None,
            "Party": "Beta Ltd vs Gamma",
            "Court": "NCLT",
            "Particular": "",
            "Start Date": None,
            "Last Hearing Date": "",
            "Next Hearing": "31/12/2024",
            "Amount": "Rs. 10,000",
            "Treatment / Resolution": "",
            "Remarks": "",
        },
        {
            "Sr No": 3,
            "Party": "",
            "Court": "NCLT",
            "Particular": "orphan row",
            "Start Date": None,
            "Last Hearing Date": "",
            "Next Hearing": "",
            "Amount": None,
            "Treatment / Resolution": "",
            "Remarks": "",
        },
    ]


def test_xlsx_normalization(temp_workdir: Path, excel_factory):
    p = excel_factory(temp_workdir / "data" / "cases.xlsx", {"Sheet1": _workbook_rows()})
    batch = load_case_batch(p)
    assert batch.skipped_rows == [3]
    first, second = batch.records
    assert first.to_dict() == {
        "serial_number": 1,
        "parties": "Acme Corp vs Revenue Dept",
        "forum": "ITAT Mumbai",
        "particulars": "Assessment year 2019-20",
        "start_date": "2023-06-01",
        "last_hearing_date": "2024-03-05",
        "next_hearing_date": None,
        "amount_involved": 250000.0,
        "treatment_resolution": "Provision not required",
        "remarks": "follow up",
        "status": "Active",
    }
    # Sr No 欠落 -> 行位置
    assert second.serial_number == 2
    assert second.next_hearing_date.isoformat() == "2024-12-31"
    assert second.amount_involved == 10000


def test_cli_run_writes_error_log(write_config: Path, temp_workdir: Path, excel_factory, capsys):
    excel_factory(temp_workdir / "data" / "cases.xlsx", {"Sheet1": _workbook_rows()})
    empty = temp_workdir / "data" / "empty.csv"
    empty.write_text("Parties,Forum\n", encoding="utf-8")

    code = cli_main(["data/cases.xlsx", "data/empty.csv", "--dry-run"])
    out = capsys.readouterr().out
    assert code == 2
    assert "SUMMARY files=2 success=1 failed=1 rows=2 skipped_rows=1" in out
    assert "ERROR empty.csv rejected (NO_VALID_ROWS)" in out

    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    entries = [json.loads(line) for line in logs[0].read_text(encoding="utf-8").splitlines()]
    assert [(e["file"], e["row"], e["error_type"]) for e in entries] == [
        ("cases.xlsx", 3, "MISSING_REQUIRED_FIELD"),
        ("empty.csv", -1, "NO_VALID_ROWS"),
    ]


def test_row_limit_rejects_whole_file(temp_workdir: Path):
    p = temp_workdir / "data" / "big.csv"
    p.write_text("Parties,Forum\n" + "".join(f"P{i},F\n" for i in range(1001)), encoding="utf-8")
    result = import_files([p])
    assert result.failed_files == 1
    assert result.total_inserted_rows == 0
    assert result.file_results[0].error_type == "TOO_MANY_ROWS"
