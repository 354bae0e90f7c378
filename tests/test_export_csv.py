"""Tests for CSV export of completion records."""

from __future__ import annotations

import csv
from datetime import date, datetime, timezone
from pathlib import Path

from streakwise.models import CompletionRecord
from streakwise.services import export_csv


def test_export_records_csv_creates_file(tmp_path):
    """Exporting records writes a CSV with header and rows."""

    records = [
        CompletionRecord(
            habit_id=1,
            occurred_on=date(2024, 1, 1),
            status="completed",
            notes="Morning, before work",
            recorded_at=datetime(2024, 1, 1, 7, 30, tzinfo=timezone.utc),
        ),
        CompletionRecord(habit_id=1, occurred_on=date(2024, 1, 2), status="missed"),
    ]

    output_path = Path(tmp_path) / "nested" / "records.csv"
    returned = export_csv.export_records_csv(records=records, output_path=output_path)

    assert returned == output_path
    assert output_path.exists(), "export should create the CSV and its parent directory"

    with output_path.open(newline="", encoding="utf-8") as fh:
        reader = csv.DictReader(fh)
        rows = list(reader)

    assert reader.fieldnames == ["habit_id", "occurred_on", "status", "notes", "recorded_at"]
    assert rows[0]["occurred_on"] == "2024-01-01"
    assert rows[0]["notes"] == "Morning, before work"
    assert rows[0]["recorded_at"].startswith("2024-01-01T07:30:00")
    assert rows[1]["status"] == "missed"
    assert rows[1]["notes"] == ""


def test_export_empty_writes_header_only(tmp_path):
    output_path = tmp_path / "empty.csv"
    export_csv.export_records_csv(records=[], output_path=output_path)

    lines = output_path.read_text(encoding="utf-8").splitlines()
    assert lines == ["habit_id,occurred_on,status,notes,recorded_at"]
