"""CSV export helpers for completion records."""

from __future__ import annotations

import csv
from datetime import date, datetime
from pathlib import Path
from typing import Iterable

from ..models.habit import CompletionRecord


def _serialize_value(value):
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def export_records_csv(*, records: Iterable[CompletionRecord], output_path: Path) -> Path:
    """Write completion records to CSV at `output_path`.

    Columns are deterministic: habit_id, occurred_on, status, notes, recorded_at.
    Returns the path written.
    """

    headers = ["habit_id", "occurred_on", "status", "notes", "recorded_at"]
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with output_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(
            fh, fieldnames=headers, extrasaction="ignore", quoting=csv.QUOTE_MINIMAL
        )
        writer.writeheader()
        for record in records:
            writer.writerow(
                {name: _serialize_value(getattr(record, name, None)) for name in headers}
            )

    return output_path
