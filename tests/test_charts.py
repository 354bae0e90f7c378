"""Smoke tests for PNG chart rendering."""

from __future__ import annotations

from datetime import date, timedelta

from streakwise.charts import heatmap_png, weekly_trend_png
from streakwise.services.calendar import CalendarDay, CalendarProjection, DayStatus
from streakwise.services.statistics import Bucket

PNG_MAGIC = b"\x89PNG"


def test_heatmap_png_writes_image():
    start = date(2024, 1, 3)
    statuses = [DayStatus.COMPLETED, DayStatus.MISSED, DayStatus.NOT_SCHEDULED, DayStatus.PENDING]
    projection = CalendarProjection(
        habit_id=1,
        days=[CalendarDay(start + timedelta(days=i), s) for i, s in enumerate(statuses)],
    )

    path = heatmap_png(projection, title="Read")

    try:
        assert path.read_bytes().startswith(PNG_MAGIC)
    finally:
        path.unlink(missing_ok=True)


def test_heatmap_png_empty_projection():
    path = heatmap_png(CalendarProjection(habit_id=1, days=[]))
    try:
        assert path.stat().st_size > 0
    finally:
        path.unlink(missing_ok=True)


def test_weekly_trend_png_writes_image():
    buckets = [
        Bucket("2024-W01", date(2024, 1, 1), date(2024, 1, 7), 7, 5),
        Bucket("2024-W02", date(2024, 1, 8), date(2024, 1, 14), 3, 3),
    ]

    path = weekly_trend_png(buckets)

    try:
        assert path.read_bytes().startswith(PNG_MAGIC)
    finally:
        path.unlink(missing_ok=True)


def test_weekly_trend_png_without_buckets():
    path = weekly_trend_png([])
    try:
        assert path.exists()
    finally:
        path.unlink(missing_ok=True)
