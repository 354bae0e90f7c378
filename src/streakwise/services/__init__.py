"""Service module exports."""

from . import (
    achievements,
    calendar,
    export_csv,
    habits,
    ledger,
    statistics,
    streaks,
)

__all__ = [
    "achievements",
    "calendar",
    "export_csv",
    "habits",
    "ledger",
    "statistics",
    "streaks",
]
