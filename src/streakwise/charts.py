"""Chart helpers for report exports."""

from __future__ import annotations

from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap

from .services.calendar import CalendarProjection, DayStatus
from .services.statistics import Bucket

# Cell fill per status; order defines the colormap index.
STATUS_COLORS = {
    DayStatus.NOT_SCHEDULED: "#EEEEEE",
    DayStatus.FUTURE: "#FFFFFF",
    DayStatus.MISSED: "#F4A6A6",
    DayStatus.PENDING: "#FFE08A",
    DayStatus.COMPLETED: "#2E7D32",
}
_STATUS_INDEX = {status: i for i, status in enumerate(STATUS_COLORS)}


def _save(fig) -> Path:
    with NamedTemporaryFile(delete=False, suffix=".png") as tmp:
        fig.savefig(tmp.name, bbox_inches="tight", dpi=100)
        path = Path(tmp.name)
    plt.close(fig)
    return path


def heatmap_png(projection: CalendarProjection, *, title: str = "") -> Path:
    """Render a Monday-first weekly heatmap of a projection and return the PNG path."""

    days = projection.days
    if not days:
        fig, ax = plt.subplots(figsize=(6, 2))
        ax.text(0.5, 0.5, "No days to show", ha="center", va="center", fontsize=12, color="#666")
        ax.axis("off")
        return _save(fig)

    lead = days[0].day.weekday()
    columns = (lead + len(days) + 6) // 7
    # Padding cells render as FUTURE (blank).
    grid = [[_STATUS_INDEX[DayStatus.FUTURE]] * columns for _ in range(7)]
    for offset, cell in enumerate(days, start=lead):
        grid[offset % 7][offset // 7] = _STATUS_INDEX[cell.status]

    fig, ax = plt.subplots(figsize=(max(4, columns * 0.35), 3))
    cmap = ListedColormap(list(STATUS_COLORS.values()))
    ax.imshow(grid, cmap=cmap, vmin=0, vmax=len(STATUS_COLORS) - 1, aspect="equal")
    ax.set_yticks(range(7))
    ax.set_yticklabels(["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"], fontsize=8)
    ax.set_xticks([])
    ax.set_title(title or f"{days[0].day.isoformat()} to {days[-1].day.isoformat()}", fontsize=10)
    for spine in ax.spines.values():
        spine.set_visible(False)
    return _save(fig)


def weekly_trend_png(buckets: Sequence[Bucket], *, title: str = "Completion rate") -> Path:
    """Render bucket completion rates as a bar chart and return the PNG path."""

    if not buckets:
        fig, ax = plt.subplots(figsize=(6, 3))
        ax.text(0.5, 0.5, "No data yet", ha="center", va="center", fontsize=12, color="#999")
        ax.axis("off")
        return _save(fig)

    labels = [b.period_label for b in buckets]
    rates = [b.completion_rate_percent for b in buckets]

    fig, ax = plt.subplots(figsize=(max(6, len(buckets) * 0.8), 4))
    bars = ax.bar(labels, rates, color="#2E7D32", alpha=0.85)
    for bar, bucket in zip(bars, buckets):
        ax.annotate(
            f"{bucket.completed_count}/{bucket.scheduled_count}",
            xy=(bar.get_x() + bar.get_width() / 2, bar.get_height()),
            ha="center",
            va="bottom",
            fontsize=8,
        )
    ax.set_ylim(0, 105)
    ax.set_ylabel("%")
    ax.set_title(title, fontsize=11, fontweight="bold")
    ax.grid(axis="y", alpha=0.3)
    plt.setp(ax.get_xticklabels(), rotation=45, ha="right", fontsize=8)
    return _save(fig)
