"""Command line interface for Streakwise."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .errors import Result, ValidationError
from .logging_config import setup_logging
from .models.category import Category
from .models.habit import CompletionStatus
from .services import export_csv
from .services.achievements import evaluate_achievements
from .services.habits import build_pattern, create_habit, deactivate_habit, delete_habit

DATE = click.DateTime(formats=["%Y-%m-%d"])


def _as_date(value: datetime | None, ctx: AppContext):
    return value.date() if value is not None else ctx.today()


def _check(result: Result):
    if not result.ok:
        raise click.ClickException(f"[{result.error.code}] {result.error.message}")
    return result.value


def _require_habit(ctx: AppContext, habit_id: int):
    habit = ctx.habit_repo.get_by_id(habit_id)
    if habit is None:
        raise click.ClickException(f"Habit {habit_id} does not exist")
    return habit


@click.group()
@click.pass_context
def cli(click_ctx: click.Context) -> None:
    """Track recurring habits and their streaks."""

    config = BaseConfig()
    setup_logging(config)
    click_ctx.obj = create_app_context(config)


@cli.command("init-db")
@click.pass_obj
def init_db(ctx: AppContext) -> None:
    """Create the database schema."""

    click.echo(f"Database ready: {ctx.config.DATABASE_URL}")


@cli.command("add-habit")
@click.argument("name")
@click.option("--pattern", default="Everyday", show_default=True, help="Recurrence label")
@click.option("--days", default="", help="Comma separated ISO weekdays for Custom, e.g. 1,3,5")
@click.option("--start", type=DATE, default=None, help="Start date (default today)")
@click.option("--end", type=DATE, default=None, help="Optional end date")
@click.option("--category", default=None, help="Category name (created if missing)")
@click.pass_obj
def add_habit(ctx: AppContext, name, pattern, days, start, end, category) -> None:
    """Create a habit."""

    try:
        custom_days = [int(d) for d in days.split(",") if d.strip()]
    except ValueError as exc:
        raise click.BadParameter("days must be integers 1-7", param_hint="--days") from exc

    category_id = None
    if category:
        existing = ctx.category_repo.get_by_name(category)
        if existing is None:
            existing = ctx.category_repo.create(Category(name=category))
        category_id = existing.id

    try:
        recurrence = build_pattern(pattern, custom_days)
    except ValidationError as exc:
        raise click.ClickException(str(exc)) from exc

    habit = _check(
        create_habit(
            ctx.habit_repo,
            name=name,
            pattern=recurrence,
            start_date=_as_date(start, ctx),
            end_date=end.date() if end else None,
            category_id=category_id,
            today=ctx.today(),
        )
    )
    click.echo(f"Created habit {habit.id}: {habit.name} ({habit.recurrence})")


@cli.command()
@click.argument("habit_id", type=int)
@click.option("--date", "day", type=DATE, default=None)
@click.option("--notes", default=None)
@click.pass_obj
def complete(ctx: AppContext, habit_id, day, notes) -> None:
    """Mark a habit completed for a day."""

    record = _check(ctx.ledger.record_completion(habit_id, _as_date(day, ctx), notes))
    click.echo(f"Completed habit {habit_id} on {record.occurred_on.isoformat()}")


@cli.command()
@click.argument("habit_id", type=int)
@click.option("--date", "day", type=DATE, default=None)
@click.option("--notes", default=None)
@click.pass_obj
def miss(ctx: AppContext, habit_id, day, notes) -> None:
    """Mark a habit missed for a day."""

    record = _check(ctx.ledger.record_missed(habit_id, _as_date(day, ctx), notes))
    click.echo(f"Missed habit {habit_id} on {record.occurred_on.isoformat()}")


@cli.command()
@click.argument("habit_id", type=int)
@click.option("--date", "day", type=DATE, default=None)
@click.pass_obj
def undo(ctx: AppContext, habit_id, day) -> None:
    """Remove the record for a day."""

    removed = _check(ctx.ledger.undo(habit_id, _as_date(day, ctx)))
    click.echo("Record removed" if removed else "Nothing to undo")


@cli.command()
@click.argument("habit_id", type=int)
@click.pass_obj
def deactivate(ctx: AppContext, habit_id) -> None:
    """Stop scheduling a habit; its history is kept."""

    _check(deactivate_habit(ctx.habit_repo, habit_id, today=ctx.today()))
    click.echo(f"Deactivated habit {habit_id}")


@cli.command()
@click.argument("habit_id", type=int)
@click.confirmation_option(prompt="Delete the habit and all of its records?")
@click.pass_obj
def delete(ctx: AppContext, habit_id) -> None:
    """Delete a habit and its records."""

    _check(delete_habit(ctx.habit_repo, habit_id))
    click.echo(f"Deleted habit {habit_id}")


@cli.command()
@click.pass_obj
def today(ctx: AppContext) -> None:
    """List today's habits with their status and a dashboard summary."""

    habits = ctx.habit_repo.list_all()
    items = ctx.statistics.today_overview(habits)
    if not items:
        click.echo("Nothing scheduled today")
    for item in items:
        click.echo(f"{item.habit.id:>4}  {item.habit.name:<30} {item.status.value}")

    rollup = ctx.statistics.dashboard_rollup(habits)
    click.echo(
        f"Done {rollup.completed_today}/{rollup.scheduled_today} "
        f"({rollup.today_completion_rate_percent:.1f}%), best streak {rollup.max_current_streak}"
    )


@cli.command()
@click.argument("habit_id", type=int)
@click.option("--weeks", default=4, show_default=True, type=click.IntRange(min=1))
@click.option("--png", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.pass_obj
def stats(ctx: AppContext, habit_id, weeks, png) -> None:
    """Show streaks, completion rate and weekly buckets for a habit."""

    habit = _require_habit(ctx, habit_id)
    summary = ctx.streaks.summary(habit)
    click.echo(f"{habit.name}")
    click.echo(f"  current streak : {summary.current_streak}")
    click.echo(f"  longest streak : {summary.longest_streak}")
    click.echo(f"  completion rate: {summary.completion_rate * 100:.1f}%")
    click.echo(f"  missed         : {summary.missed_count}")

    buckets = ctx.statistics.weekly_buckets(habit, weeks)
    for bucket in buckets:
        click.echo(
            f"  {bucket.period_label}: {bucket.completed_count}/{bucket.scheduled_count} "
            f"({bucket.completion_rate_percent:.1f}%)"
        )
    click.echo(f"  trend          : {ctx.statistics.weekly_trend(habit).direction.value}")

    total_completed = sum(
        1
        for r in ctx.habit_repo.get_records(habit_id)
        if r.completion_status is CompletionStatus.COMPLETED
    )
    for achievement in evaluate_achievements(
        total_completed=total_completed, longest_streak=summary.longest_streak
    ):
        click.echo(f"  * {achievement.title}: {achievement.description}")

    if png is not None:
        from .charts import weekly_trend_png

        png.parent.mkdir(parents=True, exist_ok=True)
        png.write_bytes(weekly_trend_png(buckets, title=habit.name).read_bytes())
        click.echo(f"Trend chart written: {png}")


@cli.command()
@click.argument("habit_id", type=int)
@click.option("--start", type=DATE, required=True)
@click.option("--end", type=DATE, required=True)
@click.option("--png", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.pass_obj
def calendar(ctx: AppContext, habit_id, start, end, png) -> None:
    """Print day-by-day statuses for a date range."""

    habit = _require_habit(ctx, habit_id)
    if end < start:
        raise click.BadParameter("--end must not precede --start")
    projection = ctx.calendar.project(habit, start.date(), end.date())
    for cell in projection:
        click.echo(f"{cell.day.isoformat()} {cell.status.value}")
    totals = projection.counts()
    click.echo("Totals: " + ", ".join(f"{s.value}={n}" for s, n in totals.items()))

    if png is not None:
        from .charts import heatmap_png

        png.parent.mkdir(parents=True, exist_ok=True)
        png.write_bytes(heatmap_png(projection, title=habit.name).read_bytes())
        click.echo(f"Heatmap written: {png}")


@cli.command()
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--habit-id", type=int, default=None, help="Limit to one habit")
@click.pass_obj
def export(ctx: AppContext, output, habit_id) -> None:
    """Export completion records to CSV."""

    if habit_id is not None:
        habit_ids = [_require_habit(ctx, habit_id).id]
    else:
        habit_ids = [h.id for h in ctx.habit_repo.list_all(include_inactive=True)]
    records = [r for hid in habit_ids for r in ctx.habit_repo.get_records(hid)]
    path = export_csv.export_records_csv(records=records, output_path=output)
    click.echo(f"Export written: {path} ({len(records)} records)")


def main() -> None:  # pragma: no cover - console entry point
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
