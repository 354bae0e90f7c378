"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from sqlmodel import Session

from .config import BaseConfig
from .infra.database import bootstrap_database
from .infra.repositories import SQLModelCategoryRepository, SQLModelHabitRepository
from .services.calendar import CalendarProjector
from .services.ledger import CompletionLedger
from .services.statistics import StatisticsAggregator
from .services.streaks import StreakCalculator


@dataclass
class AppContext:
    """Wired repositories and engine services sharing one ledger."""

    config: BaseConfig
    session_factory: Callable[[], Session]

    habit_repo: SQLModelHabitRepository
    category_repo: SQLModelCategoryRepository

    ledger: CompletionLedger
    streaks: StreakCalculator
    calendar: CalendarProjector
    statistics: StatisticsAggregator

    def today(self) -> date:
        return self.ledger.clock()


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    clock: Callable[[], date] = date.today,
) -> AppContext:
    """Create and initialize the application context."""

    if config is None:
        config = BaseConfig()

    _engine, session_factory = bootstrap_database(config)

    habit_repo = SQLModelHabitRepository(session_factory)
    category_repo = SQLModelCategoryRepository(session_factory)

    ledger = CompletionLedger(habit_repo, policy=config.INACTIVE_POLICY, clock=clock)

    def category_names() -> dict[int, str]:
        return {c.id: c.name for c in category_repo.list_all() if c.id is not None}

    return AppContext(
        config=config,
        session_factory=session_factory,
        habit_repo=habit_repo,
        category_repo=category_repo,
        ledger=ledger,
        streaks=StreakCalculator(ledger),
        calendar=CalendarProjector(ledger),
        statistics=StatisticsAggregator(
            ledger,
            weekly_threshold=config.WEEKLY_TREND_THRESHOLD,
            monthly_threshold=config.MONTHLY_TREND_THRESHOLD,
            category_names=category_names,
        ),
    )
