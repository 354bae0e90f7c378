"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from sqlalchemy.pool import StaticPool

from .domain.recurrence import InactivePolicy

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return float(value)


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "Streakwise"
    DB_FILENAME = "streakwise.db"
    SQLITE_PRAGMAS = {"journal_mode": "wal", "foreign_keys": "on"}

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("STREAKWISE_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("STREAKWISE_DATABASE_URL", self._build_sqlite_url())
        self.INACTIVE_POLICY = self._resolve_inactive_policy()
        self.WEEKLY_TREND_THRESHOLD = _env_float("STREAKWISE_WEEKLY_TREND_THRESHOLD", 5.0)
        self.MONTHLY_TREND_THRESHOLD = _env_float("STREAKWISE_MONTHLY_TREND_THRESHOLD", 10.0)

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("STREAKWISE_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _resolve_inactive_policy(self) -> InactivePolicy:
        raw = os.getenv("STREAKWISE_INACTIVE_POLICY", InactivePolicy.PRESERVE_HISTORY.value)
        try:
            return InactivePolicy(raw.strip().lower())
        except ValueError as exc:
            allowed = ", ".join(p.value for p in InactivePolicy)
            raise ValueError(
                f"STREAKWISE_INACTIVE_POLICY must be one of: {allowed} (got {raw!r})"
            ) from exc

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {}
        engine_options: dict[str, Any] = {"connect_args": connect_args}
        if self.DATABASE_URL.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        if self.DATABASE_URL in {"sqlite://", "sqlite:///:memory:"}:
            # Every session must see the same in-memory database.
            engine_options["poolclass"] = StaticPool
        return engine_options


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Configuration for automated tests; defaults to an in-memory database."""

    __test__ = False

    DEBUG = True
    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.DATABASE_URL = os.getenv("STREAKWISE_DATABASE_URL", "sqlite://")
