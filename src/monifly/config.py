"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from sqlalchemy.pool import StaticPool

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "Monifly"
    IN_MEMORY_URL = "sqlite://"

    def __init__(self) -> None:
        self.DEV_MODE = _env_bool("MONIFLY_DEV_MODE", default=True)
        self.DATA_DIR = self._resolve_data_dir()
        self.DATABASE_URL = os.getenv("MONIFLY_DATABASE_URL", self.IN_MEMORY_URL)
        self.PIVOT_CURRENCY = os.getenv("MONIFLY_PIVOT_CURRENCY", "USD").strip().upper()
        self.DISPLAY_CURRENCY = os.getenv("MONIFLY_DISPLAY_CURRENCY", "RUB").strip().upper()
        self.PRICE_CACHE_SECONDS = _env_int("MONIFLY_PRICE_CACHE_SECONDS", 300)
        snapshot = os.getenv("MONIFLY_SNAPSHOT_PATH")
        self.SNAPSHOT_PATH = Path(snapshot).expanduser() if snapshot else self.DATA_DIR / "state.json"

    def _resolve_data_dir(self) -> Path:
        """Return the directory where snapshots and logs live."""

        data_root = os.getenv("MONIFLY_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def in_memory(self) -> bool:
        return self.DATABASE_URL in {self.IN_MEMORY_URL, "sqlite:///:memory:"}

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {"check_same_thread": False}
        engine_options: dict[str, Any] = {"connect_args": connect_args}
        if self.in_memory:
            # A single shared connection keeps the in-memory database alive
            # across sessions.
            engine_options["poolclass"] = StaticPool
        return engine_options


class DevConfig(BaseConfig):
    """Development configuration using the in-memory store."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Configuration used by the test-suite; never touches a database file."""

    DEBUG = False
    TESTING = True

    def __init__(self, data_dir: Path | None = None) -> None:
        super().__init__()
        if data_dir is not None:
            self.DATA_DIR = Path(data_dir)
            self.SNAPSHOT_PATH = self.DATA_DIR / "state.json"
        self.DATABASE_URL = self.IN_MEMORY_URL
        self.PIVOT_CURRENCY = "USD"
        self.DISPLAY_CURRENCY = "RUB"
