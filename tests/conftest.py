"""Shared test fixtures."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from hearth.config import HearthConfig
from hearth.db import connect
from hearth.engine import HeatEngine

# Fixed "current time" so every score is deterministic
NOW = 1_700_000_000_000
MINUTE = 60 * 1000
HOUR = 60 * MINUTE
DAY = 24 * HOUR


class FakeClock:
    """Settable millisecond clock."""

    def __init__(self, now: int = NOW):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


@pytest.fixture
def tmp_db_path(tmp_path: Path) -> str:
    return str(tmp_path / "test_heat.db")


@pytest.fixture
def config(tmp_db_path: str) -> HearthConfig:
    return HearthConfig(db_path=tmp_db_path)


@pytest.fixture
def db(config: HearthConfig) -> sqlite3.Connection:
    conn = connect(config)
    yield conn
    conn.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(config: HearthConfig, clock: FakeClock) -> HeatEngine:
    return HeatEngine(config, last_decay_at=NOW, clock=clock)
