"""Tests for MCP tools and resources."""

from __future__ import annotations

import sqlite3

import pytest

import hearth.server.mcp as srv
from hearth.config import HearthConfig
from hearth.engine import HeatEngine
from hearth.state import AppState, setState
from tests.conftest import MINUTE, NOW, FakeClock

# FastMCP wraps decorated functions in FunctionTool/FunctionResource objects.
# Access the original callable via `.fn`.
_record_access = srv.record_access.fn
_record_edit = srv.record_edit.fn
_record_close = srv.record_close.fn
_hottest = srv.hottest.fn
_heat_of = srv.heat_of.fn
_set_favorite = srv.set_favorite.fn
_resource_stats = srv.resource_stats.fn


@pytest.fixture
def server_ctx(config: HearthConfig, db: sqlite3.Connection, clock: FakeClock):
    """Install shared state for tool testing."""
    engine = HeatEngine(config, last_decay_at=NOW, clock=clock)
    setState(AppState(engine=engine, db=db, config=config))
    yield
    setState(None)


class TestEventTools:
    def test_recordAccess(self, server_ctx):
        result = _record_access("notes/a.md")
        assert result["heat_score"] == 5
        assert result["level"] == "cold"

    def test_recordEditAndClose(self, server_ctx, clock):
        _record_access("a.md")
        _record_edit("a.md")
        clock.advance(9 * MINUTE)
        result = _record_close("a.md")
        assert result["metrics"]["edit_count"] == 1
        assert result["metrics"]["total_duration"] == 9 * MINUTE

    def test_closeUnknown(self, server_ctx):
        assert "error" in _record_close("ghost.md")


class TestQueryTools:
    def test_hottest(self, server_ctx):
        _record_access("a.md")
        _record_edit("b.md")
        result = _hottest(limit=1)
        assert result["count"] == 1
        assert result["records"][0]["identifier"] == "b.md"

    def test_hottestRecentOnly(self, server_ctx):
        _record_access("old.md", timestamp=NOW - 30 * 24 * 60 * MINUTE)
        _record_access("new.md")
        result = _hottest(recent_only=True)
        assert [r["identifier"] for r in result["records"]] == ["new.md"]

    def test_heatOf(self, server_ctx):
        _record_access("a.md")
        assert _heat_of("a.md")["metrics"]["access_count"] == 1
        assert "error" in _heat_of("ghost.md")

    def test_setFavorite(self, server_ctx):
        result = _set_favorite("a.md")
        assert result["metrics"]["is_favorite"] is True
        assert result["heat_score"] == 50


class TestResources:
    def test_stats(self, server_ctx):
        _record_access("a.md")
        result = _resource_stats()
        assert result["total_records"] == 1
        assert result["decay"]["rate_percent"] == 5
