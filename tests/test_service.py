"""Tests for service layer — engine calls plus write-through persistence."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from unittest.mock import patch

import pytest

from hearth.config import HearthConfig, WeightsConfig
from hearth.db import getLastDecayAt, getRecordRow, loadRecords, recordCount
from hearth.engine import HeatEngine
from hearth.service import (
    svcAccess,
    svcBreakdown,
    svcClose,
    svcDecay,
    svcEdit,
    svcGetRecord,
    svcHottest,
    svcLoadSnapshot,
    svcMostAccessed,
    svcRecalculate,
    svcRecencyWeightedHot,
    svcRecentlyActive,
    svcReloadConfig,
    svcRemoveRecord,
    svcRenameRecord,
    svcResetRecord,
    svcSetFavorite,
    svcSnapshot,
    svcStats,
)
from hearth.state import AppState, getState, isInitialized, setState
from tests.conftest import DAY, MINUTE, NOW, FakeClock


@pytest.fixture
def state(config: HearthConfig, db: sqlite3.Connection, clock: FakeClock) -> AppState:
    engine = HeatEngine(config, last_decay_at=NOW, clock=clock)
    return AppState(engine=engine, db=db, config=config)


# ── Events ───────────────────────────────────────────────────


class TestSvcEvents:
    def test_accessPersists(self, state, db):
        result = svcAccess(state, "notes/a.md")
        assert result["identifier"] == "notes/a.md"
        assert result["heat_score"] == 5
        assert result["level"] == "cold"

        row = getRecordRow(db, "notes/a.md")
        assert row is not None
        assert row["heat_score"] == 5
        assert json.loads(row["metrics_json"])["access_count"] == 1

    def test_explicitTimestamp(self, state):
        result = svcAccess(state, "a.md", timestamp=NOW - DAY)
        assert result["metrics"]["last_accessed"] == NOW - DAY

    def test_editPersists(self, state, db):
        svcEdit(state, "a.md")
        assert json.loads(getRecordRow(db, "a.md")["metrics_json"])["edit_count"] == 1

    def test_closePersistsDuration(self, state, db, clock):
        svcAccess(state, "a.md")
        clock.advance(9 * MINUTE)
        result = svcClose(state, "a.md")
        assert result["metrics"]["total_duration"] == 9 * MINUTE
        assert json.loads(getRecordRow(db, "a.md")["metrics_json"])["session_start"] is None

    def test_closeUnknown(self, state, db):
        result = svcClose(state, "ghost.md")
        assert "error" in result
        assert recordCount(db) == 0


# ── Queries ──────────────────────────────────────────────────


class TestSvcQueries:
    def test_getRecord(self, state):
        svcAccess(state, "a.md")
        assert svcGetRecord(state, "a.md")["metrics"]["access_count"] == 1

    def test_getRecordMissing(self, state):
        assert "error" in svcGetRecord(state, "ghost.md")

    def test_breakdown(self, state):
        svcAccess(state, "a.md")
        result = svcBreakdown(state, "a.md")
        assert result["identifier"] == "a.md"
        assert result["frequency"] == 100
        assert result["weights"]["recency"] == 40

    def test_breakdownMissing(self, state):
        assert "error" in svcBreakdown(state, "ghost.md")

    def test_rankings(self, state, clock):
        svcAccess(state, "a.md")
        svcEdit(state, "b.md")
        svcAccess(state, "c.md")
        svcAccess(state, "c.md")
        hottest = svcHottest(state, limit=2)
        assert hottest["count"] == 2
        # c.md got a quick-return bonus: 5 + 5 + 3
        assert [r["identifier"] for r in hottest["records"]] == ["c.md", "b.md"]
        popular = svcMostAccessed(state, limit=1)
        assert popular["records"][0]["identifier"] == "c.md"

    def test_recentAndHot(self, state, clock):
        svcAccess(state, "old.md", timestamp=NOW - 10 * DAY)
        svcAccess(state, "new.md")
        assert [r["identifier"] for r in svcRecentlyActive(state)["records"]] == ["new.md"]
        assert svcRecencyWeightedHot(state, window_ms=30 * DAY)["count"] == 2

    def test_stats(self, state):
        svcAccess(state, "a.md")
        svcSetFavorite(state, "b.md")
        result = svcStats(state)
        assert result["total_records"] == 2
        assert result["favorite_count"] == 1
        assert result["stored_records"] == 2
        assert result["decay"]["is_running"] is False
        assert result["decay"]["last_decay_at"] == NOW


# ── Mutations ────────────────────────────────────────────────


class TestSvcMutations:
    def test_favorite(self, state, db):
        result = svcSetFavorite(state, "a.md")
        assert result["heat_score"] == 50
        assert result["metrics"]["is_favorite"] is True
        assert json.loads(getRecordRow(db, "a.md")["metrics_json"])["is_favorite"] is True

        result = svcSetFavorite(state, "a.md", favorite=False)
        assert result["metrics"]["favorite_boost"] == 0

    def test_reset(self, state, db):
        svcAccess(state, "a.md")
        result = svcResetRecord(state, "a.md")
        assert result["heat_score"] == 0
        assert getRecordRow(db, "a.md")["heat_score"] == 0

    def test_resetMissing(self, state):
        assert "error" in svcResetRecord(state, "ghost.md")

    def test_remove(self, state, db):
        svcAccess(state, "a.md")
        assert svcRemoveRecord(state, "a.md") == {"removed": True, "identifier": "a.md"}
        assert getRecordRow(db, "a.md") is None
        assert svcRemoveRecord(state, "a.md")["removed"] is False

    def test_rename(self, state, db):
        svcAccess(state, "old.md")
        result = svcRenameRecord(state, "old.md", "new.md")
        assert result == {"renamed": True, "from": "old.md", "to": "new.md"}
        assert getRecordRow(db, "old.md") is None
        assert getRecordRow(db, "new.md")["identifier"] == "new.md"

    def test_renameMissing(self, state, db):
        assert svcRenameRecord(state, "ghost.md", "x.md")["renamed"] is False
        assert recordCount(db) == 0

    def test_recalculate(self, state, db):
        svcAccess(state, "a.md")
        assert svcRecalculate(state) == {"recalculated": 1}
        # frequency 100·30 + recency 100·40 → 70
        assert getRecordRow(db, "a.md")["heat_score"] == pytest.approx(70)

    def test_decay(self, state, db, clock):
        svcEdit(state, "a.md")
        clock.advance(MINUTE)
        result = svcDecay(state)
        assert result == {"decayed": 1, "last_decay_at": NOW + MINUTE}
        assert getRecordRow(db, "a.md")["heat_score"] == pytest.approx(9.5)
        assert getLastDecayAt(db) == NOW + MINUTE


# ── Snapshots ────────────────────────────────────────────────


class TestSvcSnapshots:
    def test_snapshot(self, state):
        svcAccess(state, "a.md")
        svcAccess(state, "b.md")
        result = svcSnapshot(state)
        assert result["count"] == 2
        assert {r["identifier"] for r in result["records"]} == {"a.md", "b.md"}
        assert "level" not in result["records"][0]

    def test_loadSnapshotReplacesEverything(self, state, db):
        svcAccess(state, "stale.md")
        records = [
            {"identifier": "x.md", "heat_score": 42, "first_tracked": NOW, "last_updated": NOW},
        ]
        assert svcLoadSnapshot(state, records) == {"loaded": 1}
        assert state.engine.getRecord("stale.md") is None
        assert [r.identifier for r in loadRecords(db)] == ["x.md"]

    def test_loadSnapshotRejectsInvalid(self, state):
        from pydantic import ValidationError

        bad = [{"identifier": "x.md", "heat_score": 500, "first_tracked": NOW, "last_updated": NOW}]
        with pytest.raises(ValidationError):
            svcLoadSnapshot(state, bad)


# ── Config ───────────────────────────────────────────────────


FREQUENCY_ONLY = {"frequency": 100, "recency": 0, "succession": 0, "duration": 0, "edits": 0}


class TestSvcReloadConfig:
    def test_weightChangeRecalculatesAndPersists(self, state, db, config):
        svcAccess(state, "a.md")
        cfg = config.model_copy(update={"weights": WeightsConfig(**FREQUENCY_ONLY)})
        result = svcReloadConfig(state, cfg)
        assert result["reloaded"] is True
        assert result["recalculated"] == 1
        assert result["config"]["weights"] == FREQUENCY_ONLY
        # composite 100 → soft cap
        assert state.engine.getRecord("a.md").heat_score == pytest.approx(90)
        assert getRecordRow(db, "a.md")["heat_score"] == pytest.approx(90)

    def test_unchangedWeightsKeepScores(self, state, config):
        svcAccess(state, "a.md")
        cfg = config.model_copy(update={"manual_boost_value": 20})
        assert svcReloadConfig(state, cfg)["recalculated"] == 0
        assert state.engine.getRecord("a.md").heat_score == 5
        assert svcSetFavorite(state, "b.md")["heat_score"] == 20

    def test_singletonFollowsReload(self, state, config):
        setState(state)
        try:
            cfg = config.model_copy(update={"manual_boost_value": 20})
            svcReloadConfig(state, cfg)
            assert getState().config.manual_boost_value == 20
            assert getState().engine is state.engine
            assert state.config.manual_boost_value == 50
        finally:
            setState(None)

    def test_otherStateNotInstalled(self, state, config):
        svcReloadConfig(state, config.model_copy())
        assert not isInitialized()

    def test_readsConfigFile(self, state, tmp_path: Path):
        cfg_dir = tmp_path / ".hearth"
        cfg_dir.mkdir()
        path = cfg_dir / "config.json"
        path.write_text(json.dumps({"increments": {"file_open": 12}}))
        with (
            patch("hearth.config.CONFIG_DIR", cfg_dir),
            patch("hearth.config.CONFIG_PATH", path),
        ):
            result = svcReloadConfig(state)
        assert result["config"]["increments"]["file_open"] == 12
        assert svcAccess(state, "a.md")["heat_score"] == 12
