"""Service layer — all business logic shared by the REST API and MCP tools."""

from __future__ import annotations

from hearth.config import HearthConfig, loadConfig
from hearth.db import deleteRecord, recordCount, renameRecord, saveRecord
from hearth.models import HeatRecord
from hearth.rankings import DEFAULT_HOT_WINDOW_MS
from hearth.state import AppState, persistState, replaceConfig


def _recordDict(state: AppState, record: HeatRecord) -> dict:
    return {
        **record.model_dump(),
        "level": state.engine.heatLevel(record.heat_score).value,
    }


def _notFound(identifier: str) -> dict:
    return {"error": f"Record '{identifier}' not found"}


# ── Events ───────────────────────────────────────────────────


def svcAccess(state: AppState, identifier: str, timestamp: int | None = None) -> dict:
    """Record an open/focus of an item."""
    record = state.engine.onAccess(identifier, timestamp)
    saveRecord(state.db, record)
    return _recordDict(state, record)


def svcEdit(state: AppState, identifier: str, timestamp: int | None = None) -> dict:
    """Record a modification of an item."""
    record = state.engine.onEdit(identifier, timestamp)
    saveRecord(state.db, record)
    return _recordDict(state, record)


def svcClose(state: AppState, identifier: str, timestamp: int | None = None) -> dict:
    """Close an item's session. Unknown items are not created."""
    record = state.engine.onClose(identifier, timestamp)
    if record is None:
        return _notFound(identifier)
    saveRecord(state.db, record)
    return _recordDict(state, record)


# ── Queries ──────────────────────────────────────────────────


def svcGetRecord(state: AppState, identifier: str) -> dict:
    record = state.engine.getRecord(identifier)
    if record is None:
        return _notFound(identifier)
    return _recordDict(state, record)


def svcBreakdown(state: AppState, identifier: str) -> dict:
    """Sub-scores behind an item's composite score."""
    breakdown = state.engine.metricBreakdown(identifier)
    if breakdown is None:
        return _notFound(identifier)
    return {"identifier": identifier, **breakdown.model_dump()}


def svcHottest(state: AppState, limit: int = 10) -> dict:
    records = state.engine.getHottest(limit)
    return {"records": [_recordDict(state, r) for r in records], "count": len(records)}


def svcMostAccessed(state: AppState, limit: int = 10) -> dict:
    records = state.engine.getMostAccessed(limit)
    return {"records": [_recordDict(state, r) for r in records], "count": len(records)}


def svcRecentlyActive(
    state: AppState, window_ms: int = DEFAULT_HOT_WINDOW_MS, limit: int = 10
) -> dict:
    records = state.engine.getRecentlyActive(window_ms, limit)
    return {"records": [_recordDict(state, r) for r in records], "count": len(records)}


def svcRecencyWeightedHot(
    state: AppState, window_ms: int = DEFAULT_HOT_WINDOW_MS, limit: int = 10
) -> dict:
    """Recently active items ranked 70% by heat, 30% by how recent."""
    records = state.engine.getRecencyWeightedHot(window_ms, limit)
    return {"records": [_recordDict(state, r) for r in records], "count": len(records)}


def svcStats(state: AppState) -> dict:
    return {
        **state.engine.statistics().model_dump(),
        "decay": state.engine.scheduler.status().model_dump(),
        "stored_records": recordCount(state.db),
    }


# ── Mutations ────────────────────────────────────────────────


def svcSetFavorite(state: AppState, identifier: str, favorite: bool = True) -> dict:
    record = state.engine.setFavorite(identifier, favorite)
    saveRecord(state.db, record)
    return _recordDict(state, record)


def svcResetRecord(state: AppState, identifier: str) -> dict:
    record = state.engine.resetRecord(identifier)
    if record is None:
        return _notFound(identifier)
    saveRecord(state.db, record)
    return _recordDict(state, record)


def svcRemoveRecord(state: AppState, identifier: str) -> dict:
    removed = state.engine.removeRecord(identifier)
    deleteRecord(state.db, identifier)
    return {"removed": removed, "identifier": identifier}


def svcRenameRecord(state: AppState, old_identifier: str, new_identifier: str) -> dict:
    renamed = state.engine.renameRecord(old_identifier, new_identifier)
    record = state.engine.getRecord(new_identifier) if renamed else None
    if record is not None:
        renameRecord(state.db, record, old_identifier)
    return {"renamed": renamed, "from": old_identifier, "to": new_identifier}


def svcRecalculate(state: AppState) -> dict:
    """Override every score with its weighted composite."""
    count = state.engine.recalculateAll()
    persistState(state)
    return {"recalculated": count}


def svcDecay(state: AppState) -> dict:
    """Run one decay cycle now."""
    count = state.engine.decayNow()
    persistState(state)
    return {"decayed": count, "last_decay_at": state.engine.scheduler.last_decay_at}


# ── Snapshots ────────────────────────────────────────────────


def svcSnapshot(state: AppState) -> dict:
    records = state.engine.snapshotAll()
    return {"records": [r.model_dump() for r in records], "count": len(records)}


def svcLoadSnapshot(state: AppState, records: list[dict]) -> dict:
    """Replace every record with the given ones."""
    parsed = [HeatRecord.model_validate(r) for r in records]
    state.engine.loadAll(parsed)
    persistState(state)
    return {"loaded": len(parsed)}


# ── Config ───────────────────────────────────────────────────


def svcReloadConfig(state: AppState, config: HearthConfig | None = None) -> dict:
    """Re-read the config file and apply it to the running engine.

    Changed weights recompute and persist every score; a changed decay
    interval restarts the scheduler.
    """
    cfg = config if config is not None else loadConfig()
    recalculated = state.engine.updateConfig(cfg)
    if recalculated:
        persistState(state)
    replaceConfig(state, cfg)
    return {"reloaded": True, "recalculated": recalculated, "config": cfg.model_dump()}
