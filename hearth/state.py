"""Application state container — singleton shared by MCP + REST."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field, replace

from hearth.config import HearthConfig, loadConfig
from hearth.db import connect, getLastDecayAt, loadRecords, saveRecords, setLastDecayAt
from hearth.engine import HeatEngine

logger = logging.getLogger("hearth")

DEFAULT_PORT = 7717

# ── Singleton ────────────────────────────────────────────────

_state: AppState | None = None


@dataclass(frozen=True)
class AppState:
    engine: HeatEngine
    db: sqlite3.Connection
    config: HearthConfig
    port: int = field(default=DEFAULT_PORT)


def getState() -> AppState:
    """Return current state or raise if not initialised."""
    assert _state is not None, "AppState not initialized — call initState() first"
    return _state


def isInitialized() -> bool:
    return _state is not None


async def initState(
    config: HearthConfig | None = None,
    port: int | None = None,
) -> AppState:
    """Create + store singleton and start decay on the running loop."""
    global _state
    _state = createAppState(config=config, port=port)
    _state.engine.scheduler.start()
    persistState(_state)
    return _state


def closeState() -> None:
    """Stop decay, flush records, close DB and clear global."""
    global _state
    if _state is not None:
        _state.engine.scheduler.stop()
        persistState(_state)
        _state.db.close()
    _state = None
    logger.info("Hearth shut down.")


def setState(s: AppState | None) -> None:
    """Inject state directly (for tests)."""
    global _state
    _state = s


def replaceConfig(state: AppState, config: HearthConfig) -> AppState:
    """Copy of state with a new config. The singleton follows if it was state."""
    global _state
    new_state = replace(state, config=config)
    if _state is state:
        _state = new_state
    return new_state


def persistState(state: AppState) -> None:
    """Write every record and the last decay time."""
    count = saveRecords(state.db, state.engine.snapshotAll())
    setLastDecayAt(state.db, state.engine.scheduler.last_decay_at)
    logger.debug("Persisted %d heat records", count)


def createAppState(
    config: HearthConfig | None = None,
    port: int | None = None,
    check_same_thread: bool = False,
) -> AppState:
    """Create AppState — loads config, opens DB, restores records."""
    cfg = config or loadConfig()
    db = connect(cfg, check_same_thread=check_same_thread)
    state: AppState | None = None

    def _afterTick() -> None:
        if state is not None:
            persistState(state)

    engine = HeatEngine(cfg, last_decay_at=getLastDecayAt(db), on_tick=_afterTick)
    engine.loadAll(loadRecords(db))
    p = port or cfg.port
    logger.info("Hearth starting — db: %s, port: %d", cfg.db_path, p)
    state = AppState(engine=engine, db=db, config=cfg, port=p)
    return state
