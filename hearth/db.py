"""SQLite persistence for heat records and decay bookkeeping."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from hearth.config import HearthConfig
from hearth.models import HeatMetrics, HeatRecord

SCHEMA_VERSION = 1
LAST_DECAY_KEY = "last_decay_at"
logger = logging.getLogger("hearth")


def connect(config: HearthConfig, *, check_same_thread: bool = True) -> sqlite3.Connection:
    """Open DB and create tables."""
    db_path = Path(config.db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    db = sqlite3.connect(str(db_path), check_same_thread=check_same_thread)
    db.row_factory = sqlite3.Row
    db.execute("PRAGMA journal_mode=WAL")
    db.execute("PRAGMA busy_timeout=5000")
    _migrate(db)
    return db


def _migrate(db: sqlite3.Connection) -> None:
    db.executescript("""
        CREATE TABLE IF NOT EXISTS heat_records (
            identifier TEXT PRIMARY KEY,
            heat_score REAL NOT NULL DEFAULT 0,
            metrics_json TEXT NOT NULL,
            first_tracked INTEGER NOT NULL,
            last_updated INTEGER NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_heat_records_score ON heat_records(heat_score);

        -- Settings that must survive restarts (schema version, last decay)
        CREATE TABLE IF NOT EXISTS meta (key TEXT PRIMARY KEY, value TEXT);
    """)
    db.execute(
        "INSERT OR REPLACE INTO meta (key, value) VALUES ('schema_version', ?)",
        (str(SCHEMA_VERSION),),
    )
    db.commit()


def _row(record: HeatRecord) -> tuple:
    return (
        record.identifier,
        record.heat_score,
        record.metrics.model_dump_json(),
        record.first_tracked,
        record.last_updated,
    )


_UPSERT = """INSERT OR REPLACE INTO heat_records
             (identifier, heat_score, metrics_json, first_tracked, last_updated)
             VALUES (?, ?, ?, ?, ?)"""


# -- Record CRUD --


def saveRecord(db: sqlite3.Connection, record: HeatRecord) -> None:
    db.execute(_UPSERT, _row(record))
    db.commit()


def saveRecords(db: sqlite3.Connection, records: Iterable[HeatRecord]) -> int:
    """Replace every stored record with `records` in one transaction."""
    rows = [_row(r) for r in records]
    with db:
        db.execute("DELETE FROM heat_records")
        db.executemany(_UPSERT, rows)
    return len(rows)


def loadRecords(db: sqlite3.Connection) -> list[HeatRecord]:
    """Read all records. Rows that no longer validate are skipped."""
    records: list[HeatRecord] = []
    for row in db.execute("SELECT * FROM heat_records").fetchall():
        try:
            records.append(
                HeatRecord(
                    identifier=row["identifier"],
                    heat_score=row["heat_score"],
                    metrics=HeatMetrics.model_validate_json(row["metrics_json"]),
                    first_tracked=row["first_tracked"],
                    last_updated=row["last_updated"],
                )
            )
        except ValidationError:
            logger.warning("Skipping invalid heat record: %s", row["identifier"])
    return records


def getRecordRow(db: sqlite3.Connection, identifier: str) -> sqlite3.Row | None:
    return db.execute(
        "SELECT * FROM heat_records WHERE identifier = ?", (identifier,)
    ).fetchone()


def deleteRecord(db: sqlite3.Connection, identifier: str) -> bool:
    cursor = db.execute("DELETE FROM heat_records WHERE identifier = ?", (identifier,))
    db.commit()
    return cursor.rowcount > 0


def renameRecord(db: sqlite3.Connection, record: HeatRecord, old_identifier: str) -> None:
    """Move a stored row to the record's (new) identifier."""
    with db:
        db.execute("DELETE FROM heat_records WHERE identifier = ?", (old_identifier,))
        db.execute(_UPSERT, _row(record))


def recordCount(db: sqlite3.Connection) -> int:
    return db.execute("SELECT COUNT(*) FROM heat_records").fetchone()[0]


# -- Meta --


def getLastDecayAt(db: sqlite3.Connection) -> int | None:
    row = db.execute("SELECT value FROM meta WHERE key = ?", (LAST_DECAY_KEY,)).fetchone()
    return int(row[0]) if row else None


def setLastDecayAt(db: sqlite3.Connection, timestamp: int) -> None:
    db.execute(
        "INSERT OR REPLACE INTO meta (key, value) VALUES (?, ?)",
        (LAST_DECAY_KEY, str(timestamp)),
    )
    db.commit()
