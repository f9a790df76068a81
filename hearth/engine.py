"""HeatEngine — one store wired to its tracker, scoring engine, and scheduler."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from hearth import rankings
from hearth.config import HearthConfig
from hearth.decay import DecayScheduler
from hearth.metrics import MetricsTracker
from hearth.models import HeatLevel, HeatRecord, HeatStats, MetricBreakdown, nowMs
from hearth.scoring import ScoringEngine, heatLevel
from hearth.store import HeatStore

logger = logging.getLogger("hearth")


class HeatEngine:
    """Synchronous facade over the heat model.

    Every instance owns its own store, so independent engines never share
    state. `now` arguments default to the engine clock.
    """

    def __init__(
        self,
        config: HearthConfig,
        *,
        last_decay_at: int | None = None,
        on_tick: Callable[[], None] | None = None,
        clock: Callable[[], int] = nowMs,
    ):
        self.config = config
        self.clock = clock
        self.store = HeatStore()
        self.scoring = ScoringEngine(self.store, config)
        self.tracker = MetricsTracker(self.scoring, config)
        self.scheduler = DecayScheduler(
            self.scoring, config, last_decay_at=last_decay_at, on_tick=on_tick, clock=clock
        )

    def _now(self, now: int | None) -> int:
        return now if now is not None else self.clock()

    # ── Ingress ──────────────────────────────────────────────

    def onAccess(self, identifier: str, now: int | None = None) -> HeatRecord:
        return self.tracker.onAccess(identifier, self._now(now))

    def onEdit(self, identifier: str, now: int | None = None) -> HeatRecord:
        return self.tracker.onEdit(identifier, self._now(now))

    def onClose(self, identifier: str, now: int | None = None) -> HeatRecord | None:
        return self.tracker.onClose(identifier, self._now(now))

    # ── Queries ──────────────────────────────────────────────

    def getRecord(self, identifier: str) -> HeatRecord | None:
        return self.store.get(identifier)

    def getAllRecords(self) -> list[HeatRecord]:
        return self.store.all()

    def getHottest(self, limit: int | None = None) -> list[HeatRecord]:
        return rankings.hottest(self.store, limit)

    def getMostAccessed(self, limit: int | None = None) -> list[HeatRecord]:
        return rankings.mostAccessed(self.store, limit)

    def getRecentlyActive(
        self, window_ms: int, limit: int | None = None, now: int | None = None
    ) -> list[HeatRecord]:
        return rankings.recentlyActive(self.store, window_ms, self._now(now), limit)

    def getRecencyWeightedHot(
        self,
        window_ms: int = rankings.DEFAULT_HOT_WINDOW_MS,
        limit: int | None = None,
        now: int | None = None,
    ) -> list[HeatRecord]:
        return rankings.recencyWeightedHot(self.store, window_ms, self._now(now), limit)

    def heatLevel(self, score: float) -> HeatLevel:
        return heatLevel(score)

    def compositeScore(self, identifier: str, now: int | None = None) -> float:
        return self.scoring.compositeScore(identifier, self._now(now))

    def metricBreakdown(self, identifier: str, now: int | None = None) -> MetricBreakdown | None:
        return self.scoring.metricBreakdown(identifier, self._now(now))

    def statistics(self) -> HeatStats:
        return self.scoring.statistics()

    # ── Mutations ────────────────────────────────────────────

    def setFavorite(self, identifier: str, favorite: bool, now: int | None = None) -> HeatRecord:
        return self.scoring.setFavorite(identifier, favorite, self._now(now))

    def resetRecord(self, identifier: str, now: int | None = None) -> HeatRecord | None:
        return self.scoring.resetRecord(identifier, self._now(now))

    def removeRecord(self, identifier: str) -> bool:
        return self.store.remove(identifier)

    def renameRecord(self, old_identifier: str, new_identifier: str) -> bool:
        renamed = self.store.rename(old_identifier, new_identifier)
        if renamed and self.tracker.last_identifier == old_identifier:
            self.tracker.last_identifier = new_identifier
        return renamed

    def recalculateAll(self, now: int | None = None) -> int:
        return self.scoring.recalculateAll(self._now(now))

    def decayNow(self, now: int | None = None) -> int:
        return self.scheduler.tick(self._now(now))

    # ── Persistence collaborator contract ────────────────────

    def loadAll(self, records: Iterable[HeatRecord]) -> None:
        """Replace the whole store (startup, import, snapshot load)."""
        self.store.replaceAll(records)
        self.tracker.last_identifier = None
        logger.info("Loaded %d heat records", len(self.store))

    def snapshotAll(self) -> list[HeatRecord]:
        return self.store.snapshot()

    # ── Configuration ────────────────────────────────────────

    def updateConfig(self, config: HearthConfig, now: int | None = None) -> int:
        """Hot-reload settings. A weight change recomputes every score.

        Returns how many records were recalculated (0 if the weights held).
        """
        weights_changed = config.weights != self.config.weights
        self.config = config
        self.scoring.updateConfig(config)
        self.tracker.updateConfig(config)
        self.scheduler.updateConfig(config)
        if weights_changed:
            count = self.recalculateAll(now)
            logger.info("Weights changed, recalculated %d records", count)
            return count
        return 0
