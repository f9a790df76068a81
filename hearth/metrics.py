"""Metrics tracker — turns access/edit/close events into metric updates and heat."""

from __future__ import annotations

import math

from hearth.config import HearthConfig
from hearth.models import HeatMetrics, HeatRecord
from hearth.scoring import ScoringEngine

MS_PER_MINUTE = 60 * 1000
MAX_DURATION_HEAT = 10.0


def durationHeat(session_ms: int) -> float:
    """Diminishing-returns bonus for time spent open, capped at 10."""
    minutes = session_ms / MS_PER_MINUTE
    return min(MAX_DURATION_HEAT, math.log10(minutes + 1) * 5)


class MetricsTracker:
    """Event ingress. Callers deliver events for one item in causal order."""

    def __init__(self, scoring: ScoringEngine, config: HearthConfig):
        self.scoring = scoring
        self.config = config
        self.last_identifier: str | None = None

    def updateConfig(self, config: HearthConfig) -> None:
        self.config = config

    def onAccess(self, identifier: str, now: int) -> HeatRecord:
        inc = self.config.increments
        repeat = self.last_identifier == identifier

        def mutate(m: HeatMetrics) -> None:
            m.access_count += 1
            gap = now - m.last_accessed
            if repeat and gap < inc.quick_return_window_ms:
                m.succession_count += 1
                m.succession_timestamp = now
                # Separate update: normalized and favorite-boosted on its own
                self.scoring.increase(identifier, inc.quick_return, now)
            elif gap > inc.quick_return_window_ms:
                m.succession_count = 0
            m.last_accessed = now
            if m.session_start is None:
                m.session_start = now

        record = self.scoring.increase(identifier, inc.file_open, now, mutate)
        self.last_identifier = identifier
        return record

    def onEdit(self, identifier: str, now: int) -> HeatRecord:
        def mutate(m: HeatMetrics) -> None:
            m.edit_count += 1
            m.last_edited = now
            m.last_accessed = now  # an edit counts as access

        return self.scoring.increase(identifier, self.config.increments.file_edit, now, mutate)

    def onClose(self, identifier: str, now: int) -> HeatRecord | None:
        record = self.scoring.store.get(identifier)
        if record is None or record.metrics.session_start is None:
            return record
        m = record.metrics
        session_ms = max(0, now - m.session_start)
        m.total_duration += session_ms
        m.session_start = None
        heat = durationHeat(session_ms)
        if heat > 0:
            return self.scoring.increase(identifier, heat, now)
        return record
