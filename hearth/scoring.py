"""Heat scoring — normalization, incremental updates, and the composite score.

Two update paths exist and are kept deliberately separate:

- increase / decrease: event-driven, incremental, applied on every usage
  event and decay tick.
- compositeScore / recalculateAll: weight-driven, recomputed from the raw
  metrics. recalculateAll overrides every score and is only invoked on an
  explicit request or when the weights change (see HeatEngine.updateConfig).

The soft cap in normalize() is lossy: every raw value from 109 upward maps
to 100, so a stored score cannot be turned back into the raw heat that
produced it. Anything that needs the unbounded magnitude must track it
itself.
"""

from __future__ import annotations

import math
from collections.abc import Callable

from hearth.config import HearthConfig
from hearth.models import HeatLevel, HeatMetrics, HeatRecord, HeatStats, MetricBreakdown
from hearth.store import HeatStore

# Scores strictly above this decay at the differential rate
DIFFERENTIAL_THRESHOLD = 70.0
RECENCY_DECAY_DAYS = 7.0
SUCCESSION_SCALE = 3.0
MS_PER_DAY = 24 * 60 * 60 * 1000

MetricsMutator = Callable[[HeatMetrics], None]

_LEVEL_FLOORS: list[tuple[float, HeatLevel]] = [
    (90.0, HeatLevel.BLAZING),
    (75.0, HeatLevel.CRITICAL),
    (60.0, HeatLevel.HOT),
    (40.0, HeatLevel.WARM),
    (20.0, HeatLevel.COOL),
]


def normalize(raw: float) -> float:
    """Map raw heat onto [0, 100] with a logarithmic soft cap above 100.

    The cap restarts at 90, so raw 99.99 stays 99.99 while raw 100 gives 90.
    That step down is intended; the mapping is monotonic within each branch.
    """
    if raw <= 0:
        return 0.0
    if raw >= 100:
        return min(100.0, 90 + math.log10(raw - 100 + 1) * 10)
    return raw


def heatLevel(score: float) -> HeatLevel:
    for floor, level in _LEVEL_FLOORS:
        if score >= floor:
            return level
    return HeatLevel.COLD


def _clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, value))


# ── Sub-scores (each 0-100) ──────────────────────────────────


def frequencyScore(metrics: HeatMetrics, max_access_count: int) -> float:
    if max_access_count <= 0:
        return 0.0
    return metrics.access_count / max_access_count * 100


def recencyScore(metrics: HeatMetrics, now: int) -> float:
    """100 · e^(-days/7): ~60 after 3.5 days, ~24 after 10."""
    days = (now - metrics.last_accessed) / MS_PER_DAY
    return _clamp(100 * math.exp(-days / RECENCY_DECAY_DAYS))


def successionScore(metrics: HeatMetrics) -> float:
    return _clamp(100 * (1 - math.exp(-metrics.succession_count / SUCCESSION_SCALE)))


def durationScore(metrics: HeatMetrics, max_duration: int) -> float:
    """Log-scaled share of the longest total duration."""
    denominator = math.log10(max_duration + 1)
    if denominator <= 0:
        return 0.0
    return math.log10(metrics.total_duration + 1) / denominator * 100


def editScore(metrics: HeatMetrics, max_edit_count: int) -> float:
    if max_edit_count <= 0:
        return 0.0
    return metrics.edit_count / max_edit_count * 100


class ScoringEngine:
    """The only place raw heat numbers are computed, bounded, and classified."""

    def __init__(self, store: HeatStore, config: HearthConfig):
        self.store = store
        self.config = config

    def updateConfig(self, config: HearthConfig) -> None:
        self.config = config

    # ── Incremental path ─────────────────────────────────────

    def increase(
        self,
        identifier: str,
        amount: float,
        now: int,
        mutator: MetricsMutator | None = None,
    ) -> HeatRecord:
        """Apply mutator, add heat (plus favorite boost), normalize."""
        record = self.store.getOrCreate(identifier, now)
        if mutator is not None:
            # A mutator may itself call increase(); read the score after it
            mutator(record.metrics)
        raw = record.heat_score + amount
        if record.metrics.is_favorite:
            raw += record.metrics.favorite_boost
        record.heat_score = normalize(raw)
        record.last_updated = now
        return record

    def effectivePercentage(self, score: float, percentage: float) -> float:
        """Decay percentage after the differential multiplier, if it applies."""
        decay = self.config.decay
        if decay.differential_enabled and score > DIFFERENTIAL_THRESHOLD:
            return percentage * decay.differential_multiplier
        return percentage

    def decaySkipped(self, record: HeatRecord) -> bool:
        return record.metrics.is_favorite and self.config.decay.pause_for_favorites

    def decrease(self, identifier: str, percentage: float, now: int) -> HeatRecord | None:
        record = self.store.get(identifier)
        if record is None or self.decaySkipped(record):
            return record
        score = record.heat_score
        decay_amount = score * self.effectivePercentage(score, percentage) / 100
        record.heat_score = max(0.0, score - decay_amount)
        record.last_updated = now
        return record

    # ── Favorites / reset ────────────────────────────────────

    def setFavorite(self, identifier: str, favorite: bool, now: int) -> HeatRecord:
        record = self.store.getOrCreate(identifier, now)
        boost = self.config.manual_boost_value
        record.metrics.is_favorite = favorite
        record.metrics.favorite_boost = boost if favorite else 0.0
        if favorite:
            record.heat_score = normalize(record.heat_score + boost)
        record.last_updated = now
        return record

    def resetRecord(self, identifier: str, now: int) -> HeatRecord | None:
        """Zero score and counters; favorite status survives."""
        record = self.store.get(identifier)
        if record is None:
            return None
        m = record.metrics
        record.heat_score = 0.0
        m.access_count = 0
        m.edit_count = 0
        m.total_duration = 0
        m.succession_count = 0
        if not m.is_favorite:
            m.favorite_boost = 0.0
        record.last_updated = now
        return record

    # ── Batch path ───────────────────────────────────────────

    def _maxima(self) -> tuple[int, int, int]:
        max_access = max_duration = max_edits = 0
        for record in self.store:
            m = record.metrics
            max_access = max(max_access, m.access_count)
            max_duration = max(max_duration, m.total_duration)
            max_edits = max(max_edits, m.edit_count)
        return max_access, max_duration, max_edits

    def _breakdown(
        self, metrics: HeatMetrics, maxima: tuple[int, int, int], now: int
    ) -> MetricBreakdown:
        max_access, max_duration, max_edits = maxima
        w = self.config.weights
        subs = {
            "frequency": frequencyScore(metrics, max_access),
            "recency": recencyScore(metrics, now),
            "succession": successionScore(metrics),
            "duration": durationScore(metrics, max_duration),
            "edits": editScore(metrics, max_edits),
        }
        weights = w.model_dump()
        composite = sum(subs[k] * weights[k] for k in subs) / 100
        return MetricBreakdown(**subs, composite=_clamp(composite), weights=weights)

    def compositeScore(self, identifier: str, now: int) -> float:
        record = self.store.get(identifier)
        if record is None:
            return 0.0
        return self._breakdown(record.metrics, self._maxima(), now).composite

    def metricBreakdown(self, identifier: str, now: int) -> MetricBreakdown | None:
        record = self.store.get(identifier)
        if record is None:
            return None
        return self._breakdown(record.metrics, self._maxima(), now)

    def recalculateAll(self, now: int) -> int:
        """Override every score with normalize(composite + favorite boost)."""
        maxima = self._maxima()
        records = self.store.all()
        # Composite first so maxima and recency see the pre-update store
        composites = [self._breakdown(r.metrics, maxima, now).composite for r in records]
        for record, composite in zip(records, composites, strict=True):
            record.heat_score = normalize(composite + record.metrics.favorite_boost)
            record.last_updated = now
        return len(records)

    def statistics(self) -> HeatStats:
        records = self.store.all()
        if not records:
            return HeatStats(levels={lvl.value: 0 for lvl in HeatLevel})
        scores = [r.heat_score for r in records]
        levels = {lvl.value: 0 for lvl in HeatLevel}
        for score in scores:
            levels[heatLevel(score).value] += 1
        return HeatStats(
            total_records=len(records),
            average_heat=sum(scores) / len(scores),
            max_heat=max(scores),
            min_heat=min(scores),
            favorite_count=sum(1 for r in records if r.metrics.is_favorite),
            levels=levels,
        )
