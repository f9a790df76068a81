"""Ranking queries over heat records."""

from __future__ import annotations

from collections.abc import Iterable

from hearth.models import HeatRecord

DEFAULT_HOT_WINDOW_MS = 7 * 24 * 60 * 60 * 1000
HEAT_SHARE = 0.7
RECENCY_SHARE = 0.3


def _take(records: list[HeatRecord], limit: int | None) -> list[HeatRecord]:
    return records[:limit] if limit else records


def hottest(records: Iterable[HeatRecord], limit: int | None = None) -> list[HeatRecord]:
    return _take(sorted(records, key=lambda r: r.heat_score, reverse=True), limit)


def mostAccessed(records: Iterable[HeatRecord], limit: int | None = None) -> list[HeatRecord]:
    return _take(sorted(records, key=lambda r: r.metrics.access_count, reverse=True), limit)


def recentlyActive(
    records: Iterable[HeatRecord],
    window_ms: int,
    now: int,
    limit: int | None = None,
) -> list[HeatRecord]:
    """Records accessed within the window, most recent first."""
    cutoff = now - window_ms
    active = [r for r in records if r.metrics.last_accessed > cutoff]
    active.sort(key=lambda r: r.metrics.last_accessed, reverse=True)
    return _take(active, limit)


def recencyWeightedScore(record: HeatRecord, window_ms: int, now: int) -> float:
    """0.7·heat + 0.3·(recency factor · 100); factor is 1 for "just now"."""
    cutoff = now - window_ms
    factor = (record.metrics.last_accessed - cutoff) / window_ms if window_ms > 0 else 0.0
    return record.heat_score * HEAT_SHARE + factor * 100 * RECENCY_SHARE


def recencyWeightedHot(
    records: Iterable[HeatRecord],
    window_ms: int,
    now: int,
    limit: int | None = None,
) -> list[HeatRecord]:
    cutoff = now - window_ms
    active = [r for r in records if r.metrics.last_accessed > cutoff]
    active.sort(key=lambda r: recencyWeightedScore(r, window_ms, now), reverse=True)
    return _take(active, limit)
