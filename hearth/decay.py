"""Decay scheduler — periodic erosion of heat plus catch-up for offline time."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable

from hearth.config import DecayConfig, HearthConfig
from hearth.models import DecayStatus, HeatRecord, nowMs
from hearth.scoring import DIFFERENTIAL_THRESHOLD, ScoringEngine

logger = logging.getLogger("hearth")


def _factor(percentage: float) -> float:
    """Per-cycle retention for a decay percentage; 0 once the whole score goes."""
    return max(0.0, 1 - percentage / 100)


def compoundedScore(score: float, cycles: int, decay: DecayConfig) -> float:
    """Score after `cycles` sequential decay ticks, in closed form.

    Equivalent to applying one tick at a time: cycles above the differential
    threshold retain (1 - rate·multiplier²/100), since the tick scales the
    rate and decrease() scales it again; the rest retain (1 - rate/100).
    A score reaching 0 stays there.
    """
    if cycles <= 0 or score <= 0:
        return max(0.0, score)
    low = _factor(decay.rate_percent)
    high = low
    if decay.differential_enabled:
        high = _factor(decay.rate_percent * decay.differential_multiplier**2)

    remaining = cycles
    if high != low and score > DIFFERENTIAL_THRESHOLD:
        if high == 0:
            return 0.0
        if high >= 1:
            return score
        # Smallest n with score·high^n <= threshold
        n = math.ceil(math.log(DIFFERENTIAL_THRESHOLD / score) / math.log(high))
        while n > 1 and score * high ** (n - 1) <= DIFFERENTIAL_THRESHOLD:
            n -= 1
        while score * high**n > DIFFERENTIAL_THRESHOLD:
            n += 1
        steps = min(max(n, 1), remaining)
        score *= high**steps
        remaining -= steps

    if remaining > 0:
        score *= low**remaining
    return max(0.0, score)


class DecayScheduler:
    """stopped → running (catch-up, then a tick every interval) → stopped."""

    def __init__(
        self,
        scoring: ScoringEngine,
        config: HearthConfig,
        last_decay_at: int | None = None,
        on_tick: Callable[[], None] | None = None,
        clock: Callable[[], int] = nowMs,
    ):
        self.scoring = scoring
        self.config = config
        self.on_tick = on_tick
        self._clock = clock
        self.last_decay_at = last_decay_at if last_decay_at is not None else clock()
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None

    # ── Decay math ───────────────────────────────────────────

    def _decays(self, record: HeatRecord) -> bool:
        return record.heat_score > 0 and not self.scoring.decaySkipped(record)

    def tick(self, now: int | None = None) -> int:
        """One decay cycle over every record. Returns how many were decayed."""
        now = now if now is not None else self._clock()
        rate = self.config.decay.rate_percent
        decayed = 0
        for record in self.scoring.store:
            if not self._decays(record):
                continue
            # decrease() scales the percentage once more for hot records
            pct = self.scoring.effectivePercentage(record.heat_score, rate)
            self.scoring.decrease(record.identifier, pct, now)
            decayed += 1
        self.last_decay_at = now
        logger.debug("Decay applied to %d records", decayed)
        return decayed

    def missedCycles(self, now: int) -> int:
        return max(0, (now - self.last_decay_at) // self.config.decay.interval_ms)

    def catchUp(self, now: int | None = None) -> int:
        """Apply the decay of every interval missed since last_decay_at."""
        now = now if now is not None else self._clock()
        missed = self.missedCycles(now)
        if missed > 0:
            decay = self.config.decay
            for record in self.scoring.store:
                if not self._decays(record):
                    continue
                record.heat_score = compoundedScore(record.heat_score, missed, decay)
                record.last_updated = now
            logger.info("Applied %d missed decay cycles", missed)
        self.last_decay_at = now
        return missed

    # ── Lifecycle ────────────────────────────────────────────

    def start(self) -> None:
        """Catch up (if enabled) and schedule ticks. Needs a running event loop."""
        if self._task is not None:
            return
        loop = asyncio.get_running_loop()
        if self.config.decay.catch_up_on_startup:
            self.catchUp()
        else:
            self.last_decay_at = self._clock()
        self._task = loop.create_task(self._run())
        logger.info(
            "Decay scheduler started: every %s min at %s%%",
            self.config.decay.interval_minutes,
            self.config.decay.rate_percent,
        )

    def stop(self) -> None:
        """Cancel future ticks. last_decay_at is kept for the next catch-up."""
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        logger.info("Decay scheduler stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.config.decay.interval_minutes * 60)
            self._scheduledTick()

    def _scheduledTick(self) -> None:
        self.tick()
        if self.on_tick is None:
            return
        try:
            self.on_tick()
        except Exception:
            logger.exception("Post-decay hook failed; in-memory decay kept")

    def updateConfig(self, config: HearthConfig) -> None:
        interval_changed = config.decay.interval_minutes != self.config.decay.interval_minutes
        self.config = config
        if interval_changed and self._task is not None:
            self._task.cancel()
            self._task = asyncio.get_running_loop().create_task(self._run())
            logger.info("Decay scheduler restarted with new interval")

    # ── Introspection ────────────────────────────────────────

    def timeUntilNextDecay(self, now: int | None = None) -> int:
        if self._task is None:
            return 0
        now = now if now is not None else self._clock()
        return max(0, self.config.decay.interval_ms - (now - self.last_decay_at))

    def status(self) -> DecayStatus:
        decay = self.config.decay
        return DecayStatus(
            is_running=self.is_running,
            last_decay_at=self.last_decay_at,
            next_decay_at=self.last_decay_at + decay.interval_ms,
            interval_minutes=decay.interval_minutes,
            rate_percent=decay.rate_percent,
        )
