"""Pydantic models for heat records, metrics, and derived views."""

from __future__ import annotations

import enum
import time

from pydantic import BaseModel, Field


def nowMs() -> int:
    return int(time.time() * 1000)


class HeatLevel(str, enum.Enum):
    COLD = "cold"
    COOL = "cool"
    WARM = "warm"
    HOT = "hot"
    CRITICAL = "critical"
    BLAZING = "blazing"


class HeatMetrics(BaseModel):
    access_count: int = Field(default=0, ge=0)
    last_accessed: int = 0
    # Quick returns to the same item
    succession_count: int = Field(default=0, ge=0)
    succession_timestamp: int = 0
    # Milliseconds spent open; session_start is None while closed
    total_duration: int = Field(default=0, ge=0)
    session_start: int | None = None
    edit_count: int = Field(default=0, ge=0)
    last_edited: int = 0
    is_favorite: bool = False
    favorite_boost: float = Field(default=0.0, ge=0)


class HeatRecord(BaseModel):
    identifier: str
    heat_score: float = Field(default=0.0, ge=0, le=100)
    metrics: HeatMetrics = Field(default_factory=HeatMetrics)
    first_tracked: int
    last_updated: int


class MetricBreakdown(BaseModel):
    frequency: float
    recency: float
    succession: float
    duration: float
    edits: float
    composite: float
    weights: dict[str, float] = Field(default_factory=dict)


class HeatStats(BaseModel):
    total_records: int = 0
    average_heat: float = 0.0
    max_heat: float = 0.0
    min_heat: float = 0.0
    favorite_count: int = 0
    levels: dict[str, int] = Field(default_factory=dict)


class DecayStatus(BaseModel):
    is_running: bool
    last_decay_at: int
    next_decay_at: int
    interval_minutes: float
    rate_percent: float
