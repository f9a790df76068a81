"""Config loading from ~/.hearth/config.json with env var overrides."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_DIR = Path.home() / ".hearth"
CONFIG_PATH = CONFIG_DIR / "config.json"

logger = logging.getLogger("hearth")


def _clamped(name: str, value: float, safe: float) -> float:
    logger.warning("Config %s=%r out of range, using %r", name, value, safe)
    return safe


class WeightsConfig(BaseModel):
    """Composite-score weights. Conventionally sum to 100 (not enforced)."""

    frequency: float = 30.0
    recency: float = 40.0
    succession: float = 10.0
    duration: float = 15.0
    edits: float = 5.0

    @field_validator("frequency", "recency", "succession", "duration", "edits")
    @classmethod
    def nonNegative(cls, v: float, info: ValidationInfo) -> float:
        return _clamped(f"weights.{info.field_name}", v, 0.0) if v < 0 else v


class IncrementsConfig(BaseModel):
    file_open: float = 5.0
    file_edit: float = 10.0
    quick_return: float = 3.0
    quick_return_window_ms: int = 5 * 60 * 1000

    @field_validator("file_open", "file_edit", "quick_return", "quick_return_window_ms")
    @classmethod
    def nonNegative(cls, v: float, info: ValidationInfo) -> float:
        return _clamped(f"increments.{info.field_name}", v, 0) if v < 0 else v


class DecayConfig(BaseModel):
    interval_minutes: float = 30.0
    rate_percent: float = 5.0
    differential_enabled: bool = True
    differential_multiplier: float = 2.0
    pause_for_favorites: bool = True
    catch_up_on_startup: bool = True

    @field_validator("interval_minutes")
    @classmethod
    def positiveInterval(cls, v: float) -> float:
        return _clamped("decay.interval_minutes", v, 30.0) if v <= 0 else v

    @field_validator("rate_percent")
    @classmethod
    def percentRange(cls, v: float) -> float:
        if v < 0 or v > 100:
            return _clamped("decay.rate_percent", v, min(100.0, max(0.0, v)))
        return v

    @field_validator("differential_multiplier")
    @classmethod
    def nonNegativeMultiplier(cls, v: float) -> float:
        return _clamped("decay.differential_multiplier", v, 2.0) if v < 0 else v

    @property
    def interval_ms(self) -> int:
        return max(1, int(self.interval_minutes * 60 * 1000))


class HearthConfig(BaseSettings):
    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="HEARTH_",
        extra="ignore",
    )
    db_path: str = Field(default_factory=lambda: str(CONFIG_DIR / "heat.db"))
    # HTTP server
    port: int = 7717
    # Scoring
    manual_boost_value: float = 50.0
    weights: WeightsConfig = Field(default_factory=WeightsConfig)
    increments: IncrementsConfig = Field(default_factory=IncrementsConfig)
    decay: DecayConfig = Field(default_factory=DecayConfig)

    @field_validator("manual_boost_value")
    @classmethod
    def nonNegativeBoost(cls, v: float) -> float:
        return _clamped("manual_boost_value", v, 0.0) if v < 0 else v


_FLAT_DECAY_KEYS = {
    "decay_interval": "interval_minutes",
    "decay_rate": "rate_percent",
    "differential_decay": "differential_enabled",
    "differential_multiplier": "differential_multiplier",
    "pause_decay_for_favorites": "pause_for_favorites",
    "calculate_decay_while_closed": "catch_up_on_startup",
}


def _migrateFlatDecay(raw: dict) -> dict:
    """Reshape legacy flat decay_* keys into nested decay: {...}."""
    if any(k in raw for k in _FLAT_DECAY_KEYS):
        nested = raw.setdefault("decay", {})
        for old, new in _FLAT_DECAY_KEYS.items():
            if old in raw:
                nested.setdefault(new, raw.pop(old))
    return raw


def loadConfig() -> HearthConfig:
    """Load config from ~/.hearth/config.json with env var overrides."""
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        raw = _migrateFlatDecay(raw)
        return HearthConfig(**raw)
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    config = HearthConfig()
    CONFIG_PATH.write_text(config.model_dump_json(indent=2))
    return config
