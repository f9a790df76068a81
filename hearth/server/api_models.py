"""Pydantic request models for the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from hearth.models import HeatRecord


class EventRequest(BaseModel):
    identifier: str
    timestamp: int | None = None  # epoch ms, defaults to server time


class IdentifierRequest(BaseModel):
    identifier: str


class FavoriteRequest(BaseModel):
    identifier: str
    favorite: bool = True


class RenameRequest(BaseModel):
    old_identifier: str
    new_identifier: str


class LoadSnapshotRequest(BaseModel):
    records: list[HeatRecord] = Field(default_factory=list)
