"""FastAPI HTTP API — routes calling the shared service layer."""

from __future__ import annotations

from fastapi import APIRouter, Query

from hearth.rankings import DEFAULT_HOT_WINDOW_MS
from hearth.server.api_models import (
    EventRequest,
    FavoriteRequest,
    IdentifierRequest,
    LoadSnapshotRequest,
    RenameRequest,
)
from hearth.service import (
    svcAccess,
    svcBreakdown,
    svcClose,
    svcDecay,
    svcEdit,
    svcGetRecord,
    svcHottest,
    svcLoadSnapshot,
    svcMostAccessed,
    svcRecalculate,
    svcRecencyWeightedHot,
    svcRecentlyActive,
    svcReloadConfig,
    svcRemoveRecord,
    svcRenameRecord,
    svcResetRecord,
    svcSetFavorite,
    svcSnapshot,
    svcStats,
)
from hearth.state import getState

router = APIRouter()


# ── Health ───────────────────────────────────────────────────


@router.get("/health")
async def health():
    return {"status": "ok"}


# ── Events ───────────────────────────────────────────────────


@router.post("/access")
async def api_access(req: EventRequest):
    return svcAccess(getState(), req.identifier, req.timestamp)


@router.post("/edit")
async def api_edit(req: EventRequest):
    return svcEdit(getState(), req.identifier, req.timestamp)


@router.post("/close")
async def api_close(req: EventRequest):
    return svcClose(getState(), req.identifier, req.timestamp)


# ── Queries ──────────────────────────────────────────────────


@router.get("/record")
async def api_get_record(identifier: str = Query(...)):
    return svcGetRecord(getState(), identifier)


@router.get("/breakdown")
async def api_breakdown(identifier: str = Query(...)):
    return svcBreakdown(getState(), identifier)


@router.get("/hottest")
async def api_hottest(limit: int = Query(10)):
    return svcHottest(getState(), limit)


@router.get("/popular")
async def api_popular(limit: int = Query(10)):
    return svcMostAccessed(getState(), limit)


@router.get("/recent")
async def api_recent(
    window_ms: int = Query(DEFAULT_HOT_WINDOW_MS),
    limit: int = Query(10),
):
    return svcRecentlyActive(getState(), window_ms, limit)


@router.get("/hot")
async def api_hot(
    window_ms: int = Query(DEFAULT_HOT_WINDOW_MS),
    limit: int = Query(10),
):
    return svcRecencyWeightedHot(getState(), window_ms, limit)


@router.get("/stats")
async def api_stats():
    return svcStats(getState())


# ── Mutations ────────────────────────────────────────────────


@router.post("/favorite")
async def api_favorite(req: FavoriteRequest):
    return svcSetFavorite(getState(), req.identifier, req.favorite)


@router.post("/reset")
async def api_reset(req: IdentifierRequest):
    return svcResetRecord(getState(), req.identifier)


@router.post("/rename")
async def api_rename(req: RenameRequest):
    return svcRenameRecord(getState(), req.old_identifier, req.new_identifier)


@router.delete("/record")
async def api_remove(req: IdentifierRequest):
    return svcRemoveRecord(getState(), req.identifier)


@router.post("/recalculate")
async def api_recalculate():
    return svcRecalculate(getState())


@router.post("/decay")
async def api_decay():
    return svcDecay(getState())


@router.post("/config/reload")
async def api_reload_config():
    return svcReloadConfig(getState())


# ── Snapshots ────────────────────────────────────────────────


@router.get("/snapshot")
async def api_snapshot():
    return svcSnapshot(getState())


@router.post("/snapshot")
async def api_load_snapshot(req: LoadSnapshotRequest):
    return svcLoadSnapshot(getState(), [r.model_dump() for r in req.records])
