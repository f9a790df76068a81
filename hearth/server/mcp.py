"""Hearth MCP server — usage events and heat rankings as tools."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from hearth.service import (
    svcAccess,
    svcClose,
    svcEdit,
    svcGetRecord,
    svcHottest,
    svcRecencyWeightedHot,
    svcSetFavorite,
    svcStats,
)
from hearth.state import closeState, getState, initState, isInitialized

logger = logging.getLogger("hearth")


@asynccontextmanager
async def lifespan(server):
    # Mounted under the HTTP app the state already exists
    owned = not isInitialized()
    if owned:
        await initState()
    state = getState()

    yield {"engine": state.engine, "db": state.db, "config": state.config}

    if owned:
        closeState()


mcp = FastMCP("hearth", lifespan=lifespan)


# ============================================================
# Event Tools
# ============================================================


@mcp.tool
def record_access(identifier: str, timestamp: int | None = None) -> dict:
    """Record that an item was opened or focused.

    Args:
        identifier: Item key, usually a file path.
        timestamp: Event time in epoch milliseconds (defaults to now).
    """
    return svcAccess(getState(), identifier, timestamp)


@mcp.tool
def record_edit(identifier: str, timestamp: int | None = None) -> dict:
    """Record that an item was modified.

    Args:
        identifier: Item key, usually a file path.
        timestamp: Event time in epoch milliseconds (defaults to now).
    """
    return svcEdit(getState(), identifier, timestamp)


@mcp.tool
def record_close(identifier: str, timestamp: int | None = None) -> dict:
    """Record that an item was closed, crediting the time it was open."""
    return svcClose(getState(), identifier, timestamp)


# ============================================================
# Query Tools
# ============================================================


@mcp.tool
def hottest(limit: int = 10, recent_only: bool = False) -> dict:
    """List the hottest items.

    Args:
        limit: Max items to return.
        recent_only: Only items used in the last 7 days, ranked by heat and recency.
    """
    if recent_only:
        return svcRecencyWeightedHot(getState(), limit=limit)
    return svcHottest(getState(), limit)


@mcp.tool
def heat_of(identifier: str) -> dict:
    """Heat score, level, and usage metrics for one item."""
    return svcGetRecord(getState(), identifier)


@mcp.tool
def set_favorite(identifier: str, favorite: bool = True) -> dict:
    """Pin (or unpin) an item so it keeps a permanent heat boost."""
    return svcSetFavorite(getState(), identifier, favorite)


# ============================================================
# MCP Resources
# ============================================================


@mcp.resource("heat://stats")
def resource_stats() -> dict:
    """Heat distribution and decay scheduler status."""
    return svcStats(getState())
