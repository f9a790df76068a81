"""Combined HTTP app — REST API + MCP SSE on a single port."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from hearth.config import HearthConfig
from hearth.server.api import router
from hearth.server.mcp import mcp
from hearth.state import closeState, initState
from hearth.version import __version__


def createApp(config: HearthConfig | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await initState(config)
        yield
        closeState()

    app = FastAPI(title="Hearth", version=__version__, lifespan=lifespan)
    app.include_router(router, prefix="/api")
    mcp_app = mcp.http_app(transport="sse")
    app.mount("/mcp", mcp_app)
    return app
