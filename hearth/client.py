"""Sync HTTP client for the Hearth API."""

from __future__ import annotations

from typing import Any

import httpx

from hearth.state import DEFAULT_PORT


class HearthClient:
    """Sync httpx client wrapping the Hearth HTTP API."""

    def __init__(self, base_url: str | None = None, timeout: float = 10.0):
        url = base_url or f"http://localhost:{DEFAULT_PORT}/api"
        self._client = httpx.Client(base_url=url, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HearthClient:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _post(self, path: str, **kwargs: Any) -> dict:
        r = self._client.post(path, json=kwargs)
        r.raise_for_status()
        return r.json()

    def _get(self, path: str, params: dict | None = None) -> Any:
        r = self._client.get(path, params=params)
        r.raise_for_status()
        return r.json()

    def health(self) -> dict:
        return self._get("/health")

    # ── events ────────────────────────────────────────────────

    def access(self, identifier: str, timestamp: int | None = None) -> dict:
        return self._post("/access", identifier=identifier, timestamp=timestamp)

    def edit(self, identifier: str, timestamp: int | None = None) -> dict:
        return self._post("/edit", identifier=identifier, timestamp=timestamp)

    def closeItem(self, identifier: str, timestamp: int | None = None) -> dict:
        return self._post("/close", identifier=identifier, timestamp=timestamp)

    # ── queries ───────────────────────────────────────────────

    def record(self, identifier: str) -> dict:
        return self._get("/record", params={"identifier": identifier})

    def breakdown(self, identifier: str) -> dict:
        return self._get("/breakdown", params={"identifier": identifier})

    def hottest(self, limit: int = 10) -> dict:
        return self._get("/hottest", params={"limit": limit})

    def popular(self, limit: int = 10) -> dict:
        return self._get("/popular", params={"limit": limit})

    def recent(self, window_ms: int | None = None, limit: int = 10) -> dict:
        params: dict[str, Any] = {"limit": limit}
        if window_ms:
            params["window_ms"] = window_ms
        return self._get("/recent", params=params)

    def hot(self, window_ms: int | None = None, limit: int = 10) -> dict:
        params: dict[str, Any] = {"limit": limit}
        if window_ms:
            params["window_ms"] = window_ms
        return self._get("/hot", params=params)

    def stats(self) -> dict:
        return self._get("/stats")

    # ── mutations ─────────────────────────────────────────────

    def setFavorite(self, identifier: str, favorite: bool = True) -> dict:
        return self._post("/favorite", identifier=identifier, favorite=favorite)

    def reset(self, identifier: str) -> dict:
        return self._post("/reset", identifier=identifier)

    def rename(self, old_identifier: str, new_identifier: str) -> dict:
        return self._post(
            "/rename", old_identifier=old_identifier, new_identifier=new_identifier
        )

    def remove(self, identifier: str) -> dict:
        r = self._client.request("DELETE", "/record", json={"identifier": identifier})
        r.raise_for_status()
        return r.json()

    def recalculate(self) -> dict:
        return self._post("/recalculate")

    def decay(self) -> dict:
        return self._post("/decay")

    def reloadConfig(self) -> dict:
        return self._post("/config/reload")

    def snapshot(self) -> dict:
        return self._get("/snapshot")

    def loadSnapshot(self, records: list[dict]) -> dict:
        return self._post("/snapshot", records=records)
