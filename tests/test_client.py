"""HearthClient tests with mocked httpx responses."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import httpx
import pytest

from hearth.client import HearthClient


def _mockResp(data: dict, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = data
    resp.raise_for_status = MagicMock()
    return resp


@pytest.fixture
def client():
    with patch("hearth.client.httpx.Client") as MockClient:
        mock = MockClient.return_value
        c = HearthClient("http://localhost:7717/api")
        c._client = mock
        yield c, mock


class TestHealth:
    def test_health(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"status": "ok"})
        assert c.health() == {"status": "ok"}
        mock.get.assert_called_once_with("/health", params=None)


class TestEvents:
    def test_access(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"identifier": "a.md", "heat_score": 5})
        assert c.access("a.md")["heat_score"] == 5
        mock.post.assert_called_once_with(
            "/access", json={"identifier": "a.md", "timestamp": None}
        )

    def test_editWithTimestamp(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({})
        c.edit("a.md", timestamp=123)
        mock.post.assert_called_once_with("/edit", json={"identifier": "a.md", "timestamp": 123})

    def test_closeItem(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({})
        c.closeItem("a.md")
        mock.post.assert_called_once_with(
            "/close", json={"identifier": "a.md", "timestamp": None}
        )


class TestQueries:
    def test_record(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"identifier": "a.md"})
        c.record("a.md")
        mock.get.assert_called_once_with("/record", params={"identifier": "a.md"})

    def test_hottest(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"records": [], "count": 0})
        assert c.hottest(3)["count"] == 0
        mock.get.assert_called_once_with("/hottest", params={"limit": 3})

    def test_recentOmitsDefaultWindow(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"records": [], "count": 0})
        c.recent()
        mock.get.assert_called_once_with("/recent", params={"limit": 10})

    def test_hotWithWindow(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"records": [], "count": 0})
        c.hot(window_ms=60_000, limit=2)
        mock.get.assert_called_once_with("/hot", params={"limit": 2, "window_ms": 60_000})

    def test_stats(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"total_records": 4})
        assert c.stats()["total_records"] == 4
        mock.get.assert_called_once_with("/stats", params=None)


class TestMutations:
    def test_setFavorite(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({})
        c.setFavorite("a.md", favorite=False)
        mock.post.assert_called_once_with(
            "/favorite", json={"identifier": "a.md", "favorite": False}
        )

    def test_rename(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"renamed": True})
        assert c.rename("a.md", "b.md")["renamed"] is True
        mock.post.assert_called_once_with(
            "/rename", json={"old_identifier": "a.md", "new_identifier": "b.md"}
        )

    def test_remove(self, client):
        c, mock = client
        mock.request.return_value = _mockResp({"removed": True, "identifier": "a.md"})
        assert c.remove("a.md")["removed"] is True
        mock.request.assert_called_once_with("DELETE", "/record", json={"identifier": "a.md"})

    def test_decay(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"decayed": 2})
        assert c.decay() == {"decayed": 2}
        mock.post.assert_called_once_with("/decay", json={})

    def test_reloadConfig(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"reloaded": True, "recalculated": 0})
        assert c.reloadConfig()["reloaded"] is True
        mock.post.assert_called_once_with("/config/reload", json={})

    def test_loadSnapshot(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"loaded": 0})
        c.loadSnapshot([])
        mock.post.assert_called_once_with("/snapshot", json={"records": []})


class TestErrors:
    def test_httpErrorPropagates(self, client):
        c, mock = client
        resp = _mockResp({}, status=500)
        resp.raise_for_status.side_effect = httpx.HTTPStatusError(
            "boom", request=MagicMock(), response=MagicMock()
        )
        mock.get.return_value = resp
        with pytest.raises(httpx.HTTPStatusError):
            c.stats()

    def test_contextManagerCloses(self, client):
        c, mock = client
        with c:
            pass
        mock.close.assert_called_once()
