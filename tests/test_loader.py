"""Tests for fetch_json in loader.py.

Tests _is_http_url with valid and invalid URLs, local file reads, and that
network, HTTP status and decoding failures surface as DataFetchError.
"""

import json

import pytest
import requests

from pylinkedscatterqt import loader
from pylinkedscatterqt.loader import DataFetchError, _is_http_url, fetch_json


class TestIsHttpUrl:
    """Tests for _is_http_url function."""

    def test_http_urls(self):
        """Test that http:// and https:// URLs are detected."""
        assert _is_http_url("http://example.com/data.json")
        assert _is_http_url("https://example.com/data.json")
        assert _is_http_url("  HTTPS://EXAMPLE.COM  ")

    def test_non_http(self):
        """Test that paths and other schemes are not treated as URLs."""
        assert not _is_http_url("/tmp/data.json")
        assert not _is_http_url("data/umap.json")
        assert not _is_http_url("ftp://example.com/data.json")
        assert not _is_http_url("file:///tmp/data.json")


class FakeResponse:
    def __init__(self, payload=None, status=200, bad_json=False):
        self._payload = payload
        self.status_code = status
        self._bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._bad_json:
            raise ValueError("Expecting value")
        return self._payload


class TestFetchJson:
    """Tests for fetch_json."""

    def test_local_file(self, tmp_path):
        path = tmp_path / "doc.json"
        path.write_text(json.dumps({"coords": [[1, 2]]}), encoding="utf-8")
        assert fetch_json(str(path)) == {"coords": [[1, 2]]}
        assert fetch_json(path) == {"coords": [[1, 2]]}

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataFetchError):
            fetch_json(tmp_path / "missing.json")

    def test_invalid_json_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DataFetchError, match="Invalid JSON"):
            fetch_json(path)

    def test_url(self, monkeypatch):
        seen = {}

        def fake_get(url, timeout):
            seen["url"] = url
            seen["timeout"] = timeout
            return FakeResponse({"ok": True})

        monkeypatch.setattr(loader.requests, "get", fake_get)
        assert fetch_json("https://example.com/d.json", timeout=5) == {"ok": True}
        assert seen == {"url": "https://example.com/d.json", "timeout": 5}

    def test_http_error_status(self, monkeypatch):
        monkeypatch.setattr(loader.requests, "get", lambda url, timeout: FakeResponse(status=404))
        with pytest.raises(DataFetchError, match="Failed to fetch"):
            fetch_json("http://example.com/d.json")

    def test_connection_error(self, monkeypatch):
        def fail(url, timeout):
            raise requests.ConnectionError("refused")

        monkeypatch.setattr(loader.requests, "get", fail)
        with pytest.raises(DataFetchError):
            fetch_json("http://example.com/d.json")

    def test_invalid_json_response(self, monkeypatch):
        monkeypatch.setattr(
            loader.requests, "get", lambda url, timeout: FakeResponse(bad_json=True)
        )
        with pytest.raises(DataFetchError, match="Invalid JSON"):
            fetch_json("http://example.com/d.json")
