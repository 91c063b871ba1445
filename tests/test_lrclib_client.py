# tests/test_lrclib_client.py

import pytest
import requests

from lyricstudio.core.lrclib_client import LrcLibClient


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


@pytest.fixture
def client(monkeypatch):
    """LrcLibClient whose HTTP session answers from a {path: response} table."""
    c = LrcLibClient(base_url="http://lrclib.test/api/")
    c.routes = {}
    c.requests = []

    def fake_get(url, params=None, timeout=None):
        c.requests.append((url, params))
        path = url[len(c.base_url):]
        return c.routes.get(path, FakeResponse(404))

    monkeypatch.setattr(c.session, "get", fake_get)
    return c


def test_base_url_is_normalized(client):
    assert client.base_url == "http://lrclib.test"


def test_exact_match(client):
    client.routes["/api/get"] = FakeResponse(200, {"plainLyrics": "a\nb", "syncedLyrics": "[00:01.00] a"})
    result = client.fetch_best("Song", "Artist", album="Album", duration_s=183.4)

    assert result.found
    assert result.source == "get"
    assert result.synced == "[00:01.00] a"
    assert result.plain == "a\nb"

    url, params = client.requests[0]
    assert url == "http://lrclib.test/api/get"
    assert params == {"track_name": "Song", "artist_name": "Artist", "album_name": "Album", "duration": 183}


def test_falls_back_to_search(client):
    client.routes["/api/search"] = FakeResponse(200, [{"plainLyrics": "first"}, {"plainLyrics": "second"}])
    result = client.fetch_best("Song", "Artist")

    assert result.source == "search"
    assert result.plain == "first"
    assert result.synced is None
    assert [u for u, _ in client.requests] == ["http://lrclib.test/api/get", "http://lrclib.test/api/search"]


def test_nothing_found(client):
    client.routes["/api/search"] = FakeResponse(200, [])
    result = client.fetch_best("Song", "Artist")
    assert not result.found
    assert result.source == "none"


def test_instrumental_marker(client):
    client.routes["/api/get"] = FakeResponse(200, {"plainLyrics": "", "syncedLyrics": "[au: instrumental]"})
    result = client.fetch_best("Song", "Artist")
    assert result.instrumental
    assert result.synced is None
    assert not result.found


def test_server_error_propagates(client):
    client.routes["/api/get"] = FakeResponse(500)
    with pytest.raises(requests.HTTPError):
        client.fetch_best("Song", "Artist")
