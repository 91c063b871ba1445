from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

logger = logging.getLogger(__name__)

INSTRUMENTAL_MARKER = "[au: instrumental]"


@dataclass(frozen=True)
class LyricsResult:
    plain: Optional[str]
    synced: Optional[str]
    instrumental: bool
    source: str  # "get" | "search" | "none"

    @property
    def found(self) -> bool:
        return bool(self.plain or self.synced)


def _clean(value) -> Optional[str]:
    return (value or "").strip() or None


def _result_from(data: dict, source: str) -> LyricsResult:
    plain = _clean(data.get("plainLyrics"))
    synced = _clean(data.get("syncedLyrics"))
    instrumental = bool(data.get("instrumental", False)) or synced == INSTRUMENTAL_MARKER
    if instrumental:
        synced = None
    return LyricsResult(plain=plain, synced=synced, instrumental=instrumental, source=source)


class LrcLibClient:
    """Looks up lyrics for the loaded track on an LRCLIB instance."""

    def __init__(self, base_url: str = "https://lrclib.net", user_agent: str = "lyricstudio/0.1", timeout: float = 15):
        self.base_url = (base_url or "https://lrclib.net").rstrip("/")
        if self.base_url.endswith("/api"):
            self.base_url = self.base_url[: -len("/api")]
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def get_by_metadata(self, title: str, artist: str, album: str | None, duration_s: float | None) -> Optional[dict]:
        # GET /api/get?track_name=&artist_name=&album_name=&duration=
        params = {
            "track_name": title,
            "artist_name": artist,
        }
        if album:
            params["album_name"] = album
        if duration_s and duration_s > 0:
            params["duration"] = int(round(duration_s))

        r = self.session.get(f"{self.base_url}/api/get", params=params, timeout=self.timeout)
        if r.status_code == 404:
            return None
        r.raise_for_status()
        return r.json()

    def search(self, query: str, artist: str | None = None, duration_s: float | None = None, limit: int = 10) -> list[dict]:
        params = {"query": query, "limit": int(limit)}
        if artist:
            params["artist_name"] = artist
        if duration_s and duration_s > 0:
            params["duration"] = int(round(duration_s))
        r = self.session.get(f"{self.base_url}/api/search", params=params, timeout=self.timeout)
        r.raise_for_status()
        data = r.json()
        return data if isinstance(data, list) else []

    def fetch_best(self, title: str, artist: str, album: str | None = None, duration_s: float | None = None) -> LyricsResult:
        """Exact metadata match first, then the top search hit."""
        data = self.get_by_metadata(title=title, artist=artist, album=album, duration_s=duration_s)
        if data:
            logger.info("LRCLIB match for %s - %s", artist, title)
            return _result_from(data, "get")

        items = self.search(query=f"{artist} {title}", artist=artist, duration_s=duration_s, limit=10)
        if items:
            logger.info("LRCLIB search hit for %s - %s", artist, title)
            return _result_from(items[0], "search")

        logger.info("No LRCLIB lyrics for %s - %s", artist, title)
        return LyricsResult(plain=None, synced=None, instrumental=False, source="none")
