# ui/workers/lyrics_lookup_worker.py
from __future__ import annotations

import logging

import requests
from PySide6.QtCore import QThread, Signal

from lyricstudio.core.lrclib_client import LrcLibClient

logger = logging.getLogger(__name__)


class LyricsLookupWorker(QThread):
    progress = Signal(str)
    finished_lookup = Signal(bool, str, object)  # ok, msg, LyricsResult | None

    def __init__(self, base_url: str, title: str, artist: str, album: str | None, duration_s: float | None, parent=None):
        super().__init__(parent)
        self.base_url = base_url
        self.title = (title or "").strip()
        self.artist = (artist or "").strip()
        self.album = (album or "").strip() or None
        self.duration_s = duration_s

    def run(self):
        if not self.title or not self.artist:
            self.finished_lookup.emit(False, "Missing title/artist; cannot search lyrics.", None)
            return

        self.progress.emit("Querying LRCLIB...")
        try:
            client = LrcLibClient(base_url=self.base_url)
            result = client.fetch_best(self.title, self.artist, self.album, self.duration_s)
        except requests.RequestException as e:
            logger.warning("LRCLIB lookup failed: %s", e)
            self.finished_lookup.emit(False, f"Lyrics lookup failed: {e}", None)
            return

        if result.instrumental:
            self.finished_lookup.emit(False, "LRCLIB lists this track as instrumental.", result)
        elif result.synced:
            self.finished_lookup.emit(True, "Found synced lyrics.", result)
        elif result.plain:
            self.finished_lookup.emit(True, "Found plain lyrics.", result)
        else:
            self.finished_lookup.emit(False, "No lyrics found on LRCLIB for this track.", result)
