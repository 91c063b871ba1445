# core/models.py
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Optional, Union

NO_TIME = -1.0  # sentinel: line has not been timed yet


def new_line_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class LyricLine:
    text: str
    time: float = NO_TIME
    id: str = field(default_factory=new_line_id)

    @property
    def has_time(self) -> bool:
        return self.time >= 0

    def with_time(self, time: float) -> "LyricLine":
        return LyricLine(text=self.text, time=time, id=self.id)

    def with_text(self, text: str) -> "LyricLine":
        return LyricLine(text=text, time=self.time, id=self.id)

    def cleared(self) -> "LyricLine":
        return self.with_time(NO_TIME)


# --- sync status (tagged variant) ---

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Syncing:
    cursor: int = 0  # index of the line the next mark will time


@dataclass(frozen=True)
class Completed:
    pass


SyncStatus = Union[Idle, Syncing, Completed]


@dataclass(frozen=True)
class Session:
    lines: tuple[LyricLine, ...] = ()
    status: SyncStatus = field(default_factory=Idle)

    @property
    def cursor(self) -> Optional[int]:
        if isinstance(self.status, Syncing):
            return self.status.cursor
        return None

    @property
    def is_syncing(self) -> bool:
        return isinstance(self.status, Syncing)

    def index_of(self, line_id: str) -> int:
        for i, line in enumerate(self.lines):
            if line.id == line_id:
                return i
        return -1

    @classmethod
    def from_lrc(cls, text: Optional[str]) -> "Session":
        from .lrc import parse

        return cls(lines=tuple(parse(text)), status=Idle())


@dataclass(frozen=True)
class TrackTags:
    """Tag record read from / written to an audio container."""
    title: str = ""
    artist: str = ""
    album: str = ""
    year: str = ""
    genre: str = ""
    cover_data: Optional[bytes] = None
    cover_mime: Optional[str] = None
    lyrics: Optional[str] = None  # embedded unsynchronized lyrics text (often LRC)

    @property
    def has_cover(self) -> bool:
        return bool(self.cover_data)
