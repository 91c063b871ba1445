# core/errors.py
from __future__ import annotations


class SyncError(Exception):
    """Base class for rejected sync engine events. The session is left unchanged."""


class NoMoreLines(SyncError):
    def __init__(self, index: int):
        super().__init__(f"No further line to sync after line {index + 1}.")
        self.index = index


class EmptyLyrics(SyncError):
    def __init__(self, message: str = "No lyrics to sync. Import some text first."):
        super().__init__(message)


class InvalidTransition(SyncError):
    def __init__(self, status, event):
        super().__init__(f"{type(event).__name__} is not allowed while {type(status).__name__.lower()}")
        self.status = status
        self.event = event


class LineNotFound(SyncError):
    def __init__(self, line_id: str):
        super().__init__(f"No lyric line with id {line_id!r}")
        self.line_id = line_id


class MetadataError(Exception):
    """Base class for audio tag read/write failures."""


class MetadataReadError(MetadataError):
    pass


class ExportError(MetadataError):
    pass
