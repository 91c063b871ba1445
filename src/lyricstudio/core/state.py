from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QObject, Signal, Slot

from .errors import MetadataReadError
from .lrc import serialize
from .models import Session, TrackTags
from .settings import Settings
from .sync_engine import Event, Mark, reduce
from .tags import export_with_lyrics, read_metadata
from .transport import apply_commands

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notify:
    message: str
    notify_type: str = "info"   # info/success/warning/error


class AppState(QObject):
    notification = Signal(object)       # emits Notify
    session_changed = Signal(object)    # emits Session
    track_changed = Signal(object)      # emits TrackTags | None

    def __init__(self, settings: Optional[Settings] = None):
        super().__init__()
        self.settings = settings or Settings()
        self.app_data_dir: Optional[str] = None
        self.player = None
        self.session = Session()
        self.audio_path: Optional[str] = None
        self.tags: Optional[TrackTags] = None
        self.queued_notifications: list[Notify] = []

    @Slot(str, str)
    def notify(self, message: str, notify_type: str = "info"):
        self.notification.emit(Notify(message=message, notify_type=notify_type))

    # ------------------ sync session ------------------
    def dispatch(self, event: Event) -> Session:
        """
        Run event through the sync engine, hand the resulting commands to the
        player and publish the new session. SyncError propagates to the caller
        with the session untouched.
        """
        transition = reduce(self.session, event)
        self.session = transition.session
        if self.player is not None:
            apply_commands(self.player, transition.commands)
        self.session_changed.emit(self.session)
        return self.session

    def mark(self) -> Session:
        position = self.player.position() if self.player is not None else 0.0
        return self.dispatch(Mark(position))

    def replace_session(self, session: Session) -> None:
        self.session = session
        self.session_changed.emit(self.session)

    # ------------------ audio file ------------------
    def load_audio(self, path: str) -> None:
        """
        Open an audio file: read its tags (lyrics included) and hand it to the
        player. Unreadable tags are reported and the current
        session is kept; the file still plays.
        """
        self.audio_path = path
        try:
            self.tags = read_metadata(path)
        except MetadataReadError as e:
            # keep whatever lyrics are already in the editor
            self.tags = None
            self.notify(str(e), "error")
        else:
            self.replace_session(Session.from_lrc(self.tags.lyrics))
        self.track_changed.emit(self.tags)

        if self.player is not None:
            self.player.load(path)

    def export_lyrics(self, dest_dir: Optional[str] = None) -> str:
        """Write a tagged copy of the loaded file with the session's LRC. Raises ExportError."""
        if not self.audio_path:
            raise ValueError("No audio file loaded")

        lyrics = serialize(self.session.lines)
        return export_with_lyrics(
            self.audio_path,
            self.tags or TrackTags(),
            lyrics,
            dest_dir=dest_dir,
            prefix=self.settings.export_prefix,
            lang=self.settings.lyrics_language,
            desc=self.settings.lyrics_description,
        )
