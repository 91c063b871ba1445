# src/lyricstudio/player/player.py
from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Optional

from PySide6.QtCore import QObject, QUrl, Signal
from PySide6.QtMultimedia import QAudioOutput, QMediaPlayer

logger = logging.getLogger(__name__)


class PlayerStatus(Enum):
    STOPPED = auto()
    PLAYING = auto()
    PAUSED = auto()


class Player(QObject):
    """
    Audio transport for the sync editor. Times are float seconds on this
    side; QMediaPlayer works in integer milliseconds.
    """
    statusChanged = Signal(object)      # PlayerStatus
    positionChanged = Signal(float)     # seconds
    metadataLoaded = Signal(float)      # duration, seconds
    playbackStarted = Signal()
    playbackPaused = Signal()
    playbackEnded = Signal()

    def __init__(self, volume: float = 0.8):
        super().__init__()

        self.status = PlayerStatus.STOPPED
        self.path: Optional[str] = None

        self.audio = QAudioOutput()
        self.media = QMediaPlayer()
        self.media.setAudioOutput(self.audio)

        self._volume_0_to_1: float = 0.8
        self.set_volume(volume)

        self.media.positionChanged.connect(self._on_qt_position)
        self.media.durationChanged.connect(self._on_qt_duration)
        self.media.playbackStateChanged.connect(self._on_qt_state_changed)
        self.media.mediaStatusChanged.connect(self._on_qt_media_status)
        self.media.errorOccurred.connect(self._on_qt_error)

    # ----------------------------
    # Qt handlers
    # ----------------------------

    def _on_qt_position(self, ms: int) -> None:
        self.positionChanged.emit(ms / 1000.0)

    def _on_qt_duration(self, ms: int) -> None:
        if ms > 0:
            self.metadataLoaded.emit(ms / 1000.0)

    def _on_qt_state_changed(self, state: QMediaPlayer.PlaybackState) -> None:
        if state == QMediaPlayer.PlaybackState.PlayingState:
            self._set_status(PlayerStatus.PLAYING)
            self.playbackStarted.emit()
        elif state == QMediaPlayer.PlaybackState.PausedState:
            self._set_status(PlayerStatus.PAUSED)
            self.playbackPaused.emit()
        else:
            self._set_status(PlayerStatus.STOPPED)

    def _on_qt_media_status(self, status: QMediaPlayer.MediaStatus) -> None:
        if status == QMediaPlayer.MediaStatus.EndOfMedia:
            self._set_status(PlayerStatus.STOPPED)
            self.playbackEnded.emit()

    def _on_qt_error(self, error, message: str = "") -> None:
        logger.error("Playback error (%s): %s", error, message or self.media.errorString())

    def _set_status(self, new_status: PlayerStatus) -> None:
        if self.status != new_status:
            self.status = new_status
            self.statusChanged.emit(self.status)

    # ----------------------------
    # Transport API
    # ----------------------------

    def load(self, path: str) -> None:
        """Load a file paused at 0; the sync engine decides when to play."""
        self.path = path
        self.media.stop()
        self.media.setSource(QUrl.fromLocalFile(path))
        logger.info("Loaded %s", path)

    def play(self) -> None:
        self.media.play()

    def pause(self) -> None:
        self.media.pause()

    def stop(self) -> None:
        self.media.stop()

    def toggle_play_pause(self) -> None:
        if self.media.playbackState() == QMediaPlayer.PlaybackState.PlayingState:
            self.pause()
        else:
            self.play()

    def seek(self, seconds: float) -> None:
        self.media.setPosition(max(0, int(round(seconds * 1000))))

    def set_volume(self, volume_0_to_1: float) -> None:
        v = min(1.0, max(0.0, float(volume_0_to_1)))
        self._volume_0_to_1 = v
        self.audio.setVolume(v)

    def volume(self) -> float:
        return self._volume_0_to_1

    def position(self) -> float:
        return self.media.position() / 1000.0

    def duration(self) -> float:
        return max(0, self.media.duration()) / 1000.0

    def is_playing(self) -> bool:
        return self.status == PlayerStatus.PLAYING
