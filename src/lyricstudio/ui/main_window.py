from __future__ import annotations

import logging
import os
from dataclasses import replace

from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QPixmap, QShortcut
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
    QSplitter, QFileDialog, QMessageBox, QStackedWidget, QToolButton, QStyle,
)

from lyricstudio.core.errors import EmptyLyrics, ExportError, NoMoreLines, SyncError
from lyricstudio.core.models import Completed, Idle, Session, Syncing
from lyricstudio.core.settings import save_settings
from lyricstudio.core.sync_engine import (
    AppendLine, CancelSync, EditText, FocusLine, ImportText, ReachEndOfAudio, StartFromIndex, StartFull,
)
from lyricstudio.core.tags import SUPPORTED_EXTS
from lyricstudio.ui.dialogs.import_text_dialog import ImportTextDialog
from lyricstudio.ui.lyrics_view import LyricsView
from lyricstudio.ui.player_bar import PlayerBar
from lyricstudio.ui.widgets.toast import ToastManager

logger = logging.getLogger(__name__)

AUDIO_FILTER = "Audio files ({})".format(" ".join(f"*{ext}" for ext in sorted(SUPPORTED_EXTS)))


class MainWindow(QMainWindow):
    def __init__(self, app_state):
        super().__init__()
        self.setWindowTitle("Lyric Studio")
        self.resize(1100, 720)
        self.app_state = app_state
        self._lookup_worker = None

        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        self.layout = QVBoxLayout(self.central_widget)
        self.layout.setContentsMargins(0, 0, 0, 0)
        self.layout.setSpacing(0)

        self.toasts = ToastManager(self)
        self.app_state.notification.connect(self._on_notify)

        # --- Top bar ---
        top_bar = QHBoxLayout()
        top_bar.setContentsMargins(12, 8, 12, 8)

        self.lbl_brand = QLabel("LYRIC STUDIO")
        self.lbl_brand.setStyleSheet("font-weight: 800; letter-spacing: 2px;")
        top_bar.addWidget(self.lbl_brand)
        top_bar.addStretch(1)

        self.lbl_file = QLabel("")
        self.lbl_file.setStyleSheet("color: #94a3b8; font-size: 11px;")
        top_bar.addWidget(self.lbl_file)

        self.btn_open = QToolButton()
        self.btn_open.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_DialogOpenButton))
        self.btn_open.setToolTip("Open audio file")
        self.btn_open.clicked.connect(self.open_audio_dialog)
        top_bar.addWidget(self.btn_open)

        self.layout.addLayout(top_bar)

        # --- Sidebar + workspace ---
        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(self._build_sidebar())

        self.lyrics_view = LyricsView()
        self.lyrics_view.textEdited.connect(lambda line_id, text: self._dispatch(EditText(line_id, text)))
        self.lyrics_view.lineFocused.connect(lambda row: self._dispatch(FocusLine(row)))
        self.lyrics_view.syncFromRequested.connect(lambda row: self._dispatch(StartFromIndex(row)))
        self.lyrics_view.appendRequested.connect(lambda: self._dispatch(AppendLine()))
        splitter.addWidget(self.lyrics_view)

        splitter.setStretchFactor(0, 1)
        splitter.setStretchFactor(1, 3)
        self.layout.addWidget(splitter, 1)

        # --- PlayerBar ---
        self.player_bar = PlayerBar(self.app_state.player, self)
        self.layout.addWidget(self.player_bar)

        player = self.app_state.player
        if player:
            player.positionChanged.connect(self.lyrics_view.on_player_position)
            player.playbackEnded.connect(lambda: self._dispatch(ReachEndOfAudio()))
            self.lyrics_view.seekRequested.connect(player.seek)

        # --- Shortcuts: marking only while syncing so Enter still commits cell edits ---
        self._mark_shortcuts = [
            QShortcut(QKeySequence(Qt.Key.Key_Return), self, activated=self.mark_beat),
            QShortcut(QKeySequence(Qt.Key.Key_Enter), self, activated=self.mark_beat),
        ]
        QShortcut(QKeySequence("Ctrl+O"), self, activated=self.open_audio_dialog)
        QShortcut(QKeySequence("Escape"), self, activated=self._stop_if_syncing)

        self.app_state.session_changed.connect(self._on_session_changed)
        self.app_state.track_changed.connect(self._on_track_changed)

        self._on_track_changed(self.app_state.tags)
        self._on_session_changed(self.app_state.session)
        self.show_queued_notifications()

    # ------------------ layout ------------------
    def _build_sidebar(self) -> QWidget:
        side = QWidget()
        side.setObjectName("Sidebar")
        side.setMinimumWidth(300)
        lay = QVBoxLayout(side)
        lay.setContentsMargins(20, 20, 20, 20)
        lay.setSpacing(12)

        self.cover = QLabel("No cover")
        self.cover.setAlignment(Qt.AlignCenter)
        self.cover.setFixedSize(260, 260)
        self.cover.setStyleSheet("border: 1px solid #1f2937; border-radius: 18px; color: #475569;")
        lay.addWidget(self.cover, 0, Qt.AlignHCenter)

        self.lbl_title = QLabel("Studio idle")
        self.lbl_title.setAlignment(Qt.AlignCenter)
        self.lbl_title.setWordWrap(True)
        self.lbl_title.setStyleSheet("font-size: 17px; font-weight: 800;")
        lay.addWidget(self.lbl_title)

        self.lbl_artist = QLabel("Open an audio file to start editing.")
        self.lbl_artist.setAlignment(Qt.AlignCenter)
        self.lbl_artist.setWordWrap(True)
        self.lbl_artist.setStyleSheet("color: #64748b; font-size: 11px; font-weight: 700;")
        lay.addWidget(self.lbl_artist)

        # one page per sync status
        self.status_stack = QStackedWidget()

        idle = QWidget()
        idle_lay = QVBoxLayout(idle)
        self.btn_import = QPushButton("Import lyrics text")
        self.btn_fetch = QPushButton("Fetch lyrics (LRCLIB)")
        self.btn_start = QPushButton("Start beat marking")
        self.btn_export_idle = QPushButton("Export synced file")
        self.btn_import.clicked.connect(self.open_import_dialog)
        self.btn_fetch.clicked.connect(self.fetch_lyrics)
        self.btn_start.clicked.connect(lambda: self._dispatch(StartFull()))
        self.btn_export_idle.clicked.connect(self.export_file)
        for b in (self.btn_import, self.btn_fetch, self.btn_start, self.btn_export_idle):
            idle_lay.addWidget(b)
        idle_lay.addStretch(1)
        self.status_stack.addWidget(idle)

        syncing = QWidget()
        sync_lay = QVBoxLayout(syncing)
        rec = QLabel("● RECORDING")
        rec.setAlignment(Qt.AlignCenter)
        rec.setStyleSheet("color: #f87171; font-weight: 800; font-size: 11px;")
        key = QLabel("ENTER")
        key.setAlignment(Qt.AlignCenter)
        key.setStyleSheet("font-size: 40px; font-weight: 900;")
        hint = QLabel("Press Enter when the next line starts")
        hint.setAlignment(Qt.AlignCenter)
        hint.setStyleSheet("color: #64748b; font-size: 11px;")
        self.lbl_current = QLabel("")
        self.lbl_current.setAlignment(Qt.AlignCenter)
        self.lbl_current.setWordWrap(True)
        self.lbl_current.setStyleSheet("color: #818cf8; font-style: italic; font-weight: 700;")
        self.btn_stop = QPushButton("Stop")
        self.btn_stop.clicked.connect(lambda: self._dispatch(CancelSync()))
        for w in (rec, key, hint, self.lbl_current, self.btn_stop):
            sync_lay.addWidget(w)
        sync_lay.addStretch(1)
        self.status_stack.addWidget(syncing)

        done = QWidget()
        done_lay = QVBoxLayout(done)
        ok = QLabel("✓ Sync complete")
        ok.setAlignment(Qt.AlignCenter)
        ok.setStyleSheet("color: #34d399; font-weight: 800;")
        self.btn_export = QPushButton("Export synced file")
        self.btn_back = QPushButton("Back to editor")
        self.btn_export.clicked.connect(self.export_file)
        self.btn_back.clicked.connect(lambda: self._dispatch(CancelSync()))
        for w in (ok, self.btn_export, self.btn_back):
            done_lay.addWidget(w)
        done_lay.addStretch(1)
        self.status_stack.addWidget(done)

        lay.addWidget(self.status_stack, 1)
        return side

    # ------------------ sync engine ------------------
    def _dispatch(self, event) -> bool:
        try:
            self.app_state.dispatch(event)
            return True
        except NoMoreLines:
            QMessageBox.information(self, "Beat marking", "No further line to sync.")
        except EmptyLyrics as e:
            self.app_state.notify(str(e), "warning")
        except SyncError as e:
            logger.warning("Rejected %s: %s", type(event).__name__, e)
            self.app_state.notify(str(e), "warning")
        return False

    def mark_beat(self):
        if not self.app_state.session.is_syncing:
            return
        try:
            self.app_state.mark()
        except SyncError as e:
            self.app_state.notify(str(e), "warning")

    def _stop_if_syncing(self):
        if self.app_state.session.is_syncing:
            self._dispatch(CancelSync())

    def _on_session_changed(self, session: Session):
        self.lyrics_view.set_session(session)

        status = session.status
        if isinstance(status, Syncing):
            self.status_stack.setCurrentIndex(1)
            cursor = status.cursor
            text = session.lines[cursor].text if cursor < len(session.lines) else ""
            self.lbl_current.setText(f'"{text}"' if text else "")
        elif isinstance(status, Completed):
            self.status_stack.setCurrentIndex(2)
        else:
            self.status_stack.setCurrentIndex(0)

        for sc in self._mark_shortcuts:
            sc.setEnabled(isinstance(status, Syncing))

        has_file = bool(self.app_state.audio_path)
        has_lines = bool(session.lines)
        self.btn_start.setEnabled(has_lines and isinstance(status, Idle))
        self.btn_fetch.setEnabled(self.app_state.tags is not None)
        self.btn_export.setEnabled(has_file)
        self.btn_export_idle.setEnabled(has_file and has_lines)

    # ------------------ audio file ------------------
    def open_audio_dialog(self):
        path, _ = QFileDialog.getOpenFileName(self, "Open audio file", "", AUDIO_FILTER)
        if path:
            self.open_audio(path)

    def open_audio(self, path: str):
        self.app_state.load_audio(path)
        self.lbl_file.setText(os.path.basename(path))
        self._on_session_changed(self.app_state.session)

    def _on_track_changed(self, tags):
        if tags is None:
            self.lbl_title.setText(os.path.basename(self.app_state.audio_path) if self.app_state.audio_path else "Studio idle")
            self.lbl_artist.setText("No metadata" if self.app_state.audio_path else "Open an audio file to start editing.")
            self.cover.setPixmap(QPixmap())
            self.cover.setText("No cover")
            return

        self.lbl_title.setText(tags.title)
        self.lbl_artist.setText(tags.artist.upper())

        pm = QPixmap()
        if tags.cover_data and pm.loadFromData(tags.cover_data):
            self.cover.setPixmap(pm.scaled(self.cover.size(), Qt.KeepAspectRatioByExpanding, Qt.SmoothTransformation))
        else:
            self.cover.setPixmap(QPixmap())
            self.cover.setText("No cover")

    def export_file(self):
        if not self.app_state.audio_path:
            self.app_state.notify("Open an audio file first.", "warning")
            return
        try:
            dest = self.app_state.export_lyrics()
        except ExportError as e:
            logger.error("Export failed: %s", e)
            self.app_state.notify("Export failed.", "error")
            return
        self.app_state.notify(f"Saved {os.path.basename(dest)}", "success")
        self.statusBar().showMessage(dest, 6000)

    # ------------------ lyrics input ------------------
    def open_import_dialog(self):
        dlg = ImportTextDialog(self)
        if dlg.exec() != ImportTextDialog.DialogCode.Accepted:
            return
        if self._dispatch(ImportText(dlg.raw_text())):
            self.app_state.notify(f"Imported {len(self.app_state.session.lines)} lines.", "success")

    def fetch_lyrics(self):
        tags = self.app_state.tags
        if tags is None:
            self.app_state.notify("No track metadata to search with.", "warning")
            return

        from lyricstudio.ui.workers.lyrics_lookup_worker import LyricsLookupWorker

        player = self.app_state.player
        self._lookup_worker = LyricsLookupWorker(
            base_url=self.app_state.settings.lrclib_url,
            title=tags.title,
            artist=tags.artist,
            album=tags.album,
            duration_s=player.duration() if player else None,
            parent=self,
        )
        self._lookup_worker.progress.connect(lambda s: self.statusBar().showMessage(s))
        self._lookup_worker.finished_lookup.connect(self._on_lookup_finished)
        self.btn_fetch.setEnabled(False)
        self._lookup_worker.start()

    def _on_lookup_finished(self, ok: bool, msg: str, result):
        self.btn_fetch.setEnabled(True)
        self.statusBar().showMessage(msg, 4000)
        if not ok:
            self.app_state.notify(msg, "warning" if result is not None else "error")
            return

        if self.app_state.session.is_syncing:
            self.app_state.notify("Stop beat marking before loading new lyrics.", "warning")
            return

        if result.synced:
            self.app_state.replace_session(Session.from_lrc(result.synced))
        else:
            self._dispatch(ImportText(result.plain))
        self.app_state.notify(msg, "success")

    # ------------------ notifications ------------------
    def _on_notify(self, n):
        msg = getattr(n, "message", "") or ""
        if not msg:
            return
        self.toasts.show_toast(msg, notify_type=(n.notify_type or "info").lower(), timeout_ms=3000)

    def show_queued_notifications(self):
        for n in self.app_state.queued_notifications:
            self._on_notify(n)
        self.app_state.queued_notifications.clear()

    def closeEvent(self, event):
        player = self.app_state.player
        if player and self.app_state.app_data_dir:
            try:
                save_settings(self.app_state.app_data_dir, replace(self.app_state.settings, volume=player.volume()))
            except OSError as e:
                logger.warning("Could not save settings: %s", e)
        super().closeEvent(event)
