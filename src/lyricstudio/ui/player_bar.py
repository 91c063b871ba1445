# ui/player_bar.py
from __future__ import annotations

from PySide6.QtCore import Qt, QSize, QByteArray
from PySide6.QtGui import QIcon, QPixmap, QPainter
from PySide6.QtWidgets import QWidget, QHBoxLayout, QLabel, QToolButton, QSlider
from PySide6.QtSvg import QSvgRenderer

from lyricstudio.player.player import PlayerStatus


def _fmt(seconds: float) -> str:
    s = max(0, int(seconds))
    return f"{s // 60:02d}:{s % 60:02d}"


def _svg_icon(path_d: str, size: int = 20, color: str = "#e5e7eb") -> QIcon:
    svg = f"""
    <svg xmlns="http://www.w3.org/2000/svg" width="{size}" height="{size}" viewBox="0 0 24 24">
      <path d="{path_d}" fill="{color}"/>
    </svg>
    """.strip()

    renderer = QSvgRenderer(QByteArray(svg.encode("utf-8")))
    pm = QPixmap(size, size)
    pm.fill(Qt.transparent)

    p = QPainter(pm)
    renderer.render(p)
    p.end()

    return QIcon(pm)


SVG_PLAY = "M8 5v14l11-7L8 5z"
SVG_PAUSE = "M6 5h4v14H6V5zm8 0h4v14h-4V5z"
SVG_VOLUME = "M14 5v14l-7-5H4V10h3l7-5zm3.5 7c0-1.77-1.02-3.29-2.5-4.03v8.05c1.48-.73 2.5-2.25 2.5-4.02z"


class PlayerBar(QWidget):
    """Play/pause, seek slider (ms resolution) and volume."""

    def __init__(self, player, parent=None):
        super().__init__(parent)
        self.player = player

        self._dragging = False

        root = QHBoxLayout(self)
        root.setContentsMargins(12, 8, 12, 8)
        root.setSpacing(10)

        self._icon_play = _svg_icon(SVG_PLAY, 22, "#020617")
        self._icon_pause = _svg_icon(SVG_PAUSE, 22, "#020617")

        self.btn_play = QToolButton()
        self.btn_play.setObjectName("BtnPlay")
        self.btn_play.setIcon(self._icon_play)
        self.btn_play.setIconSize(QSize(22, 22))
        self.btn_play.setToolTip("Play")

        self.lbl_time = QLabel("00:00")
        self.lbl_dur = QLabel("00:00")

        self.slider = QSlider(Qt.Orientation.Horizontal)
        self.slider.setRange(0, 0)
        self.slider.setSingleStep(1000)
        self.slider.setPageStep(5000)

        self.lbl_volume = QLabel()
        self.lbl_volume.setPixmap(_svg_icon(SVG_VOLUME, 16, "#64748b").pixmap(16, 16))

        self.volume = QSlider(Qt.Orientation.Horizontal)
        self.volume.setObjectName("Volume")
        self.volume.setRange(0, 100)
        self.volume.setFixedWidth(110)

        root.addWidget(self.btn_play)
        root.addWidget(self.lbl_time)
        root.addWidget(self.slider, 1)
        root.addWidget(self.lbl_dur)
        root.addSpacing(12)
        root.addWidget(self.lbl_volume)
        root.addWidget(self.volume)

        self.slider.sliderPressed.connect(self._on_slider_pressed)
        self.slider.sliderReleased.connect(self._on_slider_released)
        self.slider.sliderMoved.connect(self._on_slider_moved)

        if self.player:
            self.volume.setValue(int(round(self.player.volume() * 100)))
            self.volume.valueChanged.connect(lambda v: self.player.set_volume(v / 100.0))

            self.player.statusChanged.connect(self._on_status_changed)
            self.player.positionChanged.connect(self._on_position)
            self.player.metadataLoaded.connect(self._on_duration)
            self.btn_play.clicked.connect(self.player.toggle_play_pause)
        else:
            self.setEnabled(False)

        self.setObjectName("PlayerBar")
        self._apply_styles()

    # --- slider handling ---
    def _on_slider_pressed(self):
        self._dragging = True

    def _on_slider_moved(self, value: int):
        self.lbl_time.setText(_fmt(value / 1000.0))

    def _on_slider_released(self):
        self._dragging = False
        if self.player:
            self.player.seek(self.slider.value() / 1000.0)

    # --- player updates ---
    def _on_status_changed(self, status):
        playing = status == PlayerStatus.PLAYING
        self.btn_play.setIcon(self._icon_pause if playing else self._icon_play)
        self.btn_play.setToolTip("Pause" if playing else "Play")

    def _on_duration(self, seconds: float):
        ms = int(seconds * 1000)
        self.slider.setRange(0, max(0, ms))
        self.lbl_dur.setText(_fmt(seconds))

    def _on_position(self, seconds: float):
        if self._dragging:
            return
        self.lbl_time.setText(_fmt(seconds))
        self.slider.setValue(int(seconds * 1000))

    def _apply_styles(self):
        self.setStyleSheet("""
        QWidget#PlayerBar {
            background-color: #020617;
            border-top: 1px solid #111827;
        }

        QToolButton#BtnPlay {
            background: #f8fafc;
            border: 1px solid #1f2937;
            border-radius: 12px;
            padding: 10px;
        }
        QToolButton#BtnPlay:hover { background: #e0e7ff; }

        QSlider::groove:horizontal {
            height: 4px;
            background: #0f172a;
            border-radius: 2px;
        }
        QSlider::handle:horizontal {
            width: 12px;
            height: 12px;
            margin: -4px 0;
            border-radius: 6px;
            background: #6366f1;
        }
        QSlider::sub-page:horizontal {
            background: #6366f1;
            border-radius: 2px;
        }

        QLabel {
            color: #64748b;
            font-family: monospace;
            font-size: 11px;
        }
        """)
