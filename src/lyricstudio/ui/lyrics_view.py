# ui/lyrics_view.py
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QBrush, QColor
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QStackedWidget,
    QTableWidget, QTableWidgetItem, QPushButton, QHeaderView,
)

from lyricstudio.core.models import Session
from lyricstudio.core.sync_engine import active_line_index
from lyricstudio.core.timecode import format_clock

COL_TIME = 0
COL_TEXT = 1
COL_ACTION = 2

ACTIVE_BG = QColor("#1e1b4b")
SYNC_BG = QColor("#3b0764")


class LyricsView(QWidget):
    """
    Lyric workspace:
      - table (Time | Text | ↻), text column editable
      - click row while syncing -> redirect the next mark to that row
      - click row otherwise -> seek to its time
      - ↻ -> re-sync everything after that row
      - highlights the cursor row while syncing, the playing row otherwise
    """
    textEdited = Signal(str, str)        # line id, text
    lineFocused = Signal(int)            # row clicked while syncing
    syncFromRequested = Signal(int)      # row index
    seekRequested = Signal(float)        # seconds
    appendRequested = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)

        self._session = Session()
        self._highlight: int = -1

        root = QVBoxLayout(self)
        root.setContentsMargins(10, 10, 10, 10)
        root.setSpacing(8)

        # --- header ---
        header = QHBoxLayout()
        header.setSpacing(8)

        self.title = QLabel("Workspace")
        self.title.setAlignment(Qt.AlignLeft | Qt.AlignVCenter)
        self.title.setStyleSheet("font-weight: 650; font-size: 14px;")
        header.addWidget(self.title, 1)

        self.count = QLabel("")
        self.count.setStyleSheet("color: #64748b; font-size: 11px;")
        header.addWidget(self.count)

        self.btn_add = QPushButton("+ Line")
        self.btn_add.clicked.connect(self.appendRequested.emit)
        header.addWidget(self.btn_add)

        root.addLayout(header)

        # --- stack: empty message / table ---
        self.stack = QStackedWidget()
        root.addWidget(self.stack, 1)

        self.msg = QLabel("Empty studio\nImport text to start the rhythm")
        self.msg.setAlignment(Qt.AlignCenter)
        self.msg.setWordWrap(True)
        self.msg.setStyleSheet("color: #334155; font-size: 16px; font-weight: 700;")
        self.stack.addWidget(self.msg)

        self.table = QTableWidget(0, 3)
        self.table.setHorizontalHeaderLabels(["Time", "Text", ""])
        self.table.verticalHeader().setVisible(False)
        self.table.setSelectionBehavior(self.table.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(self.table.SelectionMode.SingleSelection)
        self.table.setEditTriggers(self.table.EditTrigger.DoubleClicked | self.table.EditTrigger.EditKeyPressed)
        self.table.cellClicked.connect(self._on_cell_clicked)
        self.table.itemChanged.connect(self._on_item_changed)

        self.table.setColumnWidth(COL_TIME, 95)
        self.table.horizontalHeader().setSectionResizeMode(COL_TEXT, QHeaderView.ResizeMode.Stretch)
        self.table.setColumnWidth(COL_ACTION, 36)

        self.stack.addWidget(self.table)
        self.stack.setCurrentWidget(self.msg)

    # --- public API ---
    def set_session(self, session: Session) -> None:
        """Re-render from the session. Rows are rebuilt only when the line set changes."""
        old_ids = [line.id for line in self._session.lines]
        self._session = session

        if [line.id for line in session.lines] != old_ids:
            self._rebuild()
        else:
            self._refresh_cells()

        self.count.setText(f"{len(session.lines)} lines" if session.lines else "")
        self.stack.setCurrentWidget(self.table if session.lines else self.msg)

        for row in range(self.table.rowCount()):
            btn = self.table.cellWidget(row, COL_ACTION)
            if btn is not None:
                btn.setEnabled(not session.is_syncing)

        if session.is_syncing:
            self._set_highlight(session.cursor, SYNC_BG)
        else:
            self._set_highlight(-1, ACTIVE_BG)

    def on_player_position(self, seconds: float) -> None:
        if self._session.is_syncing:
            return
        idx = active_line_index(self._session.lines, seconds)
        if idx != self._highlight:
            self._set_highlight(idx, ACTIVE_BG)

    # --- internal helpers ---
    def _rebuild(self) -> None:
        self.table.blockSignals(True)
        self.table.setRowCount(len(self._session.lines))
        self._highlight = -1

        for row, line in enumerate(self._session.lines):
            it_time = QTableWidgetItem(format_clock(line.time))
            it_time.setFlags(it_time.flags() & ~Qt.ItemIsEditable)
            it_time.setData(Qt.ItemDataRole.UserRole, line.time)

            it_text = QTableWidgetItem(line.text)
            it_text.setData(Qt.ItemDataRole.UserRole, line.id)
            it_text.setFlags(it_text.flags() | Qt.ItemIsEditable)

            self.table.setItem(row, COL_TIME, it_time)
            self.table.setItem(row, COL_TEXT, it_text)

            btn = QPushButton("↻")
            btn.setToolTip("Re-sync from the next line")
            btn.setFlat(True)
            btn.clicked.connect(lambda _checked=False, r=row: self.syncFromRequested.emit(r))
            self.table.setCellWidget(row, COL_ACTION, btn)

        self.table.blockSignals(False)

    def _refresh_cells(self) -> None:
        self.table.blockSignals(True)
        for row, line in enumerate(self._session.lines):
            it_time = self.table.item(row, COL_TIME)
            it_text = self.table.item(row, COL_TEXT)
            if it_time is not None:
                it_time.setText(format_clock(line.time))
                it_time.setData(Qt.ItemDataRole.UserRole, line.time)
            if it_text is not None and it_text.text() != line.text:
                it_text.setText(line.text)
        self.table.blockSignals(False)

    def _set_highlight(self, idx: Optional[int], color: QColor) -> None:
        idx = -1 if idx is None else idx
        self.table.blockSignals(True)
        for row in range(self.table.rowCount()):
            brush = QBrush(color) if row == idx else QBrush()
            for col in (COL_TIME, COL_TEXT):
                item = self.table.item(row, col)
                if item is not None:
                    item.setBackground(brush)
        self.table.blockSignals(False)

        self._highlight = idx
        if 0 <= idx < self.table.rowCount():
            self.table.scrollToItem(self.table.item(idx, COL_TEXT), self.table.ScrollHint.PositionAtCenter)

    def _on_cell_clicked(self, row: int, col: int) -> None:
        if col == COL_ACTION:
            return
        if self._session.is_syncing:
            self.lineFocused.emit(row)
            return

        it_time = self.table.item(row, COL_TIME)
        if not it_time:
            return
        seconds = it_time.data(Qt.ItemDataRole.UserRole)
        if seconds is not None and float(seconds) >= 0:
            self.seekRequested.emit(float(seconds))

    def _on_item_changed(self, item: QTableWidgetItem) -> None:
        if item.column() != COL_TEXT:
            return
        line_id = item.data(Qt.ItemDataRole.UserRole)
        if line_id:
            self.textEdited.emit(str(line_id), item.text())
