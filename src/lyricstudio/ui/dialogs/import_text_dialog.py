from __future__ import annotations

from PySide6.QtWidgets import QDialog, QVBoxLayout, QHBoxLayout, QLabel, QPlainTextEdit, QPushButton


class ImportTextDialog(QDialog):
    """Paste plain lyrics, one line per lyric line, no timestamps."""

    def __init__(self, parent=None, initial_text: str = ""):
        super().__init__(parent)
        self.setWindowTitle("Import lyrics text")
        self.resize(560, 460)

        root = QVBoxLayout(self)

        hint = QLabel("Paste the lyrics without timestamps. Each line becomes one lyric line; blank lines are skipped.")
        hint.setWordWrap(True)
        root.addWidget(hint)

        self.text = QPlainTextEdit()
        self.text.setPlaceholderText("Paste lyrics here, one line per lyric...")
        self.text.setPlainText(initial_text)
        root.addWidget(self.text, 1)

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        self.btn_cancel = QPushButton("Cancel")
        self.btn_import = QPushButton("Import")
        self.btn_import.setDefault(True)
        self.btn_cancel.clicked.connect(self.reject)
        self.btn_import.clicked.connect(self.accept)
        buttons.addWidget(self.btn_cancel)
        buttons.addWidget(self.btn_import)
        root.addLayout(buttons)

    def raw_text(self) -> str:
        return self.text.toPlainText()
