from __future__ import annotations

from PySide6.QtCore import Qt, QTimer, QPropertyAnimation, QEasingCurve
from PySide6.QtWidgets import QWidget, QFrame, QLabel, QHBoxLayout, QGraphicsOpacityEffect

# kind -> (background, border)
_COLORS = {
    "info": ("#0b1222", "#6366f1"),
    "success": ("#052e1a", "#16a34a"),
    "warning": ("#2a1a05", "#f59e0b"),
    "error": ("#2a0a0a", "#ef4444"),
}


class ToastWidget(QFrame):
    def __init__(self, message: str, kind: str, parent: QWidget):
        super().__init__(parent)
        bg, border = _COLORS.get(kind, _COLORS["info"])

        self.setObjectName("Toast")
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setStyleSheet(f"""
        QFrame#Toast {{
            background: {bg};
            border: 1px solid {border};
            border-radius: 14px;
        }}
        QLabel {{ color: #e5e7eb; font-size: 12px; }}
        """)

        root = QHBoxLayout(self)
        root.setContentsMargins(12, 10, 12, 10)
        self.lbl = QLabel(message)
        self.lbl.setWordWrap(True)
        root.addWidget(self.lbl)

        self._opacity = QGraphicsOpacityEffect(self)
        self._opacity.setOpacity(1.0)
        self.setGraphicsEffect(self._opacity)
        self._fade = None

    def fade_out(self, on_done) -> None:
        self._fade = QPropertyAnimation(self._opacity, b"opacity", self)
        self._fade.setDuration(180)
        self._fade.setStartValue(1.0)
        self._fade.setEndValue(0.0)
        self._fade.setEasingCurve(QEasingCurve.Type.InCubic)
        self._fade.finished.connect(on_done)
        self._fade.start()


class ToastManager(QWidget):
    """Overlay stacking toasts in the top-right corner of its host, newest first."""

    def __init__(self, host: QWidget, max_visible: int = 4):
        super().__init__(host)
        self.host = host
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground, True)

        self._toasts: list[ToastWidget] = []
        self._margin = 14
        self._spacing = 10
        self._max_visible = max_visible
        self.show()

    def show_toast(self, message: str, notify_type: str = "info", timeout_ms: int = 3000) -> None:
        kind = "warning" if notify_type == "warn" else notify_type
        toast = ToastWidget(message, kind, parent=self)
        toast.setFixedWidth(min(420, max(260, self.host.width() // 2)))

        self._toasts.insert(0, toast)
        while len(self._toasts) > self._max_visible:
            self._remove(self._toasts[-1])

        self._layout_toasts()
        toast.show()
        QTimer.singleShot(max(500, int(timeout_ms)), lambda: self._dismiss(toast))

    def _dismiss(self, toast: ToastWidget) -> None:
        if toast in self._toasts:
            toast.fade_out(lambda: self._remove(toast))

    def _remove(self, toast: ToastWidget) -> None:
        if toast in self._toasts:
            self._toasts.remove(toast)
            toast.hide()
            toast.deleteLater()
            self._layout_toasts()

    def _layout_toasts(self) -> None:
        self.setGeometry(self.host.rect())
        self.raise_()

        y = self._margin
        for t in self._toasts:
            t.adjustSize()
            t.move(self.width() - self._margin - t.width(), y)
            y += t.sizeHint().height() + self._spacing
