import logging
import os
import sys
from pathlib import Path

from PySide6.QtCore import QStandardPaths
from PySide6.QtWidgets import QApplication

ROOT = Path(__file__).resolve().parent
SRC_DIR = ROOT / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from lyricstudio.core.settings import load_settings
from lyricstudio.core.state import AppState, Notify
from lyricstudio.player.player import Player
from lyricstudio.ui.main_window import MainWindow

logger = logging.getLogger("lyricstudio")


def get_app_data_dir() -> str:
    base = QStandardPaths.writableLocation(QStandardPaths.AppDataLocation)
    os.makedirs(base, exist_ok=True)
    return base


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


def init_app_state() -> AppState:
    app_data_dir = get_app_data_dir()
    settings = load_settings(app_data_dir)
    configure_logging(settings.log_level)
    logger.info("App data dir: %s", app_data_dir)

    app_state = AppState(settings)
    app_state.app_data_dir = app_data_dir

    try:
        app_state.player = Player(volume=settings.volume)
    except Exception as e:
        logger.exception("Audio player unavailable")
        app_state.player = None
        app_state.queued_notifications.append(
            Notify(message=f"Failed to initialize audio player: {e}", notify_type="error")
        )

    return app_state


def main() -> int:
    qt_app = QApplication(sys.argv)
    qt_app.setApplicationName("LyricStudio")

    app_state = init_app_state()
    main_window = MainWindow(app_state)
    main_window.show()

    # optional: open a file given on the command line
    if len(sys.argv) > 1 and os.path.isfile(sys.argv[1]):
        main_window.open_audio(sys.argv[1])

    return qt_app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
