# core/settings.py
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "settings.json"

ENV_LRCLIB_URL = "LYRICSTUDIO_LRCLIB_URL"
ENV_LOG_LEVEL = "LYRICSTUDIO_LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    lrclib_url: str = "https://lrclib.net"
    export_prefix: str = "[Studio] "
    lyrics_language: str = "eng"  # ID3 USLT needs a 3-letter code
    lyrics_description: str = "Lyrics"
    volume: float = 0.8
    log_level: str = "INFO"


def load_settings(app_data_dir: Optional[str], environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Defaults, overlaid with <app_data_dir>/settings.json, overlaid with env vars.
    A broken settings file is logged and ignored.
    """
    environ = os.environ if environ is None else environ
    settings = Settings()

    if app_data_dir:
        path = os.path.join(app_data_dir, SETTINGS_FILE_NAME)
        if os.path.exists(path):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                known = {f.name for f in fields(Settings)}
                settings = replace(settings, **{k: v for k, v in data.items() if k in known})
            except (OSError, ValueError, TypeError, AttributeError) as e:
                logger.warning("Ignoring unreadable settings file %s: %s", path, e)

    if environ.get(ENV_LRCLIB_URL):
        settings = replace(settings, lrclib_url=environ[ENV_LRCLIB_URL])
    if environ.get(ENV_LOG_LEVEL):
        settings = replace(settings, log_level=environ[ENV_LOG_LEVEL].upper())

    try:
        volume = min(1.0, max(0.0, float(settings.volume)))
    except (TypeError, ValueError):
        logger.warning("Invalid volume %r in settings, using default", settings.volume)
        volume = Settings.volume
    return replace(settings, volume=volume)


def save_settings(app_data_dir: str, settings: Settings) -> None:
    os.makedirs(app_data_dir, exist_ok=True)
    path = os.path.join(app_data_dir, SETTINGS_FILE_NAME)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(asdict(settings), f, ensure_ascii=False, indent=2)
