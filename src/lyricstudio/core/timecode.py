# core/timecode.py
"""Conversion between seconds and LRC `[mm:ss.xx]` time tags."""
from __future__ import annotations

import math
import re
from typing import Optional

TIME_TAG_RE = re.compile(r"\[(\d{2,}):(\d{2})\.(\d{2,3})\]")

SENTINEL_TAG = "[00:00.00]"


def encode(seconds: float) -> str:
    """
    Format seconds as `[MM:SS.CC]`.

    Centiseconds are truncated, never rounded, so 59.9996 gives [00:59.99].
    The epsilon only absorbs float error: 2.3 is stored as 2.2999999...
    and would otherwise come out as .29.
    """
    total_cs = int(math.floor(seconds * 100 + 1e-9))
    m = total_cs // 6000
    s = (total_cs // 100) % 60
    cs = total_cs % 100
    return f"[{m:02d}:{s:02d}.{cs:02d}]"


def decode(text: str) -> Optional[float]:
    """
    Find the first `[mm:ss.ff]` / `[mm:ss.fff]` tag in text and return seconds.
    Three fraction digits are milliseconds, two are centiseconds.
    """
    if not text:
        return None
    m = TIME_TAG_RE.search(text)
    if not m:
        return None
    return match_seconds(m)


def match_seconds(m: re.Match) -> float:
    mins, secs, frac = m.group(1), m.group(2), m.group(3)
    divisor = 1000 if len(frac) == 3 else 100
    return int(mins) * 60 + int(secs) + int(frac) / divisor


def format_clock(seconds: float) -> str:
    """mm:ss.xx without brackets, `--:--.--` for untimed lines (table display)."""
    if seconds < 0:
        return "--:--.--"
    return encode(seconds)[1:-1]
