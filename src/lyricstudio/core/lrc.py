# core/lrc.py
from __future__ import annotations

import re
from typing import Iterable, List, Optional

from .models import LyricLine, NO_TIME
from .timecode import SENTINEL_TAG, TIME_TAG_RE, match_seconds, encode

_LEADING_TAG_RE = re.compile(r"^\s*" + TIME_TAG_RE.pattern)


def parse(lrc_text: Optional[str]) -> List[LyricLine]:
    """
    Parse LRC text into lyric lines.

    - a line starting with a time tag becomes a timed line, even with no text
      (instrumental markers)
    - any other non-blank line becomes an untimed line (time = -1)
    - blank lines are dropped

    Timed lines come first in ascending time, untimed lines follow in their
    original order. Never raises: unrecognized tags are kept as plain text.
    """
    out: List[LyricLine] = []
    if not lrc_text:
        return out

    for raw_line in lrc_text.split("\n"):
        m = _LEADING_TAG_RE.match(raw_line)
        if m:
            text = raw_line[m.end():].strip()
            out.append(LyricLine(text=text, time=match_seconds(m)))
            continue

        text = raw_line.strip()
        if text:
            out.append(LyricLine(text=text, time=NO_TIME))

    # sorted() is stable: equal times and untimed lines keep input order
    return sorted(out, key=lambda line: (not line.has_time, line.time if line.has_time else 0.0))


def serialize(lines: Iterable[LyricLine]) -> str:
    """
    Build LRC text, one `[mm:ss.xx] text` per line, joined by "\\n" with no
    trailing newline. Blank lines are skipped; untimed lines get [00:00.00].
    """
    out: List[str] = []
    for line in lines:
        if not line.text.strip():
            continue
        tag = encode(line.time) if line.has_time else SENTINEL_TAG
        out.append(f"{tag} {line.text}")
    return "\n".join(out)
