# tests/conftest.py

import sys
from pathlib import Path

import pytest

# -------------------------------------------------------------------
# Make src/ importable without installing
# -------------------------------------------------------------------
SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


class FakeTransport:
    """Records transport calls; position is set by the test."""

    def __init__(self, position: float = 0.0, duration: float = 180.0):
        self._position = position
        self._duration = duration
        self.calls = []

    def position(self):
        return self._position

    def duration(self):
        return self._duration

    def set_position(self, seconds):
        self._position = seconds

    def seek(self, seconds):
        self.calls.append(("seek", seconds))
        self._position = seconds

    def play(self):
        self.calls.append(("play",))

    def pause(self):
        self.calls.append(("pause",))


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def make_session():
    """
    make_session([1.0, -1, 3.0], status=Idle()) -> Session with lines "l0", "l1", ...
    """
    from lyricstudio.core.models import Idle, LyricLine, Session

    def _make(times, status=None, texts=None):
        texts = texts or [f"l{i}" for i in range(len(times))]
        lines = tuple(LyricLine(text=t, time=float(tm)) for t, tm in zip(texts, times))
        return Session(lines=lines, status=status or Idle())

    return _make


@pytest.fixture
def mp3_path(tmp_path):
    """
    A file mutagen's ID3 code can tag: an MPEG frame header followed by
    padding. It is not playable audio, only a tag container.
    """
    path = tmp_path / "song.mp3"
    path.write_bytes(b"\xff\xfb\x90\x64" + b"\x00" * 4096)
    return path
