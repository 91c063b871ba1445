# core/transport.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Protocol, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Seek:
    seconds: float


@dataclass(frozen=True)
class Play:
    pass


@dataclass(frozen=True)
class Pause:
    pass


Command = Union[Seek, Play, Pause]


class Transport(Protocol):
    """What the sync shell needs from an audio player."""

    def position(self) -> float: ...
    def duration(self) -> float: ...
    def seek(self, seconds: float) -> None: ...
    def play(self) -> None: ...
    def pause(self) -> None: ...


def apply_commands(transport: Transport, commands: Iterable[Command]) -> None:
    """Run engine commands against the transport, in order. Completion is not awaited."""
    for cmd in commands:
        logger.debug("transport command: %s", cmd)
        if isinstance(cmd, Seek):
            transport.seek(cmd.seconds)
        elif isinstance(cmd, Play):
            transport.play()
        elif isinstance(cmd, Pause):
            transport.pause()
        else:
            raise TypeError(f"Unknown transport command: {cmd!r}")
