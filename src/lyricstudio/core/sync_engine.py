# core/sync_engine.py
"""
Beat-marking state machine.

`reduce(session, event)` is a pure function returning the next session plus
the transport commands the caller should run. Rejected events raise a
SyncError and, since sessions are immutable, leave the caller's state as is.

    Idle/Completed --StartFull--> Syncing(0)
    any            --StartFromIndex(i)--> Syncing(i + 1)
    Syncing        --Mark--> Syncing(cursor + 1) | Completed (+ pause)
    Syncing        --ReachEndOfAudio--> Completed
    Syncing/Completed --CancelSync--> Idle
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, NamedTuple, Sequence, Union

from .errors import EmptyLyrics, InvalidTransition, LineNotFound, NoMoreLines
from .models import Completed, Idle, LyricLine, NO_TIME, Session, Syncing
from .transport import Command, Pause, Play, Seek

logger = logging.getLogger(__name__)


# --- events ---

@dataclass(frozen=True)
class StartFull:
    pass


@dataclass(frozen=True)
class StartFromIndex:
    index: int


@dataclass(frozen=True)
class Mark:
    position: float  # transport position (seconds) when the mark key was hit


@dataclass(frozen=True)
class CancelSync:
    pass


@dataclass(frozen=True)
class FocusLine:
    index: int


@dataclass(frozen=True)
class EditText:
    line_id: str
    text: str


@dataclass(frozen=True)
class AppendLine:
    text: str = ""


@dataclass(frozen=True)
class ImportText:
    raw: str


@dataclass(frozen=True)
class ReachEndOfAudio:
    pass


Event = Union[
    StartFull, StartFromIndex, Mark, CancelSync, FocusLine,
    EditText, AppendLine, ImportText, ReachEndOfAudio,
]


class Transition(NamedTuple):
    session: Session
    commands: List[Command]


def reduce(session: Session, event: Event) -> Transition:
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unknown sync event: {event!r}")
    result = handler(session, event)
    if result.session.status != session.status:
        logger.debug("%s: %s -> %s", type(event).__name__, session.status, result.session.status)
    return result


# --- handlers ---

def _start_full(session: Session, event: StartFull) -> Transition:
    if isinstance(session.status, Syncing):
        raise InvalidTransition(session.status, event)
    if not session.lines:
        raise EmptyLyrics()

    lines = tuple(line.cleared() for line in session.lines)
    return Transition(Session(lines, Syncing(0)), [Seek(0.0), Play()])


def _start_from_index(session: Session, event: StartFromIndex) -> Transition:
    count = len(session.lines)
    if not count:
        raise EmptyLyrics()
    if not 0 <= event.index < count:
        raise InvalidTransition(session.status, event)

    nxt = event.index + 1
    if nxt >= count:
        raise NoMoreLines(event.index)

    lines = tuple(line if i < nxt else line.cleared() for i, line in enumerate(session.lines))

    commands: List[Command] = []
    anchor = session.lines[event.index]
    if anchor.has_time:
        commands.append(Seek(anchor.time))
    commands.append(Play())
    return Transition(Session(lines, Syncing(nxt)), commands)


def _mark(session: Session, event: Mark) -> Transition:
    status = session.status
    if not isinstance(status, Syncing):
        raise InvalidTransition(status, event)

    count = len(session.lines)
    if status.cursor >= count:
        return Transition(session, [])

    lines = list(session.lines)
    lines[status.cursor] = lines[status.cursor].with_time(event.position)

    nxt = status.cursor + 1
    if nxt >= count:
        return Transition(Session(tuple(lines), Completed()), [Pause()])
    return Transition(Session(tuple(lines), Syncing(nxt)), [])


def _cancel(session: Session, event: CancelSync) -> Transition:
    if isinstance(session.status, Idle):
        raise InvalidTransition(session.status, event)
    return Transition(Session(session.lines, Idle()), [])


def _focus(session: Session, event: FocusLine) -> Transition:
    if not isinstance(session.status, Syncing):
        raise InvalidTransition(session.status, event)
    if not 0 <= event.index < len(session.lines):
        raise InvalidTransition(session.status, event)
    return Transition(Session(session.lines, Syncing(event.index)), [])


def _edit_text(session: Session, event: EditText) -> Transition:
    idx = session.index_of(event.line_id)
    if idx < 0:
        raise LineNotFound(event.line_id)

    lines = list(session.lines)
    lines[idx] = lines[idx].with_text(event.text)
    return Transition(Session(tuple(lines), session.status), [])


def _append(session: Session, event: AppendLine) -> Transition:
    # physical end, never resorted
    lines = session.lines + (LyricLine(text=event.text, time=NO_TIME),)
    return Transition(Session(lines, session.status), [])


def _import_text(session: Session, event: ImportText) -> Transition:
    texts = [s.strip() for s in (event.raw or "").split("\n")]
    texts = [t for t in texts if t]
    if not texts:
        raise EmptyLyrics("Nothing to import: the text is empty.")

    lines = tuple(LyricLine(text=t, time=NO_TIME) for t in texts)
    return Transition(Session(lines, Idle()), [])


def _end_of_audio(session: Session, event: ReachEndOfAudio) -> Transition:
    # the player reports end-of-media in every state; only a running sync cares
    if not isinstance(session.status, Syncing):
        return Transition(session, [])
    return Transition(Session(session.lines, Completed()), [])


_HANDLERS = {
    StartFull: _start_full,
    StartFromIndex: _start_from_index,
    Mark: _mark,
    CancelSync: _cancel,
    FocusLine: _focus,
    EditText: _edit_text,
    AppendLine: _append,
    ImportText: _import_text,
    ReachEndOfAudio: _end_of_audio,
}


def active_line_index(lines: Sequence[LyricLine], position: float) -> int:
    """Index of the last timed line whose time is <= position, or -1."""
    idx = -1
    for i, line in enumerate(lines):
        if line.has_time and line.time <= position:
            idx = i
    return idx
