# tests/test_sync_engine.py

import pytest

from lyricstudio.core.errors import EmptyLyrics, InvalidTransition, LineNotFound, NoMoreLines
from lyricstudio.core.models import Completed, Idle, NO_TIME, Session, Syncing
from lyricstudio.core.sync_engine import (
    AppendLine,
    CancelSync,
    EditText,
    FocusLine,
    ImportText,
    Mark,
    ReachEndOfAudio,
    StartFromIndex,
    StartFull,
    active_line_index,
    reduce,
)
from lyricstudio.core.transport import Pause, Play, Seek, apply_commands


def _times(session):
    return [line.time for line in session.lines]


# ------------------ StartFull ------------------

def test_start_full_clears_times_and_plays_from_zero(make_session):
    session = make_session([1.0, 2.0, NO_TIME])
    nxt, commands = reduce(session, StartFull())

    assert nxt.status == Syncing(0)
    assert nxt.cursor == 0
    assert _times(nxt) == [NO_TIME] * 3
    assert commands == [Seek(0.0), Play()]
    # ids survive
    assert [l.id for l in nxt.lines] == [l.id for l in session.lines]


def test_start_full_from_completed(make_session):
    nxt, _ = reduce(make_session([1.0], status=Completed()), StartFull())
    assert nxt.status == Syncing(0)


def test_start_full_rejects_empty_session():
    with pytest.raises(EmptyLyrics):
        reduce(Session(), StartFull())


def test_start_full_rejected_while_syncing(make_session):
    with pytest.raises(InvalidTransition):
        reduce(make_session([NO_TIME], status=Syncing(0)), StartFull())


# ------------------ StartFromIndex ------------------

def test_start_from_index_clears_only_the_suffix(make_session):
    session = make_session([1.0, 2.0, 3.0, 4.0, 5.0])
    nxt, commands = reduce(session, StartFromIndex(2))

    assert nxt.cursor == 3
    assert _times(nxt) == [1.0, 2.0, 3.0, NO_TIME, NO_TIME]
    assert commands == [Seek(3.0), Play()]


def test_start_from_index_without_anchor_time_does_not_seek(make_session):
    session = make_session([1.0, NO_TIME, NO_TIME])
    _, commands = reduce(session, StartFromIndex(1))
    assert commands == [Play()]


def test_start_from_last_index_fails_without_mutation(make_session):
    session = make_session([1.0, 2.0, 3.0, 4.0, 5.0])
    with pytest.raises(NoMoreLines):
        reduce(session, StartFromIndex(4))
    assert _times(session) == [1.0, 2.0, 3.0, 4.0, 5.0]
    assert session.status == Idle()


def test_start_from_index_allowed_while_syncing(make_session):
    session = make_session([1.0, 2.0, NO_TIME], status=Syncing(2))
    nxt, _ = reduce(session, StartFromIndex(0))
    assert nxt.status == Syncing(1)
    assert _times(nxt) == [1.0, NO_TIME, NO_TIME]


@pytest.mark.parametrize("index", [-1, 3])
def test_start_from_index_out_of_range(make_session, index):
    with pytest.raises(InvalidTransition):
        reduce(make_session([1.0, 2.0, 3.0]), StartFromIndex(index))


def test_start_from_index_rejects_empty_session():
    with pytest.raises(EmptyLyrics):
        reduce(Session(), StartFromIndex(0))


# ------------------ Mark ------------------

def test_three_marks_complete_the_session(make_session):
    session = make_session([NO_TIME] * 3, status=Syncing(0))
    all_commands = []
    for position in (2.0, 5.5, 9.1):
        session, commands = reduce(session, Mark(position))
        all_commands.extend(commands)

    assert _times(session) == [2.0, 5.5, 9.1]
    assert session.status == Completed()
    assert all_commands == [Pause()]


def test_mark_advances_cursor(make_session):
    session = make_session([NO_TIME] * 3, status=Syncing(0))
    nxt, commands = reduce(session, Mark(1.25))
    assert nxt.status == Syncing(1)
    assert commands == []
    assert _times(nxt) == [1.25, NO_TIME, NO_TIME]


def test_mark_past_the_end_is_a_no_op(make_session):
    session = make_session([1.0, 2.0], status=Syncing(2))
    nxt, commands = reduce(session, Mark(9.0))
    assert nxt is session
    assert commands == []


@pytest.mark.parametrize("status", [Idle(), Completed()])
def test_mark_rejected_outside_syncing(make_session, status):
    with pytest.raises(InvalidTransition):
        reduce(make_session([NO_TIME], status=status), Mark(1.0))


def test_single_pass_marks_are_non_decreasing(make_session):
    session, _ = reduce(make_session([7.0] * 6), StartFull())
    position = 0.0
    while session.is_syncing:
        position += 0.73
        session, _ = reduce(session, Mark(position))
    times = _times(session)
    assert times == sorted(times)


# ------------------ CancelSync / FocusLine ------------------

def test_cancel_keeps_marked_times(make_session):
    session = make_session([1.0, NO_TIME], status=Syncing(1))
    nxt, commands = reduce(session, CancelSync())
    assert nxt.status == Idle()
    assert nxt.cursor is None
    assert _times(nxt) == [1.0, NO_TIME]
    assert commands == []


def test_cancel_from_completed_returns_to_editor(make_session):
    nxt, _ = reduce(make_session([1.0], status=Completed()), CancelSync())
    assert nxt.status == Idle()


def test_cancel_rejected_when_idle(make_session):
    with pytest.raises(InvalidTransition):
        reduce(make_session([1.0]), CancelSync())


def test_focus_line_redirects_next_mark(make_session):
    session = make_session([1.0, 2.0, 3.0], status=Syncing(2))
    session, commands = reduce(session, FocusLine(0))
    assert session.cursor == 0
    assert commands == []
    assert _times(session) == [1.0, 2.0, 3.0]

    session, _ = reduce(session, Mark(0.5))
    assert _times(session) == [0.5, 2.0, 3.0]
    assert session.cursor == 1


def test_focus_line_rejected_outside_syncing(make_session):
    with pytest.raises(InvalidTransition):
        reduce(make_session([1.0, 2.0]), FocusLine(1))


def test_focus_line_rejects_bad_index(make_session):
    with pytest.raises(InvalidTransition):
        reduce(make_session([1.0, 2.0], status=Syncing(0)), FocusLine(2))


# ------------------ EditText / AppendLine / ImportText ------------------

def test_edit_text_changes_only_text(make_session):
    session = make_session([1.0, 2.0], status=Syncing(1))
    target = session.lines[0]
    nxt, _ = reduce(session, EditText(target.id, "new words"))

    assert nxt.lines[0].text == "new words"
    assert nxt.lines[0].time == 1.0
    assert nxt.lines[0].id == target.id
    assert nxt.status == Syncing(1)


def test_edit_text_unknown_id(make_session):
    with pytest.raises(LineNotFound):
        reduce(make_session([1.0]), EditText("nope", "x"))


def test_append_line_goes_to_the_physical_end(make_session):
    session = make_session([5.0, 1.0])
    nxt, _ = reduce(session, AppendLine())

    assert len(nxt.lines) == 3
    assert nxt.lines[-1].text == ""
    assert nxt.lines[-1].time == NO_TIME
    # no resorting of existing lines
    assert _times(nxt)[:2] == [5.0, 1.0]
    assert nxt.lines[-1].id not in {l.id for l in session.lines}


def test_import_text_replaces_lines_and_resets_to_idle(make_session):
    session = make_session([1.0, 2.0], status=Syncing(1))
    nxt, _ = reduce(session, ImportText("  first \n\n second\r\n   \nthird"))

    assert [l.text for l in nxt.lines] == ["first", "second", "third"]
    assert _times(nxt) == [NO_TIME] * 3
    assert nxt.status == Idle()
    assert len({l.id for l in nxt.lines}) == 3


def test_import_text_keeps_unicode_separators_inside_lines(make_session):
    nxt, _ = reduce(make_session([1.0]), ImportText("a\u2029b\x0bc\r\nd"))
    assert [l.text for l in nxt.lines] == ["a\u2029b\x0bc", "d"]


@pytest.mark.parametrize("raw", ["", "   \n \n"])
def test_import_text_rejects_empty_input(make_session, raw):
    session = make_session([1.0])
    with pytest.raises(EmptyLyrics):
        reduce(session, ImportText(raw))


# ------------------ ReachEndOfAudio ------------------

def test_end_of_audio_completes_sync(make_session):
    session = make_session([1.0, NO_TIME, NO_TIME], status=Syncing(1))
    nxt, commands = reduce(session, ReachEndOfAudio())
    assert nxt.status == Completed()
    assert _times(nxt) == [1.0, NO_TIME, NO_TIME]
    assert commands == []


@pytest.mark.parametrize("status", [Idle(), Completed()])
def test_end_of_audio_ignored_outside_syncing(make_session, status):
    session = make_session([1.0], status=status)
    nxt, _ = reduce(session, ReachEndOfAudio())
    assert nxt is session


def test_unknown_event():
    with pytest.raises(TypeError):
        reduce(Session(), object())


# ------------------ helpers ------------------

def test_active_line_index(make_session):
    lines = make_session([1.0, 3.0, NO_TIME, 5.0]).lines
    assert active_line_index(lines, 0.5) == -1
    assert active_line_index(lines, 1.0) == 0
    assert active_line_index(lines, 4.0) == 1
    assert active_line_index(lines, 60.0) == 3


def test_commands_drive_the_transport(make_session, transport):
    session = make_session([1.0, 2.0, 3.0])
    session, commands = reduce(session, StartFromIndex(0))
    apply_commands(transport, commands)
    assert transport.calls == [("seek", 1.0), ("play",)]

    transport.calls.clear()
    for _ in range(2):
        transport.set_position(transport.position() + 1.5)
        session, commands = reduce(session, Mark(transport.position()))
        apply_commands(transport, commands)

    assert _times(session) == [1.0, 2.5, 4.0]
    assert session.status == Completed()
    assert transport.calls == [("pause",)]


def test_apply_commands_rejects_unknown(transport):
    with pytest.raises(TypeError):
        apply_commands(transport, ["rewind"])
