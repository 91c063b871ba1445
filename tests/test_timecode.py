# tests/test_timecode.py

import pytest

from lyricstudio.core.timecode import decode, encode, format_clock


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0, "[00:00.00]"),
        (1.0, "[00:01.00]"),
        (3.5, "[00:03.50]"),
        (2.3, "[00:02.30]"),
        (65.123, "[01:05.12]"),
        (59.996, "[00:59.99]"),
        (59.9996, "[00:59.99]"),
        (119.9999, "[01:59.99]"),
        (5999.99, "[99:59.99]"),
    ],
)
def test_encode(seconds, expected):
    assert encode(seconds) == expected


def test_encode_truncates_instead_of_rounding():
    assert encode(12.349) == "[00:12.34]"
    assert encode(12.999) == "[00:12.99]"


def test_encode_wider_minutes():
    assert encode(6000.5) == "[100:00.50]"


def test_decode_centiseconds_and_milliseconds():
    assert decode("[00:03.50]") == pytest.approx(3.5)
    assert decode("[00:03.500]") == pytest.approx(3.5)
    assert decode("[01:02.05]") == pytest.approx(62.05)
    assert decode("[01:02.005]") == pytest.approx(62.005)


def test_decode_finds_tag_inside_text():
    assert decode("intro [00:10.00] hello") == pytest.approx(10.0)


@pytest.mark.parametrize("text", ["", None, "hello", "[ar: Someone]", "[00:01]", "[0:01.00]", "[00:01.5]"])
def test_decode_no_match(text):
    assert decode(text) is None


def test_decode_encode_within_one_centisecond():
    t = 0.0
    while t <= 5999.99:
        back = decode(encode(t))
        # truncation only; the 1e-9 bound is float noise in the running sum
        assert -1e-9 <= t - back < 0.01
        t += 7.777


def test_format_clock():
    assert format_clock(-1) == "--:--.--"
    assert format_clock(61.25) == "01:01.25"


def test_encode_exact_centiseconds_survive_float_error():
    for cs in range(0, 600000, 37):
        m, rest = divmod(cs, 6000)
        assert encode(cs / 100) == f"[{m:02d}:{rest // 100:02d}.{rest % 100:02d}]"
