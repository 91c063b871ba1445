# tests/test_tags.py

import os

import pytest
from mutagen.id3 import APIC, ID3, TIT2, TPE1, USLT

from lyricstudio.core.errors import ExportError, MetadataReadError
from lyricstudio.core.models import TrackTags
from lyricstudio.core.tags import export_file_name, export_with_lyrics, read_metadata

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def _tag_mp3(path, **frames):
    tags = ID3()
    for frame in frames.values():
        tags.add(frame)
    tags.save(str(path))


# ------------------ read ------------------

def test_read_untagged_mp3_uses_fallbacks(mp3_path):
    tags = read_metadata(str(mp3_path))
    assert tags.title == "song"
    assert tags.artist == "Unknown Artist"
    assert tags.album == "Unknown Album"
    assert tags.lyrics is None
    assert not tags.has_cover


def test_read_tagged_mp3(mp3_path):
    _tag_mp3(
        mp3_path,
        title=TIT2(encoding=3, text=["Night Drive"]),
        artist=TPE1(encoding=3, text=["The Band"]),
        lyrics=USLT(encoding=3, lang="eng", desc="", text="[00:01.00] hi"),
        cover=APIC(encoding=3, mime="image/png", type=3, desc="", data=PNG_BYTES),
    )
    tags = read_metadata(str(mp3_path))
    assert tags.title == "Night Drive"
    assert tags.artist == "The Band"
    assert tags.lyrics == "[00:01.00] hi"
    assert tags.cover_data == PNG_BYTES
    assert tags.cover_mime == "image/png"


def test_read_missing_file(tmp_path):
    with pytest.raises(MetadataReadError):
        read_metadata(str(tmp_path / "missing.mp3"))


def test_read_garbage_file(tmp_path):
    path = tmp_path / "broken.flac"
    path.write_bytes(b"this is not audio at all")
    with pytest.raises(MetadataReadError):
        read_metadata(str(path))


def test_read_unknown_format(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    with pytest.raises(MetadataReadError):
        read_metadata(str(path))


# ------------------ export ------------------

def test_export_file_name():
    assert export_file_name("/music/song.mp3") == "[Studio] song.mp3"
    assert export_file_name("song.flac", prefix="x_") == "x_song.flac"


def test_export_writes_tagged_copy(mp3_path):
    original = mp3_path.read_bytes()
    tags = TrackTags(title="Night Drive", artist="The Band", album="Roads", cover_data=PNG_BYTES, cover_mime="image/png")

    dest = export_with_lyrics(str(mp3_path), tags, "[00:01.00] Hello\n[00:03.50] World")

    assert os.path.basename(dest) == "[Studio] song.mp3"
    assert os.path.dirname(dest) == str(mp3_path.parent)
    # source untouched
    assert mp3_path.read_bytes() == original

    id3 = ID3(dest)
    assert id3["TIT2"].text == ["Night Drive"]
    assert id3["TPE1"].text == ["The Band"]
    assert id3["TALB"].text == ["Roads"]

    uslt = id3.getall("USLT")
    assert len(uslt) == 1
    assert uslt[0].lang == "eng"
    assert uslt[0].desc == "Lyrics"
    assert uslt[0].text == "[00:01.00] Hello\n[00:03.50] World"

    (apic,) = id3.getall("APIC")
    assert apic.type == 3
    assert apic.mime == "image/png"
    assert apic.data == PNG_BYTES


def test_export_replaces_existing_lyrics_frames(mp3_path):
    _tag_mp3(
        mp3_path,
        a=USLT(encoding=3, lang="eng", desc="old", text="old words"),
        b=USLT(encoding=3, lang="deu", desc="", text="alte Worte"),
    )
    dest = export_with_lyrics(str(mp3_path), read_metadata(str(mp3_path)), "[00:02.00] new")
    uslt = ID3(dest).getall("USLT")
    assert [f.text for f in uslt] == ["[00:02.00] new"]


def test_export_round_trips_through_read(mp3_path):
    dest = export_with_lyrics(str(mp3_path), read_metadata(str(mp3_path)), "[00:02.00] again")
    tags = read_metadata(dest)
    assert tags.lyrics == "[00:02.00] again"
    assert tags.title == "song"


def test_export_custom_prefix_and_dir(mp3_path, tmp_path):
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    dest = export_with_lyrics(str(mp3_path), TrackTags(), "x", dest_dir=str(out_dir), prefix="synced-", lang="deu", desc="Text")
    assert dest == str(out_dir / "synced-song.mp3")
    (uslt,) = ID3(dest).getall("USLT")
    assert (uslt.lang, uslt.desc) == ("deu", "Text")


def test_export_missing_source_leaves_nothing_behind(tmp_path):
    with pytest.raises(ExportError):
        export_with_lyrics(str(tmp_path / "gone.mp3"), TrackTags(), "x")
    assert list(tmp_path.iterdir()) == []


def test_export_bad_container_leaves_nothing_behind(tmp_path):
    src = tmp_path / "broken.flac"
    src.write_bytes(b"not a flac stream")
    with pytest.raises(ExportError):
        export_with_lyrics(str(src), TrackTags(), "x")
    assert [p.name for p in tmp_path.iterdir()] == ["broken.flac"]


def test_export_unsupported_extension(tmp_path):
    src = tmp_path / "notes.txt"
    src.write_text("hello")
    with pytest.raises(ExportError):
        export_with_lyrics(str(src), TrackTags(), "x")
    assert [p.name for p in tmp_path.iterdir()] == ["notes.txt"]
