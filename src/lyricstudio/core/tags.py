# core/tags.py
from __future__ import annotations

import base64
import logging
import os
import shutil
import tempfile
from typing import Optional

from mutagen import File as MutagenFile
from mutagen import MutagenError
from mutagen.flac import FLAC, Picture
from mutagen.id3 import APIC, ID3, ID3NoHeaderError, TALB, TCON, TDRC, TIT2, TPE1, USLT
from mutagen.mp4 import MP4, MP4Cover
from mutagen.oggopus import OggOpus
from mutagen.oggvorbis import OggVorbis

from .errors import ExportError, MetadataReadError
from .models import TrackTags

logger = logging.getLogger(__name__)

EXPORT_PREFIX = "[Studio] "
LYRICS_DESC = "Lyrics"
LYRICS_LANG = "eng"
COVER_DESC = "Cover"
COVER_TYPE = 3  # front cover
DEFAULT_COVER_MIME = "image/jpeg"

UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_ALBUM = "Unknown Album"

# Vorbis comment keys (FLAC/Ogg/Opus)
VORBIS_LYRICS_KEYS = ("LYRICS", "UNSYNCEDLYRICS")
VORBIS_PICTURE_KEY = "metadata_block_picture"

MP4_KEYS = {
    "title": "\xa9nam",
    "artist": "\xa9ART",
    "album": "\xa9alb",
    "year": "\xa9day",
    "genre": "\xa9gen",
}
MP4_LYRICS_KEY = "\xa9lyr"
MP4_COVER_KEY = "covr"

SUPPORTED_EXTS = {".mp3", ".flac", ".ogg", ".oga", ".opus", ".m4a", ".mp4"}


def _norm(s) -> str:
    if s is None:
        return ""
    return str(s).strip()


def _first(values) -> str:
    """First entry of a mutagen value list (or a bare value)."""
    if not values:
        return ""
    if isinstance(values, (list, tuple)):
        return _norm(values[0])
    return _norm(values)


def _with_fallbacks(path: str, tags: TrackTags) -> TrackTags:
    return TrackTags(
        title=tags.title or os.path.splitext(os.path.basename(path))[0],
        artist=tags.artist or UNKNOWN_ARTIST,
        album=tags.album or UNKNOWN_ALBUM,
        year=tags.year,
        genre=tags.genre,
        cover_data=tags.cover_data,
        cover_mime=tags.cover_mime,
        lyrics=tags.lyrics or None,
    )


# ----------------------------
# Read
# ----------------------------

def read_metadata(path: str) -> TrackTags:
    """
    Read the tag record of an audio file.
      - .mp3            -> ID3 text frames, APIC, USLT
      - .flac           -> Vorbis comments + FLAC pictures
      - .ogg/.oga/.opus -> Vorbis comments + METADATA_BLOCK_PICTURE
      - .m4a/.mp4       -> Apple atoms (©nam, covr, ©lyr, ...)
    Anything else goes through mutagen's format sniffing (easy tags only).

    Raises MetadataReadError if the file cannot be read as an audio container.
    """
    ext = os.path.splitext(path)[1].lower()
    try:
        if ext == ".mp3":
            tags = _read_id3(path)
        elif ext == ".flac":
            tags = _read_flac(path)
        elif ext in {".ogg", ".oga"}:
            tags = _read_vorbis(OggVorbis(path))
        elif ext == ".opus":
            tags = _read_vorbis(OggOpus(path))
        elif ext in {".m4a", ".mp4"}:
            tags = _read_mp4(path)
        else:
            tags = _read_generic(path)
    except (MutagenError, OSError) as e:
        logger.warning("Failed to read tags from %s: %s", path, e)
        raise MetadataReadError(f"Cannot read audio tags from {os.path.basename(path)}: {e}") from e

    logger.info("Read tags from %s (cover=%s, lyrics=%s)", path, tags.has_cover, bool(tags.lyrics))
    return _with_fallbacks(path, tags)


def _read_id3(path: str) -> TrackTags:
    if not os.path.isfile(path):
        raise MetadataReadError(f"No such file: {path}")
    try:
        tags = ID3(path)
    except ID3NoHeaderError:
        tags = ID3()  # untagged file

    def text(frame_id: str) -> str:
        frame = tags.get(frame_id)
        return _first(frame.text) if frame is not None else ""

    cover_data = cover_mime = None
    pictures = tags.getall("APIC")
    if pictures:
        front = next((p for p in pictures if p.type == COVER_TYPE), pictures[0])
        cover_data, cover_mime = bytes(front.data), front.mime or DEFAULT_COVER_MIME

    lyrics = None
    uslt_frames = tags.getall("USLT")
    if uslt_frames:
        lyrics = _norm(uslt_frames[0].text) or None

    return TrackTags(
        title=text("TIT2"),
        artist=text("TPE1"),
        album=text("TALB"),
        year=text("TDRC"),
        genre=text("TCON"),
        cover_data=cover_data,
        cover_mime=cover_mime,
        lyrics=lyrics,
    )


def _vorbis_text(audio, key: str) -> str:
    return _first(audio.get(key)) if audio.tags is not None else ""


def _vorbis_lyrics(audio) -> Optional[str]:
    for key in VORBIS_LYRICS_KEYS:
        value = _vorbis_text(audio, key)
        if value:
            return value
    return None


def _read_flac(path: str) -> TrackTags:
    audio = FLAC(path)
    cover_data = cover_mime = None
    if audio.pictures:
        pic = audio.pictures[0]
        cover_data, cover_mime = bytes(pic.data), pic.mime or DEFAULT_COVER_MIME

    return TrackTags(
        title=_vorbis_text(audio, "title"),
        artist=_vorbis_text(audio, "artist"),
        album=_vorbis_text(audio, "album"),
        year=_vorbis_text(audio, "date"),
        genre=_vorbis_text(audio, "genre"),
        cover_data=cover_data,
        cover_mime=cover_mime,
        lyrics=_vorbis_lyrics(audio),
    )


def _read_vorbis(audio) -> TrackTags:
    cover_data = cover_mime = None
    raw = _vorbis_text(audio, VORBIS_PICTURE_KEY)
    if raw:
        try:
            pic = Picture(base64.b64decode(raw))
            cover_data, cover_mime = bytes(pic.data), pic.mime or DEFAULT_COVER_MIME
        except (ValueError, MutagenError) as e:
            logger.warning("Ignoring unreadable embedded picture: %s", e)

    return TrackTags(
        title=_vorbis_text(audio, "title"),
        artist=_vorbis_text(audio, "artist"),
        album=_vorbis_text(audio, "album"),
        year=_vorbis_text(audio, "date"),
        genre=_vorbis_text(audio, "genre"),
        cover_data=cover_data,
        cover_mime=cover_mime,
        lyrics=_vorbis_lyrics(audio),
    )


def _read_mp4(path: str) -> TrackTags:
    audio = MP4(path)
    tags = audio.tags or {}

    cover_data = cover_mime = None
    covers = tags.get(MP4_COVER_KEY)
    if covers:
        cover = covers[0]
        cover_data = bytes(cover)
        cover_mime = "image/png" if cover.imageformat == MP4Cover.FORMAT_PNG else "image/jpeg"

    return TrackTags(
        title=_first(tags.get(MP4_KEYS["title"])),
        artist=_first(tags.get(MP4_KEYS["artist"])),
        album=_first(tags.get(MP4_KEYS["album"])),
        year=_first(tags.get(MP4_KEYS["year"])),
        genre=_first(tags.get(MP4_KEYS["genre"])),
        cover_data=cover_data,
        cover_mime=cover_mime,
        lyrics=_first(tags.get(MP4_LYRICS_KEY)) or None,
    )


def _read_generic(path: str) -> TrackTags:
    audio = MutagenFile(path, easy=True)
    if audio is None:
        raise MetadataReadError(f"Unsupported audio format: {os.path.basename(path)}")
    easy = audio.tags or {}
    return TrackTags(
        title=_first(easy.get("title")),
        artist=_first(easy.get("artist")),
        album=_first(easy.get("album")),
        year=_first(easy.get("date")),
        genre=_first(easy.get("genre")),
        lyrics=_first(easy.get("lyrics")) or None,
    )


# ----------------------------
# Write
# ----------------------------

def export_file_name(src_path: str, prefix: str = EXPORT_PREFIX) -> str:
    return f"{prefix}{os.path.basename(src_path)}"


def export_with_lyrics(
    src_path: str,
    tags: TrackTags,
    lyrics: str,
    dest_dir: Optional[str] = None,
    prefix: str = EXPORT_PREFIX,
    lang: str = LYRICS_LANG,
    desc: str = LYRICS_DESC,
) -> str:
    """
    Write a tagged copy of src_path named "<prefix><file name>" and return its path.

    The copy is built in a temporary file next to the destination and only
    moved into place once every tag is written, so a failure leaves nothing
    behind. Raises ExportError.
    """
    ext = os.path.splitext(src_path)[1].lower()
    if ext not in SUPPORTED_EXTS:
        raise ExportError(f"Cannot write tags to {ext or 'extensionless'} files")

    dest_dir = dest_dir or os.path.dirname(os.path.abspath(src_path))
    dest_path = os.path.join(dest_dir, export_file_name(src_path, prefix))

    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=".lyricstudio-", suffix=ext, dir=dest_dir)
        os.close(fd)
        shutil.copyfile(src_path, tmp_path)

        EMBEDDER_MAP = {
            ".mp3": _write_id3,
            ".flac": _write_flac,
            ".ogg": _write_ogg_vorbis,
            ".oga": _write_ogg_vorbis,
            ".opus": _write_ogg_opus,
            ".m4a": _write_mp4,
            ".mp4": _write_mp4,
        }
        EMBEDDER_MAP[ext](tmp_path, tags, lyrics, lang, desc)

        os.replace(tmp_path, dest_path)
        tmp_path = None
    except Exception as e:
        logger.exception("Export of %s failed", src_path)
        raise ExportError(f"Export failed: {e}") from e
    finally:
        if tmp_path and os.path.exists(tmp_path):
            os.remove(tmp_path)

    logger.info("Exported %s", dest_path)
    return dest_path


def _write_id3(path: str, tags: TrackTags, lyrics: str, lang: str, desc: str) -> None:
    try:
        id3 = ID3(path)
    except ID3NoHeaderError:
        id3 = ID3()

    # encoding=3 is UTF-8
    for frame_cls, value in ((TIT2, tags.title), (TALB, tags.album), (TDRC, tags.year), (TCON, tags.genre)):
        if value:
            id3.setall(frame_cls.__name__, [frame_cls(encoding=3, text=value)])
    if tags.artist:
        id3.setall("TPE1", [TPE1(encoding=3, text=[tags.artist])])

    if tags.cover_data:
        id3.delall("APIC")
        id3.add(
            APIC(
                encoding=3,
                mime=tags.cover_mime or DEFAULT_COVER_MIME,
                type=COVER_TYPE,
                desc=COVER_DESC,
                data=tags.cover_data,
            )
        )

    # one lyrics frame only: old USLT frames would shadow the new one in most players
    id3.delall("USLT")
    id3.add(USLT(encoding=3, lang=lang, desc=desc, text=lyrics))

    id3.save(path)


def _apply_vorbis_comments(audio, tags: TrackTags, lyrics: str) -> None:
    for key, value in (
        ("title", tags.title),
        ("artist", tags.artist),
        ("album", tags.album),
        ("date", tags.year),
        ("genre", tags.genre),
    ):
        if value:
            audio[key] = [value]

    for key in VORBIS_LYRICS_KEYS:
        if key in audio:
            del audio[key]
    audio[VORBIS_LYRICS_KEYS[0]] = [lyrics]


def _cover_picture(tags: TrackTags) -> Picture:
    pic = Picture()
    pic.type = COVER_TYPE
    pic.desc = COVER_DESC
    pic.mime = tags.cover_mime or DEFAULT_COVER_MIME
    pic.data = tags.cover_data
    return pic


def _write_flac(path: str, tags: TrackTags, lyrics: str, lang: str, desc: str) -> None:
    audio = FLAC(path)
    if audio.tags is None:
        audio.add_tags()
    _apply_vorbis_comments(audio, tags, lyrics)
    if tags.cover_data:
        audio.clear_pictures()
        audio.add_picture(_cover_picture(tags))
    audio.save()


def _write_ogg(audio, tags: TrackTags, lyrics: str) -> None:
    _apply_vorbis_comments(audio, tags, lyrics)
    if tags.cover_data:
        encoded = base64.b64encode(_cover_picture(tags).write()).decode("ascii")
        audio[VORBIS_PICTURE_KEY] = [encoded]
    audio.save()


def _write_ogg_vorbis(path: str, tags: TrackTags, lyrics: str, lang: str, desc: str) -> None:
    _write_ogg(OggVorbis(path), tags, lyrics)


def _write_ogg_opus(path: str, tags: TrackTags, lyrics: str, lang: str, desc: str) -> None:
    _write_ogg(OggOpus(path), tags, lyrics)


def _write_mp4(path: str, tags: TrackTags, lyrics: str, lang: str, desc: str) -> None:
    audio = MP4(path)
    if audio.tags is None:
        audio.add_tags()

    for field_name, key in MP4_KEYS.items():
        value = getattr(tags, field_name)
        if value:
            audio[key] = [value]

    if tags.cover_data:
        fmt = MP4Cover.FORMAT_PNG if tags.cover_mime == "image/png" else MP4Cover.FORMAT_JPEG
        audio[MP4_COVER_KEY] = [MP4Cover(tags.cover_data, imageformat=fmt)]

    audio[MP4_LYRICS_KEY] = [lyrics]
    audio.save()
