"""Mime type selection and DLNA protocol information."""

from __future__ import annotations

import enum
from typing import Iterable, Iterator, Optional, Sequence, Tuple

MAX_MIMETYPES = 256

_MP3 = ("audio/mp3", "audio/mpeg", "audio/mpeg3")
_WMA = ("audio/wma", "audio/x-wma")
_OGG = ("audio/ogg", "audio/x-ogg", "application/ogg")
_MP4 = ("audio/mp4", "audio/m4a")
_AAC = ("audio/aac", "audio/x-aac")
_FLAC = ("audio/flac", "audio/x-flac")
_WAV = ("audio/wav", "audio/x-wav", "audio/wave")
_AIFF = ("audio/aiff", "audio/x-aiff", "audio/aif", "audio/x-aif")

_PREFIXES = ("audio/x-", "audio/", "application/")


class DlnaOperation(enum.IntEnum):
    """DLNA.ORG_OP values."""

    NONE = 0x00
    RANGE = 0x01
    TIMESEEK = 0x10


class DlnaFlag(enum.IntFlag):
    """DLNA.ORG_FLAGS bits (upper 32 bits of the field)."""

    SENDER_PACED = 1 << 31
    TIME_BASED_SEEK = 1 << 30
    BYTE_BASED_SEEK = 1 << 29
    PLAY_CONTAINER = 1 << 28
    S0_INCREASE = 1 << 27
    SN_INCREASE = 1 << 26
    RTSP_PAUSE = 1 << 25
    STREAMING_TRANSFER_MODE = 1 << 24
    INTERACTIVE_TRANSFER_MODE = 1 << 23
    BACKGROUND_TRANSFER_MODE = 1 << 22
    CONNECTION_STALL = 1 << 21
    DLNA_V15 = 1 << 20


def match_codec(mimetypes: Iterable[str], *args: str) -> bool:
    """Tell whether any of the needles appears in any of the mime types."""
    mimetypes = list(mimetypes)
    return any(needle in mimetype for needle in args for mimetype in mimetypes)


def _lookup(mimetypes: Sequence[str], details: Optional[str], *needles: str) -> Optional[str]:
    for needle in needles:
        lowered = needle.lower()
        for mimetype in mimetypes:
            if mimetype.startswith("*") or lowered in mimetype.lower():
                return needle if details is None else f"{needle};{details}"
    return None


def _formats(codecs: Optional[str]) -> Iterator[str]:
    """Yield the comma-separated formats, stopping at the first empty one."""
    while codecs is not None:
        head, sep, tail = codecs.partition(",")
        if not head:
            return
        yield head
        codecs = tail if sep else None


def _container_lookup(fmt: str, mimetypes: Sequence[str]) -> Optional[str]:
    if "wav" in fmt:
        return _lookup(mimetypes, None, *_WAV)
    if "aif" in fmt:
        return _lookup(mimetypes, None, *_AIFF)
    return None


def from_codec(codec: str, mimetypes: Sequence[str], option: Optional[str] = None) -> Optional[str]:
    """Pick the mime type for a codec among those a player accepts.

    ``option`` is the codec-specific parameter: the container for aac ('5'
    for mp4) and flac ('o' for ogg), the dsd flavour ('0' dsf, '1' dff),
    or the comma-separated format list for pcm.
    """
    mimetypes = list(mimetypes)
    if codec == "m":
        return _lookup(mimetypes, None, *_MP3)
    if codec == "w":
        return _lookup(mimetypes, None, *_WMA)
    if codec == "o":
        return _lookup(mimetypes, "codecs=vorbis", *_OGG)
    if codec == "u":
        return _lookup(mimetypes, "codecs=opus", *_OGG)
    if codec == "l":
        return _lookup(mimetypes, None, *_MP4)
    if codec == "a":
        if option == "5":
            return _lookup(mimetypes, None, *_MP4, *_AAC)
        return _lookup(mimetypes, None, *_AAC, *_MP4)
    if codec in ("F", "f"):
        if option == "o":
            return _lookup(mimetypes, "codecs=flac", *_OGG)
        return _lookup(mimetypes, None, *_FLAC)
    if codec == "d":
        if option == "0":
            return _lookup(mimetypes, None, "audio/dsf", "audio/x-dsf")
        if option == "1":
            return _lookup(mimetypes, None, "audio/dff", "audio/x-dff")
        return _lookup(mimetypes, None, "audio/dsd", "audio/x-dsd")
    if codec == "p":
        for fmt in _formats(option):
            mimetype = _container_lookup(fmt, mimetypes)
            if mimetype:
                return mimetype
        return None
    return None


def from_pcm(
    sample_size: int,
    truncable: bool,
    sample_rate: int,
    channels: int,
    mimetypes: Sequence[str],
    codecs: Optional[str],
) -> Tuple[Optional[str], int]:
    """Pick a mime type for uncompressed audio.

    Returns the mime type (or None) and the sample size to use, which may
    have been lowered from 24 to 16 bits when ``truncable`` allows it.
    """
    mimetypes = list(mimetypes)
    original = sample_size
    for fmt in _formats(codecs):
        while "raw" in fmt:
            audio = f"audio/L{sample_size}"
            rate = f"rate={sample_rate}"
            chans = f"channels={channels}"
            for mimetype in mimetypes:
                if mimetype.startswith("*") or (
                    audio in mimetype
                    and ("rate=" not in mimetype or rate in mimetype)
                    and ("channels=" not in mimetype or chans in mimetype)
                ):
                    return f"{audio};{rate};{chans}", sample_size
            if sample_size == 24 and truncable:
                sample_size = 16
            else:
                sample_size = original
                break
        mimetype = _container_lookup(fmt, mimetypes)
        if mimetype:
            return mimetype, sample_size
    return None, sample_size


def _subtype_start(mimetype: str) -> Optional[int]:
    for prefix in _PREFIXES:
        pos = mimetype.find(prefix)
        if pos >= 0:
            return pos + len(prefix)
    return None


def to_format(mimetype: str) -> str:
    """Map a mime type to its one-letter format code, '' when unknown."""
    start = _subtype_start(mimetype)
    if start is None:
        raise ValueError(f"not an audio mime type: {mimetype!r}")
    sub = mimetype[start:]
    if "wav" in sub:
        return "w"
    if "aif" in sub:
        return "i"
    if sub[:1] in ("L", "*"):
        return "p"
    if "flac" in sub or "flc" in sub:
        return "f"
    if "mp3" in sub or "mpeg" in sub:
        return "m"
    if "ogg" in sub:
        return "o"
    if "aac" in sub:
        return "a"
    if "mp4" in sub or "m4a" in sub:
        return "4"
    if "dsd" in sub or "dsf" in sub or "dff" in sub:
        return "d"
    return ""


def to_dlna(fmt: str, full_cache: bool, live: bool) -> str:
    """Build the DLNA fourth field of protocolInfo for a format."""
    if fmt == "m":
        profile = "DLNA.ORG_PN=MP3;"
    elif fmt in ("A", "a"):
        profile = "DLNA.ORG_PN=AAC_ADTS;"
    elif fmt == "p":
        profile = "DLNA.ORG_PN=LPCM;"
    else:
        profile = ""

    operation = DlnaOperation.RANGE if full_cache else DlnaOperation.NONE
    flags = (
        DlnaFlag.STREAMING_TRANSFER_MODE
        | DlnaFlag.BACKGROUND_TRANSFER_MODE
        | DlnaFlag.CONNECTION_STALL
        | DlnaFlag.DLNA_V15
        | DlnaFlag.SN_INCREASE
    )
    if live:
        flags |= DlnaFlag.S0_INCREASE
    if not full_cache:
        flags |= DlnaFlag.BYTE_BASED_SEEK

    return (
        f"{profile}DLNA.ORG_OP={int(operation):02d};DLNA.ORG_CI=0;"
        f"DLNA.ORG_FLAGS={int(flags):08x}{'0' * 24}"
    )


def to_ext(mimetype: Optional[str]) -> str:
    """Map a mime type to a file extension, 'nil' when unknown."""
    if not mimetype:
        return ""
    start = _subtype_start(mimetype)
    if start is None:
        return ""

    def at(needle: str) -> bool:
        return mimetype.find(needle) == start

    if at("wav"):
        return "wav"
    if at("L") or mimetype.startswith("*"):
        return "pcm"
    if at("flac"):
        return "flac"
    if at("flc"):
        return "flc"
    if at("mp3") or at("mpeg"):
        return "mp3"
    if at("ogg") and "codecs=opus" in mimetype:
        return "ops"
    if at("ogg"):
        return "ogg"
    if at("aif"):
        return "aif"
    if at("aac"):
        return "aac"
    if at("mp4"):
        return "mp4"
    if at("m4a"):
        return "m4a"
    if at("dsd"):
        return "dsd"
    if at("dsf"):
        return "dsf"
    if at("dff"):
        return "dff"
    return "nil"