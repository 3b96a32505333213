"""Container headers, stream lengths and filler frames for HTTP audio output."""

from __future__ import annotations

import struct
from typing import Optional

# Length announced when the real one is not known; it must fit the 32-bit
# size fields of WAV and AIFF headers.
HTTP_LENGTH_LARGE = 0x7FFFFFFF

WAVE_HEADER_SIZE = 44
AIFF_HEADER_SIZE = 54
MP3_SILENCE_FRAME_SIZE = 209

# One MPEG-1 layer III frame, 64 kbit/s, 44.1 kHz, padded, holding silence.
_MP3_SILENCE = (
    bytes(
        [
            0xFF, 0xFB, 0x52, 0xC4, 0x5D, 0x83, 0xC0, 0x00, 0x01, 0xA4, 0x00,
            0x00, 0x00, 0x20, 0x00, 0x00, 0x34, 0x80, 0x00, 0x00, 0x04,
        ]
    )
    + b"\x55" * 188
)


def _check_format(channels: int, sample_size: int, sample_rate: int) -> None:
    if channels < 1:
        raise ValueError(f"invalid number of channels: {channels}")
    if sample_size <= 0 or sample_size % 8:
        raise ValueError(f"invalid sample size: {sample_size}")
    if sample_rate <= 0:
        raise ValueError(f"invalid sample rate: {sample_rate}")


def _cap(length: int) -> int:
    if length < 0:
        raise ValueError(f"invalid length: {length}")
    return min(length, HTTP_LENGTH_LARGE)


def wave_header(channels: int, sample_size: int, sample_rate: int, length: int) -> bytes:
    """Build the 44-byte RIFF/WAVE header for ``length`` bytes of PCM data.

    ``length`` is capped to :data:`HTTP_LENGTH_LARGE`.
    """
    _check_format(channels, sample_size, sample_rate)
    data_size = _cap(length)
    bytes_per_sample = sample_size // 8
    return struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,
        1,
        channels,
        sample_rate,
        sample_rate * channels * bytes_per_sample,
        channels * bytes_per_sample,
        sample_size,
        b"data",
        data_size,
    )


def aiff_header(channels: int, sample_size: int, sample_rate: int, length: int) -> bytes:
    """Build the 54-byte FORM/AIFF header for ``length`` bytes of PCM data.

    The sample rate is written as an 80-bit float with a fixed exponent of
    0x400E, so only its lower 16 bits are kept; this is exact for rates
    between 32768 and 65535 Hz.  ``length`` is capped to
    :data:`HTTP_LENGTH_LARGE`.
    """
    _check_format(channels, sample_size, sample_rate)
    data_size = _cap(length)
    frames = data_size // (channels * (sample_size // 8))
    return struct.pack(
        ">4sI4s4sIHIHH8s4sIII",
        b"FORM",
        ((data_size + 8 + 8) + (18 + 8) + 4) & 0xFFFFFFFF,
        b"AIFF",
        b"COMM",
        18,
        channels & 0xFFFF,
        frames,
        sample_size & 0xFFFF,
        0x400E,
        (sample_rate & 0xFFFF).to_bytes(2, "big") + bytes(6),
        b"SSND",
        (data_size + 8) & 0xFFFFFFFF,
        0,
        0,
    )


def pcm_stream_length(
    duration: int,
    sample_rate: int,
    channels: int,
    sample_size: int,
    stream_length: Optional[int] = None,
) -> int:
    """Number of PCM bytes to announce for a stream.

    With a known ``duration`` (ms) the exact size is computed.  Otherwise
    ``stream_length`` is used, or :data:`HTTP_LENGTH_LARGE` when it is
    missing or not positive, rounded down to whole seconds of audio.
    """
    _check_format(channels, sample_size, sample_rate)
    if duration < 0:
        raise ValueError(f"invalid duration: {duration}")
    if duration:
        return (duration * sample_rate // 1000) * channels * (sample_size // 8)
    length = HTTP_LENGTH_LARGE if not stream_length or stream_length <= 0 else stream_length
    per_second = sample_rate * channels * sample_size // 8
    return (length // per_second) * per_second


def estimate_length(bitrate: int, duration: int) -> Optional[int]:
    """Estimate a compressed stream's size with a 20% margin on ``bitrate``.

    ``bitrate`` is in kbit/s and ``duration`` in ms.  Without a bitrate the
    large default length is returned; without a duration there is no length
    to announce and None is returned.
    """
    if not duration:
        return None
    if not bitrate:
        return HTTP_LENGTH_LARGE
    return int(bitrate * 1.20 * duration / 8)


def mp3_silence(count: int = 1) -> bytes:
    """Return ``count`` consecutive MP3 frames of silence."""
    if count < 0:
        raise ValueError(f"invalid frame count: {count}")
    return _MP3_SILENCE * count