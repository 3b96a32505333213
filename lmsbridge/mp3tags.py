"""MP3 stream helpers: ID3v2 tag length, LAME gapless info, sample scaling."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, TypeVar

log = logging.getLogger(__name__)

MAD_DELAY = 529
SAMPLES_PER_FRAME = 1152
MAD_F_FRACBITS = 28
MAD_F_ONE = 1 << MAD_F_FRACBITS

T = TypeVar("T")


def id3v2_size(data: bytes) -> int:
    """Return the full length of an ID3v2 tag at the start of ``data``, or 0."""
    if len(data) <= 10 or data[:3] != b"ID3":
        return 0
    size_bytes = data[6:10]
    if any(byte >= 0x80 for byte in size_bytes):
        return 0
    size = 10 + (size_bytes[0] << 21) + (size_bytes[1] << 14) + (size_bytes[2] << 7) + size_bytes[3]
    if data[5] & 0x10:
        size += 10
    log.debug("id3.2 tag len: %d", size)
    return size


@dataclass(frozen=True)
class LameGapless:
    """Gapless playback parameters from a LAME Xing/Info frame."""

    skip: int
    samples: int
    delay: int
    padding: int


def parse_lame_header(data: bytes) -> Optional[LameGapless]:
    """Read encoder delay and padding from the first MP3 frame, if LAME wrote them."""
    if len(data) <= 180 or data[0] != 0xFF or (data[1] & 0xF0) != 0xF0:
        return None

    if data[36:40] in (b"Xing", b"Info"):
        ptr = 36 + 7
    elif data[21:25] in (b"Xing", b"Info"):
        ptr = 21 + 7
    else:
        ptr = 0

    flags = data[ptr]
    frame_count = 0
    if flags & 0x01:
        frame_count = int.from_bytes(data[ptr + 1:ptr + 5], "big")
        ptr += 4
    if flags & 0x02:
        ptr += 4
    if flags & 0x04:
        ptr += 100
    if flags & 0x08:
        ptr += 4

    if data[ptr + 1:ptr + 5] != b"LAME":
        return None

    ptr += 22
    if ptr + 3 > len(data):
        return None

    delay = ((data[ptr] << 4) | (data[ptr + 1] >> 4)) + MAD_DELAY
    padding = ((data[ptr + 1] & 0x0F) << 8) | data[ptr + 2]
    padding = padding - MAD_DELAY if padding > MAD_DELAY else 0

    gapless = LameGapless(
        skip=delay + SAMPLES_PER_FRAME,
        samples=max(frame_count * SAMPLES_PER_FRAME - delay - padding, 0),
        delay=delay,
        padding=padding,
    )
    log.info(
        "gapless: skip: %d samples: %d delay: %d padding: %d",
        gapless.skip, gapless.samples, delay, padding,
    )
    return gapless


def scale_sample(sample: int) -> int:
    """Convert a fixed-point decoder sample to a left-aligned 32-bit sample (24 bits used)."""
    sample += 1 << (MAD_F_FRACBITS - 24)
    if sample >= MAD_F_ONE:
        sample = MAD_F_ONE - 1
    elif sample < -MAD_F_ONE:
        sample = -MAD_F_ONE
    return (sample >> (MAD_F_FRACBITS + 1 - 24)) << 8


class GaplessTrimmer:
    """Drop encoder delay at the start and padding at the end of decoded audio."""

    def __init__(self, gapless: Optional[LameGapless] = None) -> None:
        if gapless is None:
            self.skip = MAD_DELAY
            self.samples = 0
            self.padding = 0
        else:
            self.skip = gapless.skip
            self.samples = gapless.samples
            self.padding = gapless.padding

    def trim(self, frames: Sequence[T], last_frame: bool = False) -> Sequence[T]:
        """Return the part of one decoded block of ``frames`` to keep.

        ``last_frame`` tells that this block is the last one of the stream.
        """
        count = len(frames)
        start = 0

        if self.skip:
            skip = min(self.skip, count)
            log.debug("gapless: skipping %d frames at start", skip)
            start = skip
            count -= skip
            self.skip -= skip

        if self.samples:
            if self.samples < count:
                log.debug("gapless: trimming %d frames from end", count - self.samples)
                count = self.samples
            self.samples -= count
            if self.samples > 0 and last_frame:
                log.debug("gapless: early end - trimming padding from end")
                count = count - self.padding if count >= self.padding else 0
                self.samples = 0

        return frames[start:start + count]