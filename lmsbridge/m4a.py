"""Repackaging of AAC audio from an MP4 container into an ADTS stream.

Only what is needed to find the audio configuration and the sample sizes is
read from the MP4 boxes; the media data must follow the ``moov`` box since
the stream cannot be seeked.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import List, Optional

log = logging.getLogger(__name__)

ADTS_HEADER_SIZE = 7

# boxes we descend into, or whose leading fields we skip to reach children
_CONSUME = {
    b"moov": 8,
    b"trak": 8,
    b"mdia": 8,
    b"minf": 8,
    b"stbl": 8,
    b"udta": 8,
    b"ilst": 8,
    b"stsd": 16,
    b"mp4a": 36,
    b"meta": 12,
}
_PARSED = (b"esds", b"stsz")
_EXTENDED_LENGTH = (0x80, 0x81, 0xFE)


class Mp4Error(ValueError):
    """The MP4 stream cannot be converted."""


@dataclass(frozen=True)
class AudioConfig:
    """AAC parameters taken from the AudioSpecificConfig of the track."""

    audio_object_type: int
    freq_index: int
    channel_config: int


def adts_header(audio_object_type: int, freq_index: int, channel_config: int, frame_size: int) -> bytes:
    """Build the 7-byte ADTS header (no CRC) for a frame of ``frame_size`` bytes."""
    total = frame_size + ADTS_HEADER_SIZE
    return bytes(
        [
            0xFF,
            0xF1,
            ((((audio_object_type & 0x03) - 1) << 6) + (freq_index << 2) + (channel_config >> 2)) & 0xFF,
            (((channel_config & 0x03) << 6) + (total >> 11)) & 0xFF,
            ((total & 0x7FF) >> 3) & 0xFF,
            (((total & 0x07) << 5) + 0x1F) & 0xFF,
            0xFC,
        ]
    )


class _Cursor:
    def __init__(self, data: bytes, pos: int) -> None:
        self.data = data
        self.pos = pos

    def peek(self) -> int:
        if self.pos >= len(self.data):
            raise Mp4Error("esds box is truncated")
        return self.data[self.pos]

    def take(self) -> int:
        value = self.peek()
        self.pos += 1
        return value

    def u32(self) -> int:
        if self.pos + 4 > len(self.data):
            raise Mp4Error("esds box is truncated")
        return int.from_bytes(self.data[self.pos:self.pos + 4], "big")

    def skip_extension(self) -> None:
        if self.peek() in _EXTENDED_LENGTH:
            self.pos += 3


class M4aToAdts:
    """Convert an MP4/M4A byte stream holding AAC into ADTS frames.

    Feed bytes as they arrive; each call returns the ADTS data that became
    available.  Call :meth:`finish` at the end of the stream.
    """

    def __init__(self) -> None:
        self.config: Optional[AudioConfig] = None
        self._buffer = bytearray()
        self._skip = 0
        self._header_done = False
        self._trak = 0
        self._play = 0
        self._frame_size = 0
        self._frames: Optional[List[int]] = None
        self._index = 0
        self._finished = False

    @property
    def header_done(self) -> bool:
        """True once the media data has been reached."""
        return self._header_done

    def feed(self, data: bytes) -> bytes:
        """Take more input and return the ADTS output now available."""
        if self._finished:
            raise RuntimeError("stream already finished")
        self._buffer += data
        return self._process()

    def finish(self) -> bytes:
        """End the stream; incomplete trailing data is dropped."""
        if self._finished:
            raise RuntimeError("stream already finished")
        self._finished = True
        if not self._header_done:
            raise Mp4Error("stream ended before media data was found")
        if self._buffer:
            log.debug("dropping %d trailing bytes", len(self._buffer))
            self._buffer.clear()
        return b""

    def _process(self) -> bytes:
        out = bytearray()
        if self._skip:
            count = min(self._skip, len(self._buffer))
            del self._buffer[:count]
            self._skip -= count
            if self._skip:
                return bytes(out)
        if not self._header_done and not self._parse_header():
            return bytes(out)
        self._emit_frames(out)
        return bytes(out)

    def _parse_header(self) -> bool:
        buf = self._buffer
        while len(buf) >= 8:
            length = int.from_bytes(buf[:4], "big")
            kind = bytes(buf[4:8])

            if kind == b"moov":
                self._trak = 0
                self._play = 0
            if kind == b"trak":
                self._trak += 1

            complete = len(buf) >= length
            if kind == b"esds" and complete:
                self.config = self._parse_esds(bytes(buf[:length]))
                log.debug("playable aac track: %d", self._trak)
                self._play = self._trak
            if kind == b"stsz" and complete:
                self._parse_stsz(bytes(buf[:length]))

            if kind == b"mdat":
                del buf[:8]
                if not self._play:
                    raise Mp4Error(f"media data of {length} bytes but no playable track found")
                if not self._frame_size and self._frames is None:
                    raise Mp4Error("no sample size table before media data")
                self._header_done = True
                return True

            consume = _CONSUME.get(kind, length)
            if consume < 8:
                raise Mp4Error(f"invalid size {length} for box {kind!r}")
            if len(buf) >= consume:
                log.debug("box %r len: %d consume: %d", kind, length, consume)
                del buf[:consume]
            elif kind not in _PARSED:
                self._skip = consume - len(buf)
                buf.clear()
                return False
            else:
                return False
        return False

    @staticmethod
    def _parse_esds(box: bytes) -> AudioConfig:
        cursor = _Cursor(box, 12)
        if cursor.take() != 0x03:
            raise Mp4Error("esds: missing ES descriptor")
        cursor.skip_extension()
        cursor.pos += 4
        if cursor.take() != 0x04:
            raise Mp4Error("esds: missing decoder config descriptor")
        cursor.skip_extension()
        cursor.pos += 14
        if cursor.take() != 0x05:
            raise Mp4Error("esds: missing decoder specific info")
        cursor.skip_extension()
        cursor.pos += 1
        audio_config = cursor.u32()
        return AudioConfig(
            audio_object_type=audio_config >> 27,
            freq_index=(audio_config >> 23) & 0x0F,
            channel_config=(audio_config >> 19) & 0x0F,
        )

    def _parse_stsz(self, box: bytes) -> None:
        if len(box) < 20:
            raise Mp4Error("stsz box is truncated")
        self._frame_size = int.from_bytes(box[12:16], "big")
        if self._frame_size:
            return
        entries = int.from_bytes(box[16:20], "big")
        end = 20 + entries * 4
        if len(box) < end:
            raise Mp4Error("stsz table is truncated")
        self._frames = list(struct.unpack(f">{entries}I", box[20:end]))
        self._index = 0
        log.info("frame table of %d entries", entries)

    def _emit_frames(self, out: bytearray) -> None:
        buf = self._buffer
        config = self.config
        assert config is not None
        while True:
            if self._frame_size:
                size = self._frame_size
            elif self._frames is not None and self._index < len(self._frames):
                size = self._frames[self._index]
            else:
                if buf:
                    log.debug("sample table exhausted, dropping %d bytes", len(buf))
                    buf.clear()
                return
            if len(buf) < size:
                return
            self._index += 1
            out += adts_header(config.audio_object_type, config.freq_index, config.channel_config, size)
            out += buf[:size]
            del buf[:size]