"""Fade-in, fade-out and cross-fade over a circular buffer of PCM frames.

Positions are byte offsets within an output ring buffer of ``buffer_size``
bytes holding interleaved stereo frames of 32-bit samples
(:data:`BYTES_PER_FRAME` bytes each).  A :class:`Fader` records where a fade
starts and ends when a track starts or ends (:meth:`Fader.check`), then
tells, as the buffer is read, how much gain to apply and how many frames can
be processed before the fade changes (:meth:`Fader.gain_for`).
"""

from __future__ import annotations

import dataclasses
import enum
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .pcm import UNITY_GAIN, apply_cross, apply_gain

log = logging.getLogger(__name__)

BYTES_PER_FRAME = 8
_BYTES_PER_SAMPLE = 4


class FadeMode(enum.IntEnum):
    """Kind of fade the player asked for."""

    NONE = 0
    CROSSFADE = 1
    IN = 2
    OUT = 3
    INOUT = 4


class FadeDirection(enum.Enum):
    """Whether the volume goes up, down, or mixes two tracks."""

    UP = enum.auto()
    DOWN = enum.auto()
    CROSS = enum.auto()


class FadeState(enum.Enum):
    """Progress of the current fade."""

    INACTIVE = enum.auto()
    DUE = enum.auto()
    ACTIVE = enum.auto()


@dataclass(frozen=True)
class FadeStep:
    """What to do with the next frames read from the buffer.

    ``frames`` is how many frames may be processed now, ``gain`` the fade
    gain (16.16 fixed point) to apply to them and ``cross`` the buffer
    position of the frames to mix in during a cross-fade.  ``skip`` is a
    number of bytes to drop from the buffer before processing, and
    ``completed`` tells that a cross-fade has just ended, so the next
    track's replay gain now applies.
    """

    frames: int
    gain: int = UNITY_GAIN
    cross: Optional[int] = None
    skip: int = 0
    completed: bool = False


class Fader:
    """Track and apply fades over a ring buffer of ``buffer_size`` bytes."""

    def __init__(self, mode: FadeMode, seconds: int, buffer_size: int) -> None:
        if seconds < 0:
            raise ValueError(f"invalid fade duration: {seconds}")
        if buffer_size <= 0 or buffer_size % BYTES_PER_FRAME:
            raise ValueError(f"buffer size must be a positive multiple of {BYTES_PER_FRAME}")
        self.mode = FadeMode(mode)
        self.seconds = seconds
        self.size = buffer_size
        # bytes kept free at the end of the buffer during a cross-fade
        self.reserve = 0
        self.sample_rate = 0
        self.state = FadeState.INACTIVE
        self.direction = FadeDirection.UP
        self.start = 0
        self.end = 0
        self.pending: Optional[int] = None

    def _wrap(self, position: int) -> int:
        return position % self.size

    def _distance(self, frm: int, to: int) -> int:
        if to >= frm:
            return (to - frm) // BYTES_PER_FRAME
        return (to + self.size - frm) // BYTES_PER_FRAME

    def check(self, start: bool, writep: int, used: int, sample_rate: int) -> None:
        """Set up a fade at a track start (``start``) or end.

        ``writep`` is the write position, ``used`` the number of bytes in
        the buffer and ``sample_rate`` the rate of the audio being output.
        """
        if not 0 <= writep < self.size:
            raise ValueError(f"write position out of buffer: {writep}")
        self.sample_rate = sample_rate
        mode = self.mode
        log.info("fade mode: %s duration: %d %s", mode.name, self.seconds,
                 "track-start" if start else "track-end")

        nbytes = sample_rate * BYTES_PER_FRAME * self.seconds
        if mode is FadeMode.INOUT:
            nbytes = ((nbytes // 2) // BYTES_PER_FRAME) * BYTES_PER_FRAME

        if start and (mode is FadeMode.IN or (mode is FadeMode.INOUT and used == 0)):
            nbytes = min(nbytes, self.size - BYTES_PER_FRAME)
            log.info("fade IN: %d frames", nbytes // BYTES_PER_FRAME)
            self.state = FadeState.DUE
            self.direction = FadeDirection.UP
            self.start = writep
            self.end = self._wrap(writep + nbytes)

        if not start and mode in (FadeMode.OUT, FadeMode.INOUT):
            if self.state is FadeState.INACTIVE:
                nbytes = min(used, nbytes)
                log.info("fade %s: %d frames", "IN-OUT" if mode is FadeMode.INOUT else "OUT",
                         nbytes // BYTES_PER_FRAME)
                self.state = FadeState.DUE
                self.direction = FadeDirection.DOWN
                self.start = self._wrap(writep - nbytes)
                self.end = writep
            else:
                self.pending = writep
                log.info("fade IN active -> delay OUT")

        if start and mode is FadeMode.CROSSFADE and used:
            nbytes = min(nbytes, used)
            nbytes = min(nbytes, self.size - self.reserve - BYTES_PER_FRAME)
            nbytes = min(nbytes, (9 * self.size) // 10)
            nbytes = max((nbytes // BYTES_PER_FRAME) * BYTES_PER_FRAME, 0)
            log.info("CROSSFADE: %d frames", nbytes // BYTES_PER_FRAME)
            self.state = FadeState.DUE
            self.direction = FadeDirection.CROSS
            self.start = self._wrap(writep - nbytes)
            self.end = writep

    def gain_for(self, frames: int, readp: int, used: int) -> FadeStep:
        """Work out the fade to apply to up to ``frames`` frames at ``readp``."""
        if not 0 <= readp < self.size:
            raise ValueError(f"read position out of buffer: {readp}")
        gain = UNITY_GAIN
        cross: Optional[int] = None
        skip = 0
        completed = False

        if self.state is FadeState.DUE:
            if self.start == readp:
                log.info("fade start reached")
                self.state = FadeState.ACTIVE
            elif self.start > readp:
                frames = min(frames, (self.start - readp) // BYTES_PER_FRAME)

        if self.state is FadeState.ACTIVE:
            cur = self._distance(self.start, readp)
            dur = self._distance(self.start, self.end)

            if cur >= dur:
                if self.mode is FadeMode.INOUT and self.direction is FadeDirection.DOWN:
                    log.info("fade down complete, start fade up")
                    self.direction = FadeDirection.UP
                    self.start = readp
                    self.end = self._wrap(readp + dur * BYTES_PER_FRAME)
                    cur = 0
                elif self.mode is FadeMode.CROSSFADE:
                    log.info("crossfade complete")
                    if used >= dur * BYTES_PER_FRAME:
                        skip = dur * BYTES_PER_FRAME
                    else:
                        log.warning("unable to skip crossfaded start")
                    self.state = FadeState.INACTIVE
                    completed = True
                else:
                    log.info("fade complete")
                    self.state = FadeState.INACTIVE
                    if self.pending is not None:
                        nbytes = (self.sample_rate * BYTES_PER_FRAME * self.seconds) // 2
                        nbytes = min((nbytes // BYTES_PER_FRAME) * BYTES_PER_FRAME, used)
                        log.info("fade pending OUT: %d frames", nbytes // BYTES_PER_FRAME)
                        self.direction = FadeDirection.DOWN
                        self.start = self._wrap(self.pending - nbytes)
                        self.end = self.pending

            if self.state is not FadeState.INACTIVE:
                if self.end > readp:
                    frames = min(frames, (self.end - readp) // BYTES_PER_FRAME)
                if self.direction in (FadeDirection.UP, FadeDirection.DOWN):
                    if self.direction is FadeDirection.DOWN:
                        cur = dur - cur
                    gain = (cur << 16) // dur if dur else UNITY_GAIN
                elif used // BYTES_PER_FRAME > dur:
                    frames = min(frames, used // BYTES_PER_FRAME - dur)
                    gain = (cur << 16) // dur if dur else UNITY_GAIN
                    cross = self._wrap(self.end + cur * BYTES_PER_FRAME)
                else:
                    log.info("need more frames for cross-fade %d", dur - used // BYTES_PER_FRAME)
                    frames = 0
            elif self.pending is not None:
                self.state = FadeState.DUE
                self.pending = None

        return FadeStep(frames=max(frames, 0), gain=gain, cross=cross, skip=skip, completed=completed)

    def process(
        self,
        samples: Sequence[int],
        readp: int,
        used: int,
        replay_gain: int,
        next_replay_gain: int,
        shift: int = 0,
    ) -> Tuple[List[int], FadeStep]:
        """Apply fade and replay gain to the buffered samples starting at ``readp``.

        ``samples`` holds the buffer content from ``readp`` on, in order; for
        a cross-fade it must reach the frames of the next track.  Returns the
        processed samples (possibly fewer than given) and the step used: the
        caller then consumes ``step.skip`` bytes plus the returned frames.
        """
        if len(samples) % 2:
            raise ValueError("interleaved stereo samples must come in pairs")
        step = self.gain_for(len(samples) // 2, readp, used)
        offset = step.skip // _BYTES_PER_SAMPLE
        chunk = list(samples[offset:offset + step.frames * 2])
        step = dataclasses.replace(step, frames=len(chunk) // 2)
        if not chunk:
            log.info("not enough frames yet for cross-fade")
            return [], step

        gain = next_replay_gain if step.completed else replay_gain
        if step.cross is not None:
            index = self._wrap(step.cross - readp) // _BYTES_PER_SAMPLE
            other = samples[index:index + len(chunk)]
            return apply_cross(chunk, other, step.gain, replay_gain, next_replay_gain, shift), step
        return apply_gain(chunk, step.gain, gain, shift), step