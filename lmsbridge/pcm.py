"""Sample-level processing of interleaved 32-bit PCM audio.

Decoded audio is kept as interleaved stereo frames of signed 32-bit,
left-aligned samples.  The functions here apply gain and fades, and pack
those samples into the byte layouts sent to players.
"""

from __future__ import annotations

from typing import List, Sequence

UNITY_GAIN = 65536
MAX_VAL32 = 0x7FFFFFFFFFFF

_SHIFTS = (0, 8, 16, 24)
_SAMPLE_SIZES = (8, 16, 24, 32)


def _s32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _clamp(value: int) -> int:
    if value > MAX_VAL32:
        return MAX_VAL32
    if value < -MAX_VAL32:
        return -MAX_VAL32
    return value


def _check_stereo(samples: Sequence[int]) -> None:
    if len(samples) % 2:
        raise ValueError("interleaved stereo samples must come in pairs")


def _check_channels(channels: int) -> None:
    if channels not in (1, 2):
        raise ValueError(f"unsupported number of channels: {channels}")


def _check_shift(shift: int) -> None:
    if shift not in _SHIFTS:
        raise ValueError(f"unsupported shift: {shift}")


def lpcm_pack(samples: Sequence[int], channels: int, big_endian: bool = True) -> bytes:
    """Pack pairs of stereo frames into the L24 LPCM layout.

    Each group of two frames gives, in stereo, the top and middle bytes of
    L0, R0, L1, R1 followed by their four bottom bytes (12 bytes).  In mono
    the first two samples of the group are taken, giving their top and
    middle bytes and then their bottom bytes (6 bytes).  With
    ``big_endian`` false the bytes of each sample are read in reverse order.
    """
    _check_channels(channels)
    if len(samples) % 4:
        raise ValueError("L24 packing needs an even number of stereo frames")

    def parts(sample: int) -> bytes:
        raw = (sample & 0xFFFFFFFF).to_bytes(4, "big")
        return raw if big_endian else raw[::-1]

    out = bytearray()
    for start in range(0, len(samples), 4):
        group = samples[start:start + 4] if channels == 2 else samples[start:start + 2]
        split = [parts(sample) for sample in group]
        for raw in split:
            out += raw[0:2]
        out += bytes(raw[2] for raw in split)
    return bytes(out)


def scale_and_pack(
    samples: Sequence[int], channels: int, sample_size: int, big_endian: bool = False
) -> bytes:
    """Truncate stereo frames to ``sample_size`` bits and serialise them.

    Little-endian output (``big_endian`` false) uses unsigned 8-bit samples
    as in WAV; big-endian output uses signed 8-bit samples as in AIFF.  In
    mono only the left channel is kept.
    """
    _check_channels(channels)
    _check_stereo(samples)
    if sample_size not in _SAMPLE_SIZES:
        raise ValueError(f"unsupported sample size: {sample_size}")

    source = samples if channels == 2 else samples[::2]
    order = "big" if big_endian else "little"
    out = bytearray()

    for sample in source:
        value = sample & 0xFFFFFFFF
        if sample_size == 8:
            top = value >> 24
            out.append(top if big_endian else top ^ 0x80)
        elif sample_size == 16:
            out += (value >> 16).to_bytes(2, order)
        elif sample_size == 24:
            out += (value >> 8).to_bytes(3, order)
        else:
            out += value.to_bytes(4, order)
    return bytes(out)


def apply_gain(samples: Sequence[int], fade: int, gain: int, shift: int = 0) -> List[int]:
    """Scale samples by a replay gain and a fade gain, then shift them right.

    Gains are 16.16 fixed point; a ``gain`` of 0 means that only ``fade``
    applies.  ``shift`` reduces the sample width by that many bits.
    """
    _check_shift(shift)
    total = ((gain * fade) >> 16) & 0xFFFFFFFF if gain else fade

    if total == UNITY_GAIN:
        if not shift:
            return list(samples)
        return [sample >> shift for sample in samples]

    return [_s32(_clamp(sample * total) >> (16 + shift)) for sample in samples]


def apply_cross(
    samples: Sequence[int],
    cross: Sequence[int],
    fade: int,
    gain_in: int,
    gain_out: int,
    shift: int = 0,
) -> List[int]:
    """Mix the ending track (``samples``) with the starting one (``cross``).

    ``fade`` (16.16 fixed point) is the weight of ``cross``; a zero
    ``gain_in`` or ``gain_out`` means unity gain for that track.
    """
    if len(cross) < len(samples):
        raise ValueError("not enough samples to cross-fade with")
    if not gain_in:
        gain_in = UNITY_GAIN
    if not gain_out:
        gain_out = UNITY_GAIN

    mixed = []
    for sample, other in zip(samples, cross):
        value = ((sample * gain_in) >> 16) * (UNITY_GAIN - fade) + ((other * gain_out) >> 16) * fade
        mixed.append(_s32(_clamp(value) >> (16 + shift)))
    return mixed


def to_mono(samples: Sequence[int]) -> List[int]:
    """Keep the left channel of interleaved stereo frames."""
    _check_stereo(samples)
    return list(samples[::2])