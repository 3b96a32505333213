import struct

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lmsbridge.pcm import (
    MAX_VAL32,
    apply_cross,
    apply_gain,
    lpcm_pack,
    scale_and_pack,
    to_mono,
)

INT32 = st.integers(min_value=-(2**31), max_value=2**31 - 1)
STEREO = st.lists(st.tuples(INT32, INT32), min_size=1, max_size=20).map(
    lambda frames: [value for frame in frames for value in frame]
)
DOUBLE_STEREO = st.lists(st.tuples(INT32, INT32, INT32, INT32), min_size=1, max_size=10).map(
    lambda groups: [value for group in groups for value in group]
)


def test_to_mono_keeps_left():
    assert to_mono([1, 2, 3, 4]) == [1, 3]


def test_to_mono_odd_length():
    with pytest.raises(ValueError):
        to_mono([1, 2, 3])


@given(STEREO)
def test_scale_32_little_round_trip(samples):
    packed = scale_and_pack(samples, 2, 32, big_endian=False)
    assert list(struct.unpack(f"<{len(samples)}i", packed)) == samples


@given(STEREO)
def test_scale_16_big_is_reversed_little(samples):
    little = scale_and_pack(samples, 2, 16, big_endian=False)
    big = scale_and_pack(samples, 2, 16, big_endian=True)
    assert len(little) == 2 * len(samples)
    for i in range(0, len(little), 2):
        assert big[i:i + 2] == little[i:i + 2][::-1]
    assert list(struct.unpack(f"<{len(samples)}h", little)) == [s >> 16 for s in samples]


@given(STEREO)
def test_scale_24_big_endian(samples):
    packed = scale_and_pack(samples, 2, 24, big_endian=True)
    decoded = [int.from_bytes(packed[i:i + 3], "big", signed=True) for i in range(0, len(packed), 3)]
    assert decoded == [s >> 8 for s in samples]


@given(STEREO)
def test_scale_8_signedness(samples):
    little = scale_and_pack(samples, 2, 8, big_endian=False)
    big = scale_and_pack(samples, 2, 8, big_endian=True)
    assert [a ^ 0x80 for a in little] == list(big)


@given(STEREO)
def test_scale_mono_uses_left(samples):
    packed = scale_and_pack(samples, 1, 32, big_endian=True)
    assert list(struct.unpack(f">{len(samples) // 2}i", packed)) == samples[::2]


def test_scale_bad_size():
    with pytest.raises(ValueError):
        scale_and_pack([0, 0], 2, 12)


def test_scale_bad_channels():
    with pytest.raises(ValueError):
        scale_and_pack([0, 0], 3, 16)


@given(DOUBLE_STEREO)
def test_lpcm_stereo_layout(samples):
    packed = lpcm_pack(samples, 2)
    assert len(packed) == 3 * len(samples)
    for g in range(len(samples) // 4):
        chunk = packed[12 * g:12 * g + 12]
        for k in range(4):
            value = (chunk[2 * k] << 16) | (chunk[2 * k + 1] << 8) | chunk[8 + k]
            assert value == (samples[4 * g + k] >> 8) & 0xFFFFFF


@given(DOUBLE_STEREO)
def test_lpcm_mono_length(samples):
    packed = lpcm_pack(samples, 1)
    assert len(packed) == 6 * (len(samples) // 4)
    assert packed[0:2] == ((samples[0] >> 16) & 0xFFFF).to_bytes(2, "big")


def test_lpcm_needs_frame_pairs():
    with pytest.raises(ValueError):
        lpcm_pack([1, 2], 2)


@given(STEREO)
def test_gain_unity_unchanged(samples):
    assert apply_gain(samples, 65536, 0, 0) == samples
    assert apply_gain(samples, 65536, 65536, 0) == samples


@given(STEREO)
def test_gain_unity_shift(samples):
    assert apply_gain(samples, 65536, 0, 16) == [s >> 16 for s in samples]


@given(STEREO)
def test_gain_zero_fade_silences(samples):
    assert apply_gain(samples, 0, 0, 0) == [0] * len(samples)


def test_gain_clamps():
    result = apply_gain([2**31 - 1, -(2**31)], 65536, 2 * 65536, 0)
    assert result[0] == MAX_VAL32 >> 16
    assert result[1] == -MAX_VAL32 >> 16


def test_gain_bad_shift():
    with pytest.raises(ValueError):
        apply_gain([0, 0], 32768, 0, 4)


@given(STEREO, STEREO)
def test_cross_endpoints(samples, cross):
    size = min(len(samples), len(cross))
    samples, cross = samples[:size], cross[:size]
    assert apply_cross(samples, cross, 0, 0, 0) == samples
    assert apply_cross(samples, cross, 65536, 0, 0) == cross


def test_cross_too_short():
    with pytest.raises(ValueError):
        apply_cross([1, 2, 3, 4], [1, 2], 100, 0, 0)