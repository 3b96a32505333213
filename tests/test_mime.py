import pytest

from lmsbridge import mime


def _flags(dlna):
    value = dlna.split("DLNA.ORG_FLAGS=")[1]
    assert len(value) == 32
    assert value[8:] == "0" * 24
    return int(value[:8], 16)


def test_match_codec():
    types = ["audio/flac", "audio/mpeg"]
    assert mime.match_codec(types, "audio/mp3", "audio/mpeg") is True
    assert mime.match_codec(types, "audio/aac") is False
    assert mime.match_codec([], "audio/flac") is False


def test_from_codec_mp3_prefers_first_needle_available():
    assert mime.from_codec("m", ["audio/mpeg"]) == "audio/mpeg"
    assert mime.from_codec("m", ["audio/MP3", "audio/mpeg"]) == "audio/mp3"


def test_from_codec_wildcard_takes_first_needle():
    assert mime.from_codec("m", ["*"]) == "audio/mp3"
    assert mime.from_codec("o", ["*"]) == "audio/ogg;codecs=vorbis"
    assert mime.from_codec("u", ["*"]) == "audio/ogg;codecs=opus"


def test_from_codec_aac_container_order():
    types = ["audio/mp4", "audio/aac"]
    assert mime.from_codec("a", types, "5") == "audio/mp4"
    assert mime.from_codec("a", types, "2") == "audio/aac"


def test_from_codec_flac_and_ogg_flac():
    assert mime.from_codec("f", ["audio/x-flac"]) == "audio/x-flac"
    assert mime.from_codec("F", ["audio/ogg"], "o") == "audio/ogg;codecs=flac"
    assert mime.from_codec("f", ["audio/mpeg"]) is None


def test_from_codec_dsd_variants():
    types = ["audio/dsf", "audio/dff", "audio/dsd"]
    assert mime.from_codec("d", types, "0") == "audio/dsf"
    assert mime.from_codec("d", types, "1") == "audio/dff"
    assert mime.from_codec("d", types, "2") == "audio/dsd"


def test_from_codec_unknown():
    assert mime.from_codec("z", ["*"]) is None


def test_from_pcm_raw_exact():
    types = ["audio/L16;rate=44100;channels=2"]
    result, size = mime.from_pcm(16, False, 44100, 2, types, "raw")
    assert result == "audio/L16;rate=44100;channels=2"
    assert size == 16


def test_from_pcm_truncates_24_to_16():
    types = ["audio/L16;rate=44100;channels=2"]
    result, size = mime.from_pcm(24, True, 44100, 2, types, "raw")
    assert result == "audio/L16;rate=44100;channels=2"
    assert size == 16


def test_from_pcm_without_truncation_keeps_size():
    types = ["audio/L16;rate=44100;channels=2"]
    result, size = mime.from_pcm(24, False, 44100, 2, types, "raw")
    assert result is None
    assert size == 24


def test_from_pcm_rate_mismatch_falls_back_to_wav():
    types = ["audio/L16;rate=48000", "audio/wav"]
    result, size = mime.from_pcm(16, True, 44100, 2, types, "raw,wav")
    assert result == "audio/wav"
    assert size == 16


def test_to_format():
    assert mime.to_format("audio/x-wav") == "w"
    assert mime.to_format("audio/aiff") == "i"
    assert mime.to_format("audio/L16;rate=44100") == "p"
    assert mime.to_format("audio/flac") == "f"
    assert mime.to_format("audio/mpeg") == "m"
    assert mime.to_format("application/ogg") == "o"
    assert mime.to_format("audio/aac") == "a"
    assert mime.to_format("audio/m4a") == "4"
    assert mime.to_format("audio/x-dsf") == "d"
    assert mime.to_format("audio/unknown") == ""


def test_to_format_rejects_non_audio():
    with pytest.raises(ValueError):
        mime.to_format("text/plain")


def test_to_ext():
    assert mime.to_ext(None) == ""
    assert mime.to_ext("text/plain") == ""
    assert mime.to_ext("audio/wav") == "wav"
    assert mime.to_ext("audio/L16;rate=44100") == "pcm"
    assert mime.to_ext("audio/x-flac") == "flac"
    assert mime.to_ext("audio/mpeg") == "mp3"
    assert mime.to_ext("audio/ogg;codecs=opus") == "ops"
    assert mime.to_ext("audio/ogg;codecs=flac") == "ogg"
    assert mime.to_ext("audio/aac") == "aac"
    assert mime.to_ext("audio/mp4") == "mp4"
    assert mime.to_ext("audio/dff") == "dff"
    assert mime.to_ext("audio/unknown") == "nil"


def test_to_dlna_profiles():
    assert mime.to_dlna("m", True, False).startswith("DLNA.ORG_PN=MP3;DLNA.ORG_OP=01;DLNA.ORG_CI=0;")
    assert mime.to_dlna("a", True, False).startswith("DLNA.ORG_PN=AAC_ADTS;")
    assert mime.to_dlna("p", True, False).startswith("DLNA.ORG_PN=LPCM;")
    assert mime.to_dlna("f", False, False).startswith("DLNA.ORG_OP=00;")


@pytest.mark.parametrize("full_cache", [True, False])
@pytest.mark.parametrize("live", [True, False])
def test_to_dlna_flags(full_cache, live):
    flags = _flags(mime.to_dlna("m", full_cache, live))
    assert bool(flags & mime.DlnaFlag.S0_INCREASE) is live
    assert bool(flags & mime.DlnaFlag.BYTE_BASED_SEEK) is (not full_cache)
    assert flags & mime.DlnaFlag.STREAMING_TRANSFER_MODE
    assert flags & mime.DlnaFlag.DLNA_V15
    assert not flags & mime.DlnaFlag.TIME_BASED_SEEK