# lmsbridge

Building blocks for bridging a music server to network renderers: pure-Python
helpers that reshape audio streams and describe them to players. The package
has no dependencies beyond the standard library.

## What is inside

- `lmsbridge.metadata` – `Metadata`, a dataclass describing one track, with
  `apply_defaults()` (fills missing title, album, artist, genre and remote
  title), `clone()` and `reset()`.
- `lmsbridge.mime` – choose a MIME type a renderer accepts (`from_codec`,
  `from_pcm`, `match_codec`), map MIME types to one-letter format codes and to
  file extensions (`to_format`, `to_ext`) and build the DLNA fourth field of a
  protocolInfo (`to_dlna`, with the `DlnaOperation` and `DlnaFlag` enums).
  `to_format` raises `ValueError` for a string that is not an audio MIME type.
- `lmsbridge.m4a` – `M4aToAdts` turns an MP4/M4A byte stream holding AAC into
  ADTS frames; `adts_header` builds a single 7-byte header and `AudioConfig`
  holds the AAC parameters read from the track. Unusable input raises
  `Mp4Error`. The media data must come after the `moov` box, since the
  stream is never seeked.
- `lmsbridge.mp3tags` – `id3v2_size` gives the length of a leading ID3v2 tag,
  `parse_lame_header` reads LAME encoder delay and padding into a
  `LameGapless`, `GaplessTrimmer` drops that delay and padding from decoded
  blocks, and `scale_sample` converts a fixed-point decoder sample to a
  left-aligned 32-bit one.
- `lmsbridge.pcm` – work on interleaved stereo 32-bit samples: packing
  (`scale_and_pack`, `lpcm_pack` for the L24 layout), gain and cross-fade
  (`apply_gain`, `apply_cross`) and `to_mono`.
- `lmsbridge.headers` – WAV and AIFF headers (`wave_header`, `aiff_header`),
  announced stream lengths (`pcm_stream_length`, `estimate_length`) and MP3
  silence frames (`mp3_silence`).
- `lmsbridge.fade` – `Fader`, the fade-in, fade-out, in-out and cross-fade
  state machine over a ring buffer of frames, configured with `FadeMode`; its
  `process()` applies the fade and replay gain to buffered samples.

## Install

    pip install .

## Example

    from lmsbridge import mime
    from lmsbridge.m4a import M4aToAdts

    accepted = ["audio/mpeg", "audio/aac"]
    print(mime.from_codec("m", accepted, None))   # audio/mpeg
    print(mime.to_ext("audio/x-flac"))            # flac

    converter = M4aToAdts()
    with open("track.m4a", "rb") as src:
        out = converter.feed(src.read())
    out += converter.finish()

## What it does not do

lmsbridge is a library only. It has no command-line program, runs no server,
does not talk to a music server, and decodes or encodes no audio itself: it
reshapes streams (MP4 to ADTS), packs and fades PCM samples that have already
been decoded, and builds the headers and MIME descriptions that go with them.
It has no FLAC handling of its own.

## Tests

    pip install .[test]
    pytest