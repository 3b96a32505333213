"""Audio stream helpers: metadata, MIME types, MP4 to ADTS, MP3 gapless info, PCM, headers and fades."""

__version__ = "0.1.0"

__all__ = [
    "metadata",
    "mime",
    "m4a",
    "mp3tags",
    "pcm",
    "headers",
    "fade",
]