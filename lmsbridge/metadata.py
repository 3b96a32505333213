"""Track metadata as reported by the music server."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional

DEFAULT_TITLE = "Streaming from LMS"


@dataclass
class Metadata:
    """Descriptive and technical information about one track."""

    artist: Optional[str] = None
    album: Optional[str] = None
    title: Optional[str] = None
    remote_title: Optional[str] = None
    artwork: Optional[str] = None
    genre: Optional[str] = None
    track: int = 0
    index: int = 0
    disc: int = 0
    duration: int = 0
    position: int = 0
    live_duration: int = -1
    size: int = 0
    sample_rate: int = 0
    sample_size: int = 0
    channels: int = 0
    bitrate: int = 0
    remote: bool = False
    valid: bool = False

    def apply_defaults(self) -> None:
        """Fill missing text fields with their default values."""
        if self.title is None:
            self.title = DEFAULT_TITLE
        if self.album is None:
            self.album = ""
        if self.artist is None:
            self.artist = ""
        if self.genre is None:
            self.genre = ""
        if self.remote_title is None:
            self.remote_title = DEFAULT_TITLE

    def clone(self) -> "Metadata":
        """Return an independent copy."""
        return dataclasses.replace(self)

    def reset(self) -> None:
        """Return every field to its initial value."""
        for field in dataclasses.fields(self):
            setattr(self, field.name, field.default)