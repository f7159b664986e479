"""Core domain entities for the music bounded context."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from discord_autoqueue.domain.music.value_objects import PlaybackState
from discord_autoqueue.domain.shared.types import (
    DiscordSnowflake,
    DurationMs,
    NonEmptyStr,
    TrackTitleStr,
    VolumeInt,
)

DEFAULT_VOLUME = 100


class Track(BaseModel):
    """Immutable value object representing a playable track."""

    model_config = ConfigDict(frozen=True, strict=True)

    title: TrackTitleStr
    author: str = ""
    duration_ms: DurationMs = 0
    identifier: str = ""
    uri: str | None = None
    artwork_url: str | None = None
    is_stream: bool = False

    # Opaque handle the engine needs to start playback
    encoded: NonEmptyStr

    @property
    def duration_formatted(self) -> str:
        """Format duration as M:SS or H:MM:SS."""
        if self.is_stream:
            return "LIVE"

        hours, remainder = divmod(self.duration_ms // 1000, 3600)
        minutes, seconds = divmod(remainder, 60)

        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"

    @property
    def display_author(self) -> str:
        return self.author or "Unknown"


class Queue(BaseModel):
    """Aggregate holding playback state for a single guild."""

    model_config = ConfigDict(strict=True)

    guild_id: DiscordSnowflake
    now_playing: Track | None = None
    songs: list[Track] = Field(default_factory=list)
    volume: VolumeInt = DEFAULT_VOLUME
    filters: dict[str, Any] = Field(default_factory=dict)

    # Identifies the current play of now_playing; echoed back by the engine
    play_id: int | None = None

    # Where user-facing output goes; owned by the presentation layer
    response_target: Any = None

    @property
    def state(self) -> PlaybackState:
        return PlaybackState.PLAYING if self.now_playing is not None else PlaybackState.IDLE

    @property
    def is_playing(self) -> bool:
        return self.now_playing is not None

    @property
    def is_exhausted(self) -> bool:
        """True when nothing is playing and nothing is pending."""
        return self.now_playing is None and not self.songs

    @property
    def pending_duration_ms(self) -> int:
        return sum(track.duration_ms for track in self.songs if not track.is_stream)

    def add_song(self, track: Track) -> int:
        """Append a track and return its 1-based position in the pending list."""
        self.songs.append(track)
        return len(self.songs)

    def pop_next(self) -> Track | None:
        """Remove and return the next pending track."""
        if not self.songs:
            return None
        return self.songs.pop(0)
