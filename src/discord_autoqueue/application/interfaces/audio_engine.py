"""Port interface for the external audio engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from discord_autoqueue.domain.music.entities import Track
from discord_autoqueue.domain.music.value_objects import LoadType
from discord_autoqueue.domain.shared.types import DiscordSnowflake, NonEmptyStr, VolumeInt

if TYPE_CHECKING:
    from ...domain.voice.session import VoiceSession


class LoadResult(BaseModel):
    """Outcome of resolving a query through the engine."""

    model_config = ConfigDict(frozen=True)

    load_type: LoadType
    tracks: list[Track] = Field(default_factory=list)
    playlist_name: str | None = None
    selected_track: int | None = None
    error: str | None = None

    def first_playable(self) -> Track | None:
        """Pick the track a play request should use for this result."""
        if not self.load_type.has_tracks or not self.tracks:
            return None
        if (
            self.load_type == LoadType.PLAYLIST
            and self.selected_track is not None
            and 0 <= self.selected_track < len(self.tracks)
        ):
            return self.tracks[self.selected_track]
        return self.tracks[0]


class AudioEngine(ABC):
    """Interface for the audio-routing backend that plays tracks for guilds.

    Every failure is raised as :class:`EngineError`.
    """

    @abstractmethod
    async def load_track(self, query: NonEmptyStr) -> LoadResult:
        """Resolve a URL or search query."""
        ...

    @abstractmethod
    async def update_player(
        self,
        guild_id: DiscordSnowflake,
        track: Track,
        voice: VoiceSession,
        *,
        volume: VolumeInt,
        filters: dict[str, Any],
        play_id: int | None = None,
    ) -> None:
        """Start or replace the guild's active track. May restart playback.

        ``play_id`` is handed back with the end event for this play.
        """
        ...

    @abstractmethod
    async def update_player_properties(
        self,
        guild_id: DiscordSnowflake,
        *,
        filters: dict[str, Any] | None = None,
        volume: VolumeInt | None = None,
        voice: VoiceSession | None = None,
    ) -> None:
        """Change player properties without restarting the current track."""
        ...

    @abstractmethod
    async def destroy_player(self, guild_id: DiscordSnowflake) -> None:
        """Tear down the engine-side player for a guild."""
        ...
