"""Pydantic models for Lavalink v4 wire payloads.

These are infrastructure-specific models for parsing REST responses and
websocket messages from a Lavalink node and converting them to domain types.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from discord_autoqueue.application.interfaces.audio_engine import LoadResult
from discord_autoqueue.domain.music.entities import Track
from discord_autoqueue.domain.music.value_objects import LoadType, TrackEndReason
from discord_autoqueue.domain.shared.types import DiscordSnowflake, NonEmptyStr

API_VERSION_PREFIX: Final[str] = "/v4"
MAX_TITLE_LENGTH: Final[int] = 500
UNKNOWN_TITLE: Final[str] = "Unknown Title"
UNKNOWN_LOAD_ERROR: Final[str] = "Unknown error"
PLAY_ID_KEY: Final[str] = "playId"


# ── Tracks ─────────────────────────────────────────────────────────────


class LavalinkTrackInfo(BaseModel):
    """The ``info`` object of a Lavalink track."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    identifier: str = ""
    title: str = UNKNOWN_TITLE
    author: str = ""
    length: int = 0
    is_stream: bool = Field(default=False, alias="isStream")
    uri: str | None = None
    artwork_url: str | None = Field(default=None, alias="artworkUrl")

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return UNKNOWN_TITLE
        return v[:MAX_TITLE_LENGTH]

    @field_validator("author", "identifier", mode="before")
    @classmethod
    def _coerce_none_to_empty(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""


class LavalinkTrack(BaseModel):
    """A track object as returned by ``/loadtracks`` and in player events."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    encoded: NonEmptyStr
    info: LavalinkTrackInfo = Field(default_factory=LavalinkTrackInfo)
    user_data: dict[str, Any] = Field(default_factory=dict, alias="userData")

    @field_validator("user_data", mode="before")
    @classmethod
    def _coerce_user_data(cls, v: Any) -> dict[str, Any]:
        return v if isinstance(v, dict) else {}

    @property
    def play_id(self) -> int | None:
        """The play id this track was started with, if it carried one."""
        value = self.user_data.get(PLAY_ID_KEY)
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return value

    def to_domain(self) -> Track:
        info = self.info
        return Track(
            title=info.title,
            author=info.author,
            # Lavalink reports Long.MAX_VALUE as the length of live streams
            duration_ms=0 if info.is_stream else max(info.length, 0),
            identifier=info.identifier,
            uri=info.uri,
            artwork_url=info.artwork_url,
            is_stream=info.is_stream,
            encoded=self.encoded,
        )


class LavalinkPlaylistInfo(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    name: str = ""
    selected_track: int = Field(default=-1, alias="selectedTrack")


class LavalinkPlaylist(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    info: LavalinkPlaylistInfo = Field(default_factory=LavalinkPlaylistInfo)
    tracks: list[LavalinkTrack] = Field(default_factory=list)


class LavalinkLoadResponse(BaseModel):
    """Response body of ``GET /v4/loadtracks``.

    The shape of ``data`` depends on ``loadType``:

    - ``track``: a single track object
    - ``playlist``: ``{"info": {...}, "tracks": [...]}``
    - ``search``: a list of track objects
    - ``empty``: an empty object
    - ``error``: ``{"message": ..., "severity": ..., "cause": ...}``
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    load_type: LoadType = Field(alias="loadType")
    data: Any = None

    def to_domain(self) -> LoadResult:
        if self.load_type == LoadType.TRACK:
            track = LavalinkTrack.model_validate(self.data)
            return LoadResult(load_type=self.load_type, tracks=[track.to_domain()])

        if self.load_type == LoadType.SEARCH:
            tracks = [LavalinkTrack.model_validate(item).to_domain() for item in self.data or []]
            return LoadResult(load_type=self.load_type, tracks=tracks)

        if self.load_type == LoadType.PLAYLIST:
            playlist = LavalinkPlaylist.model_validate(self.data or {})
            selected = playlist.info.selected_track
            return LoadResult(
                load_type=self.load_type,
                tracks=[t.to_domain() for t in playlist.tracks],
                playlist_name=playlist.info.name or None,
                selected_track=selected if selected >= 0 else None,
            )

        if self.load_type == LoadType.ERROR:
            data = self.data if isinstance(self.data, dict) else {}
            return LoadResult(
                load_type=self.load_type, error=data.get("message") or UNKNOWN_LOAD_ERROR
            )

        return LoadResult(load_type=LoadType.EMPTY)


# ── Websocket messages ─────────────────────────────────────────────────


class LavalinkReady(BaseModel):
    """``op: ready`` message sent once the websocket session is established."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    session_id: NonEmptyStr = Field(alias="sessionId")
    resumed: bool = False


class LavalinkTrackEndEvent(BaseModel):
    """``op: event`` with ``type: TrackEndEvent``."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    guild_id: DiscordSnowflake = Field(alias="guildId")
    track: LavalinkTrack
    reason: TrackEndReason


class LavalinkTrackException(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    message: str | None = None
    severity: str = "common"
    cause: str | None = None


class LavalinkTrackExceptionEvent(BaseModel):
    """``op: event`` with ``type: TrackExceptionEvent``."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    guild_id: DiscordSnowflake = Field(alias="guildId")
    exception: LavalinkTrackException = Field(default_factory=LavalinkTrackException)


class LavalinkTrackStuckEvent(BaseModel):
    """``op: event`` with ``type: TrackStuckEvent``."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    guild_id: DiscordSnowflake = Field(alias="guildId")
    threshold_ms: int = Field(default=0, alias="thresholdMs")
