"""Result and snapshot models returned by the playback coordinator."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ...domain.music.entities import Track
from ...domain.shared.messages import DiscordUIMessages
from ...domain.shared.types import NonNegativeInt, VolumeInt


class PlaybackStatus(Enum):
    """Status codes for coordinator results."""

    NOW_PLAYING = "now_playing"
    QUEUED = "queued"
    SKIPPED = "skipped"
    ENDED = "ended"
    STOPPED = "stopped"
    FILTERS_UPDATED = "filters_updated"
    VOLUME_UPDATED = "volume_updated"
    NOT_READY = "not_ready"
    ENGINE_ERROR = "engine_error"
    EMPTY_QUEUE = "empty_queue"
    NO_RESULTS = "no_results"
    LOAD_FAILED = "load_failed"
    INVALID_VALUE = "invalid_value"


_SUCCESS_STATUSES = frozenset(
    {
        PlaybackStatus.NOW_PLAYING,
        PlaybackStatus.QUEUED,
        PlaybackStatus.SKIPPED,
        PlaybackStatus.ENDED,
        PlaybackStatus.STOPPED,
        PlaybackStatus.FILTERS_UPDATED,
        PlaybackStatus.VOLUME_UPDATED,
    }
)


class PlaybackResult(BaseModel):
    """Structured outcome of a playback operation.

    The command layer formats ``message`` as-is; the remaining fields carry
    the payload for callers that render their own output.
    """

    model_config = ConfigDict(frozen=True)

    status: PlaybackStatus
    message: str
    track: Track | None = None
    skipped_track: Track | None = None
    position: NonNegativeInt | None = None
    filters: dict[str, Any] | None = None
    volume: VolumeInt | None = None

    @property
    def is_success(self) -> bool:
        return self.status in _SUCCESS_STATUSES

    @property
    def is_error(self) -> bool:
        return self.status in {
            PlaybackStatus.ENGINE_ERROR,
            PlaybackStatus.LOAD_FAILED,
            PlaybackStatus.INVALID_VALUE,
        }

    @classmethod
    def now_playing(cls, track: Track) -> PlaybackResult:
        return cls(
            status=PlaybackStatus.NOW_PLAYING,
            message=DiscordUIMessages.NOW_PLAYING.format(
                title=track.title,
                author=track.display_author,
                duration=track.duration_formatted,
            ),
            track=track,
        )

    @classmethod
    def queued(cls, track: Track, position: int) -> PlaybackResult:
        return cls(
            status=PlaybackStatus.QUEUED,
            message=DiscordUIMessages.QUEUED.format(
                title=track.title, author=track.display_author, position=position
            ),
            track=track,
            position=position,
        )

    @classmethod
    def skipped(cls, skipped_track: Track, next_track: Track | None) -> PlaybackResult:
        if next_track is not None:
            message = DiscordUIMessages.SKIPPED_NEXT.format(
                skipped=skipped_track.title,
                title=next_track.title,
                author=next_track.display_author,
            )
        else:
            message = DiscordUIMessages.SKIPPED_ENDED.format(skipped=skipped_track.title)

        return cls(
            status=PlaybackStatus.SKIPPED,
            message=message,
            track=next_track,
            skipped_track=skipped_track,
        )

    @classmethod
    def ended(cls, last_track: Track | None) -> PlaybackResult:
        return cls(
            status=PlaybackStatus.ENDED,
            message=DiscordUIMessages.STATE_QUEUE_EMPTY,
            skipped_track=last_track,
        )

    @classmethod
    def stopped(cls) -> PlaybackResult:
        return cls(status=PlaybackStatus.STOPPED, message=DiscordUIMessages.STOPPED)

    @classmethod
    def filters_updated(cls, filters: dict[str, Any]) -> PlaybackResult:
        if filters:
            message = DiscordUIMessages.FILTERS_UPDATED.format(filters=", ".join(sorted(filters)))
        else:
            message = DiscordUIMessages.FILTERS_CLEARED
        return cls(status=PlaybackStatus.FILTERS_UPDATED, message=message, filters=dict(filters))

    @classmethod
    def volume_updated(cls, volume: int) -> PlaybackResult:
        return cls(
            status=PlaybackStatus.VOLUME_UPDATED,
            message=DiscordUIMessages.VOLUME_UPDATED.format(volume=volume),
            volume=volume,
        )

    @classmethod
    def not_ready(cls) -> PlaybackResult:
        return cls(status=PlaybackStatus.NOT_READY, message=DiscordUIMessages.STATE_VOICE_NOT_READY)

    @classmethod
    def engine_error(cls, error: str, track: Track | None = None) -> PlaybackResult:
        return cls(
            status=PlaybackStatus.ENGINE_ERROR,
            message=DiscordUIMessages.ERROR_ENGINE.format(error=error),
            track=track,
        )

    @classmethod
    def invalid_volume(cls) -> PlaybackResult:
        return cls(
            status=PlaybackStatus.INVALID_VALUE, message=DiscordUIMessages.ERROR_INVALID_VOLUME
        )

    @classmethod
    def empty_queue(cls) -> PlaybackResult:
        return cls(status=PlaybackStatus.EMPTY_QUEUE, message=DiscordUIMessages.STATE_NOTHING_PLAYING)

    @classmethod
    def no_results(cls) -> PlaybackResult:
        return cls(status=PlaybackStatus.NO_RESULTS, message=DiscordUIMessages.ERROR_NO_RESULTS)

    @classmethod
    def load_failed(cls, error: str) -> PlaybackResult:
        return cls(
            status=PlaybackStatus.LOAD_FAILED,
            message=DiscordUIMessages.ERROR_LOAD_FAILED.format(error=error),
        )


class QueueSnapshot(BaseModel):
    """Read-only view of a guild's queue for display."""

    model_config = ConfigDict(frozen=True)

    guild_id: int
    now_playing: Track | None
    upcoming: list[Track] = Field(default_factory=list)
    volume: VolumeInt
    filters: dict[str, Any] = Field(default_factory=dict)
    pending_duration_ms: NonNegativeInt = 0

    @property
    def is_playing(self) -> bool:
        return self.now_playing is not None

    @property
    def total_tracks(self) -> int:
        return len(self.upcoming) + (1 if self.now_playing else 0)
