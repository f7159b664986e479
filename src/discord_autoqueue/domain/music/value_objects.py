"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from enum import Enum


class PlaybackState(Enum):
    """Per-guild playback state.

    State transitions:
    - IDLE -> PLAYING (track started)
    - PLAYING -> PLAYING (advance to the next track)
    - PLAYING -> IDLE (queue exhausted, stop, or engine failure)
    """

    IDLE = "idle"
    PLAYING = "playing"

    @property
    def is_playing(self) -> bool:
        return self == PlaybackState.PLAYING


class LoadType(Enum):
    """Kinds of result returned by the engine's load operation."""

    TRACK = "track"
    PLAYLIST = "playlist"
    SEARCH = "search"
    EMPTY = "empty"
    ERROR = "error"

    @property
    def has_tracks(self) -> bool:
        return self in {LoadType.TRACK, LoadType.PLAYLIST, LoadType.SEARCH}


class TrackEndReason(Enum):
    """Reasons the engine reports for a track ending."""

    FINISHED = "finished"
    LOAD_FAILED = "loadFailed"
    STOPPED = "stopped"
    REPLACED = "replaced"
    CLEANUP = "cleanup"

    @property
    def may_start_next(self) -> bool:
        """Whether the queue should advance after this end reason."""
        return self in {TrackEndReason.FINISHED, TrackEndReason.LOAD_FAILED}


class AdvanceTrigger(Enum):
    """What moved a guild past its current track."""

    SKIP = "skip"
    TIMER = "timer"
    ENGINE = "engine"

    @property
    def is_automatic(self) -> bool:
        """True when no user command asked for the advance."""
        return self != AdvanceTrigger.SKIP
