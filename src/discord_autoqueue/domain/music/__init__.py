"""
Music Bounded Context

Domain logic for tracks, per-guild queues, and the queue store.
"""

from discord_autoqueue.domain.music.entities import Queue, Track
from discord_autoqueue.domain.music.queue_store import GuildQueueStore
from discord_autoqueue.domain.music.value_objects import (
    AdvanceTrigger,
    LoadType,
    PlaybackState,
    TrackEndReason,
)

__all__ = [
    # Entities
    "Track",
    "Queue",
    # Value Objects
    "PlaybackState",
    "LoadType",
    "TrackEndReason",
    "AdvanceTrigger",
    # Store
    "GuildQueueStore",
]
