"""In-memory store mapping guild IDs to their playback queue."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from discord_autoqueue.domain.music.entities import Queue, Track
from discord_autoqueue.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class GuildQueueStore:
    """Owns every guild's Queue. Pure state: no engine calls, no timers.

    Callers go through these operations and never touch the mapping directly.
    """

    def __init__(self) -> None:
        self._queues: dict[int, Queue] = {}

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._queues

    def __len__(self) -> int:
        return len(self._queues)

    def guild_ids(self) -> Iterator[int]:
        return iter(list(self._queues))

    def get(self, guild_id: int) -> Queue | None:
        return self._queues.get(guild_id)

    def create(self, guild_id: int) -> Queue:
        """Return the guild's queue, creating an empty one if none exists."""
        queue = self._queues.get(guild_id)
        if queue is None:
            queue = Queue(guild_id=guild_id)
            self._queues[guild_id] = queue
            logger.debug(LogTemplates.QUEUE_CREATED, guild_id)
        return queue

    def delete(self, guild_id: int) -> None:
        if self._queues.pop(guild_id, None) is not None:
            logger.debug(LogTemplates.QUEUE_DELETED, guild_id)

    def add_song(self, guild_id: int, track: Track) -> int | None:
        """Append a track; returns its 1-based position, or None without a queue."""
        queue = self._queues.get(guild_id)
        if queue is None:
            return None
        return queue.add_song(track)

    def get_next(self, guild_id: int) -> Track | None:
        """Remove and return the head of the guild's pending songs."""
        queue = self._queues.get(guild_id)
        if queue is None:
            return None
        return queue.pop_next()
