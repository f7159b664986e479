"""Cancellable per-guild timers that infer the end of the current track."""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Awaitable, Callable

from ...domain.music.entities import Track
from ...domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

DEFAULT_GRACE_MS = 1000
DEFAULT_FALLBACK_DURATION_MS = 180_000

TimerCallback = Callable[["AdvanceTimer"], Awaitable[None]]


class AdvanceTimer:
    """One scheduled advance for one guild and one track.

    The handle remembers the track and a generation number so the receiver
    can tell whether the firing still refers to what is playing.
    """

    def __init__(
        self,
        *,
        guild_id: int,
        track: Track,
        generation: int,
        delay: float | None,
        callback: TimerCallback,
    ) -> None:
        self.guild_id = guild_id
        self.track = track
        self.generation = generation
        self.delay = delay
        self._callback = callback
        self._task: asyncio.Task[None] | None = None
        self._cancelled = False
        self._fired = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def fired(self) -> bool:
        return self._fired

    def start(self) -> None:
        self._task = asyncio.create_task(
            self._run(), name=f"advance-timer-{self.guild_id}-{self.generation}"
        )

    async def _run(self) -> None:
        try:
            if self.delay is None:
                # Live streams have no duration; only the engine's end event ends them.
                await asyncio.get_running_loop().create_future()
            else:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            return

        if self._cancelled:
            return

        self._fired = True
        logger.debug(LogTemplates.TIMER_FIRED, self.guild_id, self.generation)
        try:
            await self._callback(self)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(LogTemplates.TIMER_CALLBACK_ERROR, self.guild_id)

    def cancel(self) -> None:
        self._cancelled = True
        task = self._task
        # A firing timer may replace itself while advancing; never cancel the running task.
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()


class AdvanceTimerRegistry:
    """Holds at most one live AdvanceTimer per guild."""

    def __init__(
        self,
        *,
        grace_ms: int = DEFAULT_GRACE_MS,
        fallback_duration_ms: int = DEFAULT_FALLBACK_DURATION_MS,
    ) -> None:
        self._grace_ms = grace_ms
        self._fallback_duration_ms = fallback_duration_ms
        self._timers: dict[int, AdvanceTimer] = {}
        self._generations = itertools.count(1)

    def delay_for(self, track: Track) -> float | None:
        """Seconds to wait before inferring the track has ended, or None for streams."""
        if track.is_stream:
            return None
        duration_ms = track.duration_ms or self._fallback_duration_ms
        return (duration_ms + self._grace_ms) / 1000

    def schedule(self, guild_id: int, track: Track, callback: TimerCallback) -> AdvanceTimer:
        """Cancel the guild's current timer, then start a new one for ``track``."""
        self.cancel(guild_id)

        timer = AdvanceTimer(
            guild_id=guild_id,
            track=track,
            generation=next(self._generations),
            delay=self.delay_for(track),
            callback=callback,
        )
        self._timers[guild_id] = timer
        timer.start()

        logger.debug(
            LogTemplates.TIMER_SCHEDULED,
            track.title,
            guild_id,
            timer.delay if timer.delay is not None else float("inf"),
            timer.generation,
        )
        return timer

    def cancel(self, guild_id: int) -> bool:
        timer = self._timers.pop(guild_id, None)
        if timer is None:
            return False
        timer.cancel()
        logger.debug(LogTemplates.TIMER_CANCELLED, guild_id, timer.generation)
        return True

    def current(self, guild_id: int) -> AdvanceTimer | None:
        return self._timers.get(guild_id)

    def is_current(self, timer: AdvanceTimer) -> bool:
        return self._timers.get(timer.guild_id) is timer and not timer.cancelled

    def cancel_all(self) -> int:
        guild_ids = list(self._timers)
        for guild_id in guild_ids:
            self.cancel(guild_id)
        return len(guild_ids)

    def __len__(self) -> int:
        return len(self._timers)
