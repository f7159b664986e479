"""Playback Coordinator - per-guild queue state machine and auto-advance."""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from ...domain.music.value_objects import AdvanceTrigger, TrackEndReason
from ...domain.shared.events import EventBus, PlaybackAdvanced, get_event_bus
from ...domain.shared.exceptions import EngineError
from ...domain.shared.messages import LogTemplates
from .playback_models import PlaybackResult, PlaybackStatus, QueueSnapshot

if TYPE_CHECKING:
    from ...domain.music.entities import Queue, Track
    from ...domain.music.queue_store import GuildQueueStore
    from ...domain.voice.tracker import VoiceSessionTracker
    from ..interfaces.audio_engine import AudioEngine
    from .advance_timer import AdvanceTimer, AdvanceTimerRegistry

logger = logging.getLogger(__name__)

MIN_VOLUME = 0
MAX_VOLUME = 1000

_ADVANCED = frozenset({PlaybackStatus.NOW_PLAYING, PlaybackStatus.ENDED})


class PlaybackCoordinator:
    """Owns every guild's playback transitions.

    Each guild has its own lock: transitions for one guild never interleave,
    including across engine calls, while other guilds proceed independently.
    Skip, the advance timer, and engine end events all funnel into the same
    staleness-checked advance so one track end produces exactly one advance.
    Each advance is published as a :class:`PlaybackAdvanced` event after the
    guild's lock is released.
    """

    def __init__(
        self,
        *,
        queue_store: GuildQueueStore,
        voice_tracker: VoiceSessionTracker,
        timers: AdvanceTimerRegistry,
        engine: AudioEngine,
        event_bus: EventBus | None = None,
    ) -> None:
        self._store = queue_store
        self._voice = voice_tracker
        self._timers = timers
        self._engine = engine
        self._bus = event_bus or get_event_bus()
        self._locks: dict[int, asyncio.Lock] = {}
        self._lock_users: dict[int, int] = {}
        self._play_ids = itertools.count(1)

    @asynccontextmanager
    async def _guild_lock(self, guild_id: int) -> AsyncIterator[None]:
        """Hold the guild's lock; it is dropped once unused and the guild has no queue."""
        lock = self._locks.get(guild_id)
        if lock is None:
            lock = self._locks[guild_id] = asyncio.Lock()
        self._lock_users[guild_id] = self._lock_users.get(guild_id, 0) + 1

        try:
            async with lock:
                yield
        finally:
            remaining = self._lock_users[guild_id] - 1
            if remaining:
                self._lock_users[guild_id] = remaining
            else:
                del self._lock_users[guild_id]
                if guild_id not in self._store:
                    del self._locks[guild_id]

    # ─────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────

    def get_snapshot(self, guild_id: int) -> QueueSnapshot | None:
        queue = self._store.get(guild_id)
        if queue is None:
            return None
        return QueueSnapshot(
            guild_id=guild_id,
            now_playing=queue.now_playing,
            upcoming=list(queue.songs),
            volume=queue.volume,
            filters=dict(queue.filters),
            pending_duration_ms=queue.pending_duration_ms,
        )

    def is_playing(self, guild_id: int) -> bool:
        queue = self._store.get(guild_id)
        return queue is not None and queue.is_playing

    # ─────────────────────────────────────────────────────────────────
    # Commands
    # ─────────────────────────────────────────────────────────────────

    async def enqueue_or_start(
        self, guild_id: int, track: Track, response_target: Any = None
    ) -> PlaybackResult:
        """Queue ``track`` behind the current one, or start it if the guild is idle."""
        async with self._guild_lock(guild_id):
            queue = self._store.get(guild_id)
            if queue is None:
                queue = self._store.create(guild_id)
                queue.response_target = response_target

            if queue.is_playing:
                position = self._store.add_song(guild_id, track) or len(queue.songs)
                logger.info(LogTemplates.QUEUE_ENQUEUED, track.title, position, guild_id)
                return PlaybackResult.queued(track, position)

            if not self._voice.is_ready(guild_id):
                self._discard_if_exhausted(queue)
                logger.info(LogTemplates.PLAYBACK_NOT_READY, guild_id)
                return PlaybackResult.not_ready()

            return await self._start_track(queue, track)

    async def skip(self, guild_id: int, *, expected: Track | None = None) -> PlaybackResult:
        """Skip the current track.

        When ``expected`` is given and is no longer playing, the advance it
        asked for already happened (the track ended on its own first), so no
        second advance is made.
        """
        async with self._guild_lock(guild_id):
            queue = self._store.get(guild_id)
            if queue is None or queue.now_playing is None:
                if expected is not None:
                    return PlaybackResult.skipped(expected, None)
                logger.debug(LogTemplates.PLAYBACK_EMPTY_QUEUE, "skip", guild_id)
                return PlaybackResult.empty_queue()

            if expected is not None and queue.now_playing is not expected:
                logger.debug(LogTemplates.PLAYBACK_STALE_ADVANCE, "skip", guild_id)
                return PlaybackResult.skipped(expected, queue.now_playing)

            # Cancel first so a timer firing during the engine call below is already dead.
            self._timers.cancel(guild_id)

            skipped = queue.now_playing
            outcome = await self._advance(queue)
            logger.info(LogTemplates.TRACK_SKIPPED, skipped.title, guild_id)

        if outcome.status in _ADVANCED:
            result = PlaybackResult.skipped(skipped, outcome.track)
        else:
            result = outcome

        await self._publish_advance(queue, AdvanceTrigger.SKIP, skipped, outcome, result.message)
        return result

    async def stop(self, guild_id: int) -> PlaybackResult:
        """Cancel the timer, destroy the engine player, and drop the queue.

        The destroy is sent even when no queue exists so a stray engine
        player left behind by an earlier failure is torn down too.
        """
        async with self._guild_lock(guild_id):
            self._timers.cancel(guild_id)
            queue = self._store.get(guild_id)

            try:
                await self._engine.destroy_player(guild_id)
            except EngineError as e:
                if queue is None:
                    logger.debug(LogTemplates.PLAYBACK_DESTROY_FAILED, guild_id, e.message)
                    return PlaybackResult.empty_queue()
                logger.error(LogTemplates.PLAYBACK_DESTROY_FAILED, guild_id, e.message)
                return PlaybackResult.engine_error(e.message)
            finally:
                if queue is not None:
                    queue.now_playing = None
                    queue.play_id = None
                    self._store.delete(guild_id)

            if queue is None:
                logger.debug(LogTemplates.PLAYBACK_EMPTY_QUEUE, "stop", guild_id)
                return PlaybackResult.empty_queue()

            logger.info(LogTemplates.PLAYBACK_STOPPED, guild_id)
            return PlaybackResult.stopped()

    async def update_filters(self, guild_id: int, filters: dict[str, Any]) -> PlaybackResult:
        """Replace the guild's filters without restarting the current track."""
        async with self._guild_lock(guild_id):
            queue = self._store.get(guild_id)
            if queue is None or not queue.is_playing:
                logger.debug(LogTemplates.PLAYBACK_EMPTY_QUEUE, "filter update", guild_id)
                return PlaybackResult.empty_queue()

            previous = queue.filters
            queue.filters = dict(filters)
            try:
                await self._engine.update_player_properties(guild_id, filters=dict(queue.filters))
            except EngineError as e:
                queue.filters = previous
                logger.error(LogTemplates.PLAYBACK_FILTERS_FAILED, guild_id, e.message)
                return PlaybackResult.engine_error(e.message)

            logger.info(LogTemplates.PLAYBACK_FILTERS_UPDATED, guild_id, sorted(queue.filters))
            return PlaybackResult.filters_updated(filters)

    async def clear_filters(self, guild_id: int) -> PlaybackResult:
        return await self.update_filters(guild_id, {})

    async def set_volume(self, guild_id: int, volume: int) -> PlaybackResult:
        """Change the guild's volume without restarting the current track."""
        if not MIN_VOLUME <= volume <= MAX_VOLUME:
            logger.info(LogTemplates.PLAYBACK_VOLUME_INVALID, volume, guild_id)
            return PlaybackResult.invalid_volume()

        async with self._guild_lock(guild_id):
            queue = self._store.get(guild_id)
            if queue is None or not queue.is_playing:
                logger.debug(LogTemplates.PLAYBACK_EMPTY_QUEUE, "volume change", guild_id)
                return PlaybackResult.empty_queue()

            previous = queue.volume
            queue.volume = volume
            try:
                await self._engine.update_player_properties(guild_id, volume=volume)
            except EngineError as e:
                queue.volume = previous
                logger.error(LogTemplates.PLAYBACK_VOLUME_FAILED, guild_id, e.message)
                return PlaybackResult.engine_error(e.message)

            logger.info(LogTemplates.PLAYBACK_VOLUME_UPDATED, guild_id, volume)
            return PlaybackResult.volume_updated(volume)

    async def refresh_voice(self, guild_id: int) -> None:
        """Push renegotiated voice credentials to a playing engine player."""
        async with self._guild_lock(guild_id):
            queue = self._store.get(guild_id)
            voice = self._voice.get(guild_id)
            if queue is None or not queue.is_playing or voice is None or not voice.is_ready:
                return

            try:
                await self._engine.update_player_properties(guild_id, voice=voice)
            except EngineError as e:
                logger.warning(LogTemplates.VOICE_REFRESH_FAILED, guild_id, e.message)

    # ─────────────────────────────────────────────────────────────────
    # End-of-track signals
    # ─────────────────────────────────────────────────────────────────

    async def handle_track_end(
        self,
        guild_id: int,
        encoded: str,
        reason: TrackEndReason,
        *,
        play_id: int | None = None,
    ) -> PlaybackResult | None:
        """Advance on the engine's authoritative end signal for the current play.

        ``play_id`` is the id handed to the engine when the track was started.
        A track queued twice keeps its ``encoded`` value but gets a new play
        id, so an end event for the earlier play is recognised as stale.
        """
        if not reason.may_start_next:
            logger.debug(LogTemplates.PLAYBACK_END_IGNORED, guild_id, reason.value)
            return None

        async with self._guild_lock(guild_id):
            queue = self._store.get(guild_id)
            if (
                queue is None
                or queue.now_playing is None
                or queue.play_id is None
                or queue.play_id != play_id
                or queue.now_playing.encoded != encoded
            ):
                logger.debug(LogTemplates.PLAYBACK_STALE_ADVANCE, "end event", guild_id)
                return None

            self._timers.cancel(guild_id)
            finished = queue.now_playing
            result = await self._advance(queue)

        await self._publish_advance(queue, AdvanceTrigger.ENGINE, finished, result, result.message)
        return result

    async def _on_timer_fired(self, timer: AdvanceTimer) -> None:
        guild_id = timer.guild_id

        async with self._guild_lock(guild_id):
            queue = self._store.get(guild_id)
            if (
                not self._timers.is_current(timer)
                or queue is None
                or queue.now_playing is not timer.track
            ):
                logger.debug(LogTemplates.PLAYBACK_STALE_ADVANCE, "timer", guild_id)
                return

            result = await self._advance(queue)

        await self._publish_advance(queue, AdvanceTrigger.TIMER, timer.track, result, result.message)

    # ─────────────────────────────────────────────────────────────────
    # Transitions (caller holds the guild lock)
    # ─────────────────────────────────────────────────────────────────

    async def _start_track(self, queue: Queue, track: Track) -> PlaybackResult:
        guild_id = queue.guild_id
        voice = self._voice.get(guild_id)
        if voice is None or not voice.is_ready:
            queue.now_playing = None
            queue.play_id = None
            self._discard_if_exhausted(queue)
            logger.info(LogTemplates.PLAYBACK_NOT_READY, guild_id)
            return PlaybackResult.not_ready()

        play_id = next(self._play_ids)
        queue.now_playing = track
        queue.play_id = play_id
        try:
            await self._engine.update_player(
                guild_id,
                track,
                voice,
                volume=queue.volume,
                filters=dict(queue.filters),
                play_id=play_id,
            )
        except EngineError as e:
            queue.now_playing = None
            queue.play_id = None
            self._timers.cancel(guild_id)
            self._discard_if_exhausted(queue)
            logger.error(LogTemplates.PLAYBACK_START_FAILED, track.title, guild_id, e.message)
            return PlaybackResult.engine_error(e.message, track=track)

        self._timers.schedule(guild_id, track, self._on_timer_fired)
        logger.info(LogTemplates.PLAYBACK_STARTED, track.title, guild_id)
        return PlaybackResult.now_playing(track)

    async def _advance(self, queue: Queue) -> PlaybackResult:
        guild_id = queue.guild_id
        previous = queue.now_playing
        next_track = self._store.get_next(guild_id)

        if next_track is None:
            self._timers.cancel(guild_id)
            logger.info(LogTemplates.PLAYBACK_ENDED, guild_id)
            try:
                await self._engine.destroy_player(guild_id)
            except EngineError as e:
                logger.error(LogTemplates.PLAYBACK_DESTROY_FAILED, guild_id, e.message)
                return PlaybackResult.engine_error(e.message)
            finally:
                queue.now_playing = None
                queue.play_id = None
                self._store.delete(guild_id)
            return PlaybackResult.ended(previous)

        result = await self._start_track(queue, next_track)
        if result.status != PlaybackStatus.NOW_PLAYING:
            logger.error(
                LogTemplates.PLAYBACK_ADVANCE_FAILED, next_track.title, guild_id, result.message
            )
            # The engine may still be playing the previous track.
            await self._destroy_quietly(guild_id)
        return result

    async def _destroy_quietly(self, guild_id: int) -> None:
        logger.warning(LogTemplates.PLAYBACK_ABANDONED, guild_id)
        try:
            await self._engine.destroy_player(guild_id)
        except EngineError as e:
            logger.error(LogTemplates.PLAYBACK_DESTROY_FAILED, guild_id, e.message)

    def _discard_if_exhausted(self, queue: Queue) -> None:
        if queue.is_exhausted:
            self._store.delete(queue.guild_id)

    # ─────────────────────────────────────────────────────────────────
    # Notifications (outside the guild lock)
    # ─────────────────────────────────────────────────────────────────

    async def _publish_advance(
        self,
        queue: Queue,
        trigger: AdvanceTrigger,
        previous: Track,
        outcome: PlaybackResult,
        message: str,
    ) -> None:
        started = outcome.track if outcome.status == PlaybackStatus.NOW_PLAYING else None
        await self._bus.publish(
            PlaybackAdvanced(
                guild_id=queue.guild_id,
                trigger=trigger,
                message=message,
                previous_title=previous.title,
                next_title=started.title if started else None,
                succeeded=outcome.status in _ADVANCED,
                response_target=queue.response_target,
            )
        )

    async def shutdown(self) -> None:
        cancelled = self._timers.cancel_all()
        logger.info(LogTemplates.PLAYBACK_SHUTDOWN, cancelled)
