"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the queue store, voice tracker, Lavalink
clients, playback coordinator and command handlers. Components are created
on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.commands.play_track import PlayTrackHandler
    from ..application.services.advance_timer import AdvanceTimerRegistry
    from ..application.services.playback_coordinator import PlaybackCoordinator
    from ..domain.music.queue_store import GuildQueueStore
    from ..domain.shared.events import EventBus
    from ..domain.voice.tracker import VoiceSessionTracker
    from ..infrastructure.lavalink.node import LavalinkNode
    from ..infrastructure.lavalink.rest_client import LavalinkRestClient
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Domain state
    _queue_store: GuildQueueStore | None = None
    _voice_tracker: VoiceSessionTracker | None = None
    _event_bus: EventBus | None = None

    # Infrastructure adapters
    _lavalink_client: LavalinkRestClient | None = None
    _lavalink_node: LavalinkNode | None = None

    # Application services
    _advance_timers: AdvanceTimerRegistry | None = None
    _playback_coordinator: PlaybackCoordinator | None = None

    # Command handlers
    _play_track_handler: PlayTrackHandler | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Domain State ===

    @property
    def queue_store(self) -> GuildQueueStore:
        if self._queue_store is None:
            from ..domain.music.queue_store import GuildQueueStore

            self._queue_store = GuildQueueStore()
        return self._queue_store

    @property
    def voice_tracker(self) -> VoiceSessionTracker:
        if self._voice_tracker is None:
            from ..domain.voice.tracker import VoiceSessionTracker

            self._voice_tracker = VoiceSessionTracker()
        return self._voice_tracker

    @property
    def event_bus(self) -> EventBus:
        if self._event_bus is None:
            from ..domain.shared.events import get_event_bus

            self._event_bus = get_event_bus()
        return self._event_bus

    # === Infrastructure Adapters ===

    @property
    def lavalink_client(self) -> LavalinkRestClient:
        """Get the Lavalink REST client (the audio engine)."""
        if self._lavalink_client is None:
            from ..infrastructure.lavalink.rest_client import LavalinkRestClient

            self._lavalink_client = LavalinkRestClient(self.settings.lavalink)
        return self._lavalink_client

    @property
    def lavalink_node(self) -> LavalinkNode:
        """Get the Lavalink websocket node."""
        if self._lavalink_node is None:
            from ..infrastructure.lavalink.node import LavalinkNode

            self._lavalink_node = LavalinkNode(
                self.settings.lavalink,
                self.lavalink_client,
                self.playback_coordinator,
            )
        return self._lavalink_node

    # === Application Services ===

    @property
    def advance_timers(self) -> AdvanceTimerRegistry:
        if self._advance_timers is None:
            from ..application.services.advance_timer import AdvanceTimerRegistry

            self._advance_timers = AdvanceTimerRegistry(
                grace_ms=self.settings.playback.grace_ms,
                fallback_duration_ms=self.settings.playback.fallback_duration_ms,
            )
        return self._advance_timers

    @property
    def playback_coordinator(self) -> PlaybackCoordinator:
        """Get the playback coordinator."""
        if self._playback_coordinator is None:
            from ..application.services.playback_coordinator import PlaybackCoordinator

            self._playback_coordinator = PlaybackCoordinator(
                queue_store=self.queue_store,
                voice_tracker=self.voice_tracker,
                timers=self.advance_timers,
                engine=self.lavalink_client,
                event_bus=self.event_bus,
            )
        return self._playback_coordinator

    # === Command Handlers ===

    @property
    def play_track_handler(self) -> PlayTrackHandler:
        """Get the play track command handler."""
        if self._play_track_handler is None:
            from ..application.commands.play_track import PlayTrackHandler

            self._play_track_handler = PlayTrackHandler(
                engine=self.lavalink_client,
                coordinator=self.playback_coordinator,
            )
        return self._play_track_handler

    # === Lifecycle ===

    async def shutdown(self) -> None:
        """Shutdown and cleanup all resources."""
        if self._playback_coordinator is not None:
            await self._playback_coordinator.shutdown()

        if self._lavalink_node is not None:
            await self._lavalink_node.close()

        if self._lavalink_client is not None:
            await self._lavalink_client.close()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
