"""discord.py VoiceProtocol that hands voice credentials to Lavalink instead of connecting itself."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import discord

from discord_autoqueue.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_autoqueue.application.services.playback_coordinator import PlaybackCoordinator
    from discord_autoqueue.domain.voice.tracker import VoiceSessionTracker

logger = logging.getLogger(__name__)


class LavalinkVoiceProtocol(discord.VoiceProtocol):
    """Joins a voice channel through the gateway and records the credentials.

    discord.py routes the bot's own ``VOICE_STATE_UPDATE`` and every
    ``VOICE_SERVER_UPDATE`` for the guild here. Lavalink performs the actual
    voice connection once the coordinator sends it the assembled session.
    """

    def __init__(self, client: discord.Client, channel: discord.abc.Connectable) -> None:
        super().__init__(client, channel)
        container = getattr(client, "container", None)
        if container is None:
            raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

        self.guild_id: int = channel.guild.id  # type: ignore[attr-defined]
        self._tracker: VoiceSessionTracker = container.voice_tracker
        self._coordinator: PlaybackCoordinator = container.playback_coordinator
        self._connected = False

    @property
    def guild(self) -> discord.Guild:
        return self.channel.guild  # type: ignore[attr-defined]

    def is_connected(self) -> bool:
        return self._connected

    async def on_voice_state_update(self, data: dict[str, Any]) -> None:
        channel_id = data.get("channel_id")
        if channel_id is None:
            # Kicked or disconnected from outside the bot
            await self._teardown()
            return

        channel = self.guild.get_channel(int(channel_id))
        if channel is not None:
            self.channel = channel  # type: ignore[assignment]

        self._tracker.apply_state_update(self.guild_id, data.get("session_id"))
        await self._coordinator.refresh_voice(self.guild_id)

    async def on_voice_server_update(self, data: dict[str, Any]) -> None:
        self._tracker.apply_server_update(self.guild_id, data.get("token"), data.get("endpoint"))
        await self._coordinator.refresh_voice(self.guild_id)

    async def connect(
        self,
        *,
        timeout: float,
        reconnect: bool,
        self_deaf: bool = False,
        self_mute: bool = False,
    ) -> None:
        await self.guild.change_voice_state(
            channel=self.channel, self_mute=self_mute, self_deaf=self_deaf
        )
        self._connected = True

    async def disconnect(self, *, force: bool = False) -> None:
        if not self._connected and not force:
            return
        await self.guild.change_voice_state(channel=None)
        await self._teardown()

    async def _teardown(self) -> None:
        self._connected = False
        # Already stopped when /stop ran first.
        if self._coordinator.get_snapshot(self.guild_id) is not None:
            await self._coordinator.stop(self.guild_id)
        self._tracker.forget(self.guild_id)
        self.cleanup()
        logger.info(LogTemplates.VOICE_DISCONNECTED, self.guild_id)


async def wait_for_voice_ready(
    tracker: VoiceSessionTracker,
    guild_id: int,
    *,
    timeout: float,
    poll_interval: float,
) -> bool:
    """Poll until both voice updates for ``guild_id`` have arrived, or give up after ``timeout``."""
    try:
        async with asyncio.timeout(timeout):
            while not tracker.is_ready(guild_id):
                await asyncio.sleep(poll_interval)
    except TimeoutError:
        logger.info(LogTemplates.VOICE_WAIT_TIMEOUT, guild_id, timeout)
        return False
    return True
