"""Slash-command music cog delegating to the playback coordinator."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from discord_autoqueue.application.commands.play_track import PlayTrackCommand
from discord_autoqueue.domain.shared.events import PlaybackAdvanced
from discord_autoqueue.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from discord_autoqueue.infrastructure.discord.guards.voice_guards import (
    ensure_voice,
    send_ephemeral,
)
from discord_autoqueue.infrastructure.lavalink.filters import (
    FILTER_NAMES,
    apply_filter,
    describe_filters,
    validate_filter_value,
)
from discord_autoqueue.utils.reply import render_queue

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    async def cog_load(self) -> None:
        self.container.event_bus.subscribe(PlaybackAdvanced, self._on_playback_advanced)

    async def cog_unload(self) -> None:
        self.container.event_bus.unsubscribe(PlaybackAdvanced, self._on_playback_advanced)

    async def _guild_id(self, interaction: discord.Interaction) -> int | None:
        if interaction.guild is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
            return None
        return interaction.guild.id

    # ─────────────────────────────────────────────────────────────────
    # Play
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="play", description="Play a song by URL or search query.")
    @app_commands.describe(query="URL or search query")
    async def play(self, interaction: discord.Interaction, query: str) -> None:
        await interaction.response.defer()

        if not await ensure_voice(
            interaction, self.container.voice_tracker, self.container.settings.playback
        ):
            return

        assert interaction.guild is not None

        command = PlayTrackCommand(
            guild_id=interaction.guild.id,
            query=query,
            response_target=interaction.channel,
        )
        result = await self.container.play_track_handler.handle(command)
        await interaction.followup.send(result.message)

    # ─────────────────────────────────────────────────────────────────
    # Skip / Stop
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="skip", description="Skip the current track.")
    async def skip(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        coordinator = self.container.playback_coordinator
        snapshot = coordinator.get_snapshot(guild_id)
        expected = snapshot.now_playing if snapshot else None

        result = await coordinator.skip(guild_id, expected=expected)
        await interaction.response.send_message(result.message)

    @app_commands.command(name="stop", description="Stop playback, clear the queue, and leave voice.")
    async def stop(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        result = await self.container.playback_coordinator.stop(guild_id)

        voice_client = interaction.guild.voice_client if interaction.guild else None
        if voice_client is not None:
            await voice_client.disconnect(force=True)

        await interaction.response.send_message(result.message)

    # ─────────────────────────────────────────────────────────────────
    # Queue / Now playing
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="queue", description="Show the current queue.")
    async def queue(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        snapshot = self.container.playback_coordinator.get_snapshot(guild_id)
        await interaction.response.send_message(render_queue(snapshot))

    @app_commands.command(name="nowplaying", description="Show the track that is playing.")
    async def nowplaying(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        snapshot = self.container.playback_coordinator.get_snapshot(guild_id)
        if snapshot is None or snapshot.now_playing is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOTHING_PLAYING)
            return

        track = snapshot.now_playing
        lines = [
            DiscordUIMessages.NOW_PLAYING.format(
                title=track.title,
                author=track.display_author,
                duration=track.duration_formatted,
            ),
            DiscordUIMessages.NOW_PLAYING_DETAILS.format(
                volume=snapshot.volume, filters=describe_filters(snapshot.filters)
            ),
        ]
        if track.uri:
            lines.append(f"<{track.uri}>")
        await interaction.response.send_message("\n".join(lines))

    # ─────────────────────────────────────────────────────────────────
    # Filters / Volume
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="filter", description="Apply an audio filter without restarting the track.")
    @app_commands.describe(name="Filter to apply", value="Filter strength")
    @app_commands.choices(name=[app_commands.Choice(name=n, value=n) for n in FILTER_NAMES])
    async def filter(self, interaction: discord.Interaction, name: str, value: float) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        if not validate_filter_value(name, value):
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_INVALID_FILTER_VALUE)
            return

        coordinator = self.container.playback_coordinator
        snapshot = coordinator.get_snapshot(guild_id)
        current = snapshot.filters if snapshot else {}

        result = await coordinator.update_filters(guild_id, apply_filter(current, name, value))
        await interaction.response.send_message(result.message)

    @app_commands.command(name="clearfilter", description="Remove all audio filters.")
    async def clearfilter(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        result = await self.container.playback_coordinator.clear_filters(guild_id)
        await interaction.response.send_message(result.message)

    @app_commands.command(name="volume", description="Set the playback volume (100 is normal).")
    @app_commands.describe(level="Volume from 0 to 1000")
    async def volume(
        self, interaction: discord.Interaction, level: app_commands.Range[int, 0, 1000]
    ) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        result = await self.container.playback_coordinator.set_volume(guild_id, level)
        await interaction.response.send_message(result.message)

    # ─────────────────────────────────────────────────────────────────
    # Auto-advance notifications
    # ─────────────────────────────────────────────────────────────────

    async def _on_playback_advanced(self, event: PlaybackAdvanced) -> None:
        """Announce advances that happened without a command (track ended on its own)."""
        target = event.response_target
        if not event.is_automatic or target is None or not hasattr(target, "send"):
            return

        try:
            await target.send(event.message)
        except discord.HTTPException as e:
            logger.warning(LogTemplates.BOT_AUTO_ADVANCE_SEND_FAILED, event.guild_id, e)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
