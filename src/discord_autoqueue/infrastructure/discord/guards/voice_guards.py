"""Reusable voice-channel guard functions for Discord slash commands.

These are free functions that accept explicit dependencies rather than relying
on a specific cog instance, making them usable from any cog.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import discord

from discord_autoqueue.domain.shared.messages import DiscordUIMessages, LogTemplates
from discord_autoqueue.infrastructure.discord.voice_protocol import (
    LavalinkVoiceProtocol,
    wait_for_voice_ready,
)

if TYPE_CHECKING:
    from discord_autoqueue.config.settings import PlaybackSettings
    from discord_autoqueue.domain.voice.tracker import VoiceSessionTracker

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT: float = 10.0


async def send_ephemeral(interaction: discord.Interaction, message: str) -> None:
    """Send an ephemeral message, handling both fresh and already-responded interactions."""
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


async def get_member(interaction: discord.Interaction) -> discord.Member | None:
    """Validate that the interaction comes from a guild member. Returns None with error on failure."""
    if not interaction.guild:
        await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
        return None

    user = interaction.user
    if not isinstance(user, discord.Member):
        await send_ephemeral(interaction, DiscordUIMessages.STATE_VERIFY_VOICE_FAILED)
        return None

    return user


async def ensure_voice(
    interaction: discord.Interaction,
    tracker: VoiceSessionTracker,
    settings: PlaybackSettings,
) -> bool:
    """Check the user is in voice, join their channel if needed, and wait for the voice session.

    A session that is still not ready after the timeout is not treated as a
    failure here; the coordinator reports it when playback is attempted.
    """
    member = await get_member(interaction)
    if member is None:
        return False

    guild = interaction.guild
    assert guild is not None

    if not member.voice or not member.voice.channel:
        await send_ephemeral(interaction, DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE)
        return False

    if guild.voice_client is None:
        try:
            await member.voice.channel.connect(
                cls=LavalinkVoiceProtocol, timeout=CONNECT_TIMEOUT, self_deaf=True
            )
        except (discord.ClientException, asyncio.TimeoutError) as e:
            logger.error(LogTemplates.VOICE_CONNECT_FAILED, guild.id, e)
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE)
            return False

    await wait_for_voice_ready(
        tracker,
        guild.id,
        timeout=settings.voice_ready_timeout_s,
        poll_interval=settings.voice_ready_poll_s,
    )
    return True
