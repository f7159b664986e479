"""Reusable guard functions for Discord slash commands."""

from discord_autoqueue.infrastructure.discord.guards.voice_guards import (
    ensure_voice,
    get_member,
    send_ephemeral,
)

__all__ = [
    "ensure_voice",
    "get_member",
    "send_ephemeral",
]
