"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Lavalink (REST client, websocket node, wire models)
- Discord (bot, cogs, voice protocol)
"""

from discord_autoqueue.infrastructure.discord.bot import create_bot
from discord_autoqueue.infrastructure.lavalink.rest_client import LavalinkRestClient

__all__ = [
    "create_bot",
    "LavalinkRestClient",
]
