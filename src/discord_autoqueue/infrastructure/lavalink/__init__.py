"""Lavalink infrastructure - REST client, websocket node, and wire models."""

from discord_autoqueue.infrastructure.lavalink.models import (
    LavalinkLoadResponse,
    LavalinkTrack,
    LavalinkTrackInfo,
)
from discord_autoqueue.infrastructure.lavalink.node import LavalinkNode
from discord_autoqueue.infrastructure.lavalink.rest_client import LavalinkRestClient

__all__ = [
    "LavalinkLoadResponse",
    "LavalinkNode",
    "LavalinkRestClient",
    "LavalinkTrack",
    "LavalinkTrackInfo",
]
