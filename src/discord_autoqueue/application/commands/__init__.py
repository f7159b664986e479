"""
Application Commands

Command objects and their handlers for write operations.
"""

from discord_autoqueue.application.commands.play_track import PlayTrackCommand, PlayTrackHandler

__all__ = [
    "PlayTrackCommand",
    "PlayTrackHandler",
]
