"""
Voice Bounded Context

Assembly of the voice handshake (session id, token, endpoint) per guild.
"""

from discord_autoqueue.domain.voice.session import VoiceSession
from discord_autoqueue.domain.voice.tracker import VoiceSessionTracker

__all__ = [
    "VoiceSession",
    "VoiceSessionTracker",
]
