"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from discord_autoqueue.application.interfaces.audio_engine import AudioEngine, LoadResult

__all__ = [
    "AudioEngine",
    "LoadResult",
]
