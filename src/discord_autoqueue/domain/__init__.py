"""
Domain Layer

Contains pure state and rules organized by bounded contexts:
- shared/: Cross-cutting types, events, messages and exceptions
- music/: Track, queue, and queue store
- voice/: Voice session handshake assembly
"""

from discord_autoqueue.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
