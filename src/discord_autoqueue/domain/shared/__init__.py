"""
Shared Domain Kernel

Contains exceptions, constrained types, and events shared across bounded contexts.
"""

from discord_autoqueue.domain.shared.exceptions import (
    DomainError,
    EngineError,
)

__all__ = [
    "DomainError",
    "EngineError",
]
