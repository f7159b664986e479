"""Utility functions for formatting Discord messages."""

from __future__ import annotations

from functools import cache
from typing import TYPE_CHECKING

from discord_autoqueue.domain.shared.messages import DiscordUIMessages

if TYPE_CHECKING:
    from discord_autoqueue.application.services.playback_models import QueueSnapshot

QUEUE_DISPLAY_LIMIT = 10


@cache
def format_duration(milliseconds: int | None) -> str:
    if milliseconds is None:
        return "–"

    total_seconds = int(milliseconds) // 1000
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    secs = total_seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


@cache
def truncate(text: str, max_length: int = 90) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def render_queue(snapshot: QueueSnapshot | None, limit: int = QUEUE_DISPLAY_LIMIT) -> str:
    """Plain-text listing of the current track and what is queued behind it."""
    if snapshot is None or not snapshot.is_playing:
        return DiscordUIMessages.STATE_QUEUE_EMPTY

    current = snapshot.now_playing
    assert current is not None

    lines = [
        DiscordUIMessages.QUEUE_HEADER_NOW_PLAYING,
        DiscordUIMessages.QUEUE_ENTRY.format(
            index="▶",
            title=truncate(current.title),
            author=current.display_author,
            duration=current.duration_formatted,
        ),
    ]

    if snapshot.upcoming:
        lines.append(DiscordUIMessages.QUEUE_HEADER_UP_NEXT)
        for index, track in enumerate(snapshot.upcoming[:limit], start=1):
            lines.append(
                DiscordUIMessages.QUEUE_ENTRY.format(
                    index=index,
                    title=truncate(track.title),
                    author=track.display_author,
                    duration=track.duration_formatted,
                )
            )
        remaining = len(snapshot.upcoming) - limit
        if remaining > 0:
            lines.append(DiscordUIMessages.QUEUE_MORE.format(count=remaining))

    lines.append(
        DiscordUIMessages.QUEUE_FOOTER.format(
            volume=snapshot.volume,
            count=len(snapshot.upcoming),
            duration=format_duration(snapshot.pending_duration_ms),
        )
    )
    return "\n".join(lines)
