"""Command and handler for playing a track from a query or URL."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, field_validator

from discord_autoqueue.application.services.playback_models import PlaybackResult
from discord_autoqueue.domain.music.value_objects import LoadType
from discord_autoqueue.domain.shared.exceptions import EngineError
from discord_autoqueue.domain.shared.messages import LogTemplates
from discord_autoqueue.domain.shared.types import DiscordSnowflake, NonEmptyStr

if TYPE_CHECKING:
    from ..interfaces.audio_engine import AudioEngine
    from ..services.playback_coordinator import PlaybackCoordinator

logger = logging.getLogger(__name__)


class PlayTrackCommand(BaseModel):
    """Request to resolve a query/URL and queue or start the resulting track."""

    model_config = ConfigDict(frozen=True, strict=True)

    guild_id: DiscordSnowflake
    query: NonEmptyStr
    response_target: Any = None

    @field_validator("query", mode="before")
    @classmethod
    def _strip_query(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v


class PlayTrackHandler:
    """Resolves a query through the engine, then hands the track to the coordinator."""

    def __init__(
        self,
        *,
        engine: AudioEngine,
        coordinator: PlaybackCoordinator,
    ) -> None:
        self._engine = engine
        self._coordinator = coordinator

    async def handle(self, command: PlayTrackCommand) -> PlaybackResult:
        try:
            result = await self._engine.load_track(command.query)
        except EngineError as e:
            logger.error(LogTemplates.TRACK_LOAD_FAILED, command.query, e.message)
            return PlaybackResult.load_failed(e.message)

        if result.load_type == LoadType.ERROR:
            error = result.error or "Unknown error"
            logger.warning(LogTemplates.TRACK_LOAD_FAILED, command.query, error)
            return PlaybackResult.load_failed(error)

        track = result.first_playable()
        if track is None:
            logger.info(LogTemplates.TRACK_LOAD_EMPTY, command.query)
            return PlaybackResult.no_results()

        logger.debug(
            LogTemplates.TRACK_LOADED, result.load_type.value, command.query, len(result.tracks)
        )
        return await self._coordinator.enqueue_or_start(
            command.guild_id, track, command.response_target
        )
