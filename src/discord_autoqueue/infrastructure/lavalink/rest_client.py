"""Lavalink v4 REST client implementing the AudioEngine port."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Final

import httpx
from pydantic import ValidationError

from discord_autoqueue.application.interfaces.audio_engine import AudioEngine, LoadResult
from discord_autoqueue.domain.music.entities import Track
from discord_autoqueue.domain.shared.exceptions import EngineError
from discord_autoqueue.domain.shared.messages import ErrorMessages, LogTemplates
from discord_autoqueue.infrastructure.lavalink.models import (
    API_VERSION_PREFIX,
    PLAY_ID_KEY,
    LavalinkLoadResponse,
)

if TYPE_CHECKING:
    from discord_autoqueue.config.settings import LavalinkSettings
    from discord_autoqueue.domain.voice.session import VoiceSession

logger = logging.getLogger(__name__)

URL_PATTERN: Final = re.compile(r"^https?://", re.IGNORECASE)
SOURCE_PREFIX_PATTERN: Final = re.compile(r"^[a-z]+search:", re.IGNORECASE)


class LavalinkRestClient(AudioEngine):
    """Talks to a Lavalink node over its REST API.

    Player calls need the websocket session ID, which the node sets via
    :meth:`set_session_id` once its ``ready`` message arrives.
    """

    def __init__(
        self,
        settings: LavalinkSettings,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._client = client
        self._owns_client = client is None
        self._session_id: str | None = None

    # ── Session ──────────────────────────────────────────────────────────

    @property
    def session_id(self) -> str | None:
        return self._session_id

    def set_session_id(self, session_id: str | None) -> None:
        self._session_id = session_id

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": self._settings.password.get_secret_value(),
            "Client-Name": self._settings.client_name,
        }

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._settings.rest_url,
                headers=self.headers,
                timeout=self._settings.request_timeout_s,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # ── AudioEngine ──────────────────────────────────────────────────────

    def build_identifier(self, query: str) -> str:
        """URLs and source-prefixed searches pass through; plain text becomes a search."""
        query = query.strip()
        if URL_PATTERN.match(query) or SOURCE_PREFIX_PATTERN.match(query):
            return query
        return f"{self._settings.search_prefix}:{query}"

    async def load_track(self, query: str) -> LoadResult:
        data = await self._request(
            "load",
            "GET",
            f"{API_VERSION_PREFIX}/loadtracks",
            params={"identifier": self.build_identifier(query)},
        )
        try:
            result = LavalinkLoadResponse.model_validate(data).to_domain()
        except ValidationError as e:
            raise EngineError(
                "load", ErrorMessages.ENGINE_LOAD_FAILED.format(detail=e.error_count())
            ) from e

        if result.error:
            logger.warning(LogTemplates.TRACK_LOAD_FAILED, query, result.error)
        elif not result.tracks:
            logger.info(LogTemplates.TRACK_LOAD_EMPTY, query)
        else:
            logger.info(LogTemplates.TRACK_LOADED, result.load_type.value, query, len(result.tracks))
        return result

    async def update_player(
        self,
        guild_id: int,
        track: Track,
        voice: VoiceSession,
        *,
        volume: int,
        filters: dict[str, Any],
        play_id: int | None = None,
    ) -> None:
        track_payload: dict[str, Any] = {"encoded": track.encoded}
        if play_id is not None:
            track_payload["userData"] = {PLAY_ID_KEY: play_id}
        payload = {
            "track": track_payload,
            "voice": voice.to_engine_payload(),
            "volume": volume,
            "filters": filters,
        }
        await self._request(
            "play",
            "PATCH",
            self._player_path(guild_id),
            params={"noReplace": "false"},
            json=payload,
        )

    async def update_player_properties(
        self,
        guild_id: int,
        *,
        filters: dict[str, Any] | None = None,
        volume: int | None = None,
        voice: VoiceSession | None = None,
    ) -> None:
        payload: dict[str, Any] = {}
        if filters is not None:
            payload["filters"] = filters
        if volume is not None:
            payload["volume"] = volume
        if voice is not None:
            payload["voice"] = voice.to_engine_payload()
        if not payload:
            return

        await self._request("update", "PATCH", self._player_path(guild_id), json=payload)

    async def destroy_player(self, guild_id: int) -> None:
        await self._request("destroy", "DELETE", self._player_path(guild_id))

    # ── HTTP helpers ─────────────────────────────────────────────────────

    def _player_path(self, guild_id: int) -> str:
        if self._session_id is None:
            raise EngineError("player", ErrorMessages.ENGINE_SESSION_NOT_ESTABLISHED)
        return f"{API_VERSION_PREFIX}/sessions/{self._session_id}/players/{guild_id}"

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        logger.debug(LogTemplates.LAVALINK_REQUEST, method, path)
        try:
            response = await self._get_client().request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            raise EngineError(operation, ErrorMessages.ENGINE_UNREACHABLE.format(detail=e)) from e

        if response.is_error:
            raise EngineError(
                operation,
                ErrorMessages.ENGINE_REQUEST_FAILED.format(
                    operation=operation, detail=_error_detail(response)
                ),
                status_code=response.status_code,
            )

        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise EngineError(
                operation,
                ErrorMessages.ENGINE_REQUEST_FAILED.format(operation=operation, detail=e),
                status_code=response.status_code,
            ) from e


def _error_detail(response: httpx.Response) -> str:
    """Lavalink errors are JSON with a ``message``; fall back to the status line."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"{response.status_code} {response.reason_phrase}"
