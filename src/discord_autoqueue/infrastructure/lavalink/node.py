"""Lavalink websocket connection: session handshake and player events."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

import aiohttp
from pydantic import ValidationError

from discord_autoqueue.domain.shared.messages import LogTemplates
from discord_autoqueue.infrastructure.lavalink.models import (
    LavalinkReady,
    LavalinkTrackEndEvent,
    LavalinkTrackExceptionEvent,
    LavalinkTrackStuckEvent,
)

if TYPE_CHECKING:
    from discord_autoqueue.application.services.playback_coordinator import PlaybackCoordinator
    from discord_autoqueue.config.settings import LavalinkSettings
    from discord_autoqueue.infrastructure.lavalink.rest_client import LavalinkRestClient

logger = logging.getLogger(__name__)

HEARTBEAT_SECONDS = 30.0


class LavalinkNode:
    """Keeps one websocket open to Lavalink and routes what it receives.

    The ``ready`` op hands the session ID to the REST client. A
    ``TrackEndEvent`` goes to the coordinator, which decides whether it
    refers to the current track. The connection is re-established with
    exponential backoff until :meth:`close` is called.
    """

    def __init__(
        self,
        settings: LavalinkSettings,
        rest_client: LavalinkRestClient,
        coordinator: PlaybackCoordinator,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._settings = settings
        self._rest = rest_client
        self._coordinator = coordinator
        self._session = session
        self._owns_session = session is None
        self._user_id: int | None = None
        self._task: asyncio.Task[None] | None = None
        self._closed = False
        self._ready = asyncio.Event()

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    async def wait_ready(self, timeout: float | None = None) -> bool:
        try:
            await asyncio.wait_for(self._ready.wait(), timeout)
        except TimeoutError:
            return False
        return True

    def start(self, user_id: int) -> None:
        """Begin connecting in the background as the bot user ``user_id``."""
        if self._task is not None and not self._task.done():
            return
        self._user_id = user_id
        self._closed = False
        self._task = asyncio.create_task(self._run_forever(), name="lavalink-node")

    async def close(self) -> None:
        self._closed = True
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None
        self._mark_disconnected()

    # ── Connection loop ──────────────────────────────────────────────────

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": self._settings.password.get_secret_value(),
            "User-Id": str(self._user_id),
            "Client-Name": self._settings.client_name,
        }

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    def backoff_delay(self, attempt: int) -> float:
        delay = self._settings.reconnect_base_delay_s * (2**attempt)
        return min(delay, self._settings.reconnect_max_delay_s)

    async def _run_forever(self) -> None:
        attempt = 0
        while not self._closed:
            try:
                await self._connect_once()
                attempt = 0
            except (aiohttp.ClientError, TimeoutError) as e:
                logger.warning(LogTemplates.LAVALINK_CONNECT_FAILED, e)
            finally:
                self._mark_disconnected()

            if self._closed:
                break
            delay = self.backoff_delay(attempt)
            attempt += 1
            logger.info(LogTemplates.LAVALINK_DISCONNECTED, delay)
            await asyncio.sleep(delay)

    async def _connect_once(self) -> None:
        logger.info(LogTemplates.LAVALINK_CONNECTING, self._settings.ws_url)
        async with self._get_session().ws_connect(
            self._settings.ws_url, headers=self._headers(), heartbeat=HEARTBEAT_SECONDS
        ) as ws:
            async for message in ws:
                if message.type == aiohttp.WSMsgType.TEXT:
                    try:
                        payload = message.json()
                    except ValueError:
                        logger.warning(LogTemplates.LAVALINK_BAD_PAYLOAD, message.data)
                        continue
                    await self.handle_payload(payload)
                elif message.type in (aiohttp.WSMsgType.ERROR, aiohttp.WSMsgType.CLOSED):
                    break

    def _mark_disconnected(self) -> None:
        self._ready.clear()
        self._rest.set_session_id(None)

    # ── Dispatch ─────────────────────────────────────────────────────────

    async def handle_payload(self, payload: dict[str, Any]) -> None:
        op = payload.get("op")
        try:
            if op == "ready":
                ready = LavalinkReady.model_validate(payload)
                self._rest.set_session_id(ready.session_id)
                self._ready.set()
                logger.info(LogTemplates.LAVALINK_READY, ready.session_id, ready.resumed)
            elif op == "event":
                await self._handle_event(payload)
            elif op in ("playerUpdate", "stats"):
                logger.debug(LogTemplates.LAVALINK_NODE_UPDATE, op, payload.get("guildId"))
            else:
                logger.debug(LogTemplates.LAVALINK_UNKNOWN_OP, op)
        except ValidationError:
            logger.warning(LogTemplates.LAVALINK_BAD_PAYLOAD, payload)

    async def _handle_event(self, payload: dict[str, Any]) -> None:
        event_type = payload.get("type")
        logger.debug(LogTemplates.LAVALINK_EVENT, event_type, payload.get("guildId"))

        if event_type == "TrackEndEvent":
            event = LavalinkTrackEndEvent.model_validate(payload)
            await self._coordinator.handle_track_end(
                event.guild_id,
                event.track.encoded,
                event.reason,
                play_id=event.track.play_id,
            )
        elif event_type == "TrackExceptionEvent":
            exc_event = LavalinkTrackExceptionEvent.model_validate(payload)
            logger.warning(
                LogTemplates.LAVALINK_TRACK_EXCEPTION,
                exc_event.guild_id,
                exc_event.exception.message or exc_event.exception.cause,
            )
        elif event_type == "TrackStuckEvent":
            stuck = LavalinkTrackStuckEvent.model_validate(payload)
            logger.warning(LogTemplates.LAVALINK_TRACK_STUCK, stuck.guild_id, stuck.threshold_ms)
