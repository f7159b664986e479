"""Per-guild tracker merging voice state and voice server updates."""

from __future__ import annotations

import logging

from discord_autoqueue.domain.shared.messages import LogTemplates
from discord_autoqueue.domain.voice.session import VoiceSession

logger = logging.getLogger(__name__)


class VoiceSessionTracker:
    """Accumulates partial voice updates into one VoiceSession per guild.

    Readiness is recomputed from the stored fields on every call so a
    renegotiated server update is never trusted from a stale cached flag.
    """

    def __init__(self) -> None:
        self._sessions: dict[int, VoiceSession] = {}

    def _session_for(self, guild_id: int) -> VoiceSession:
        session = self._sessions.get(guild_id)
        if session is None:
            session = VoiceSession()
            self._sessions[guild_id] = session
        return session

    def apply_state_update(self, guild_id: int, session_id: str | None) -> None:
        session = self._session_for(guild_id)
        session.apply_state(session_id)
        logger.debug(LogTemplates.VOICE_STATE_APPLIED, guild_id, session_id)
        if session.is_ready:
            logger.debug(LogTemplates.VOICE_SESSION_READY, guild_id)

    def apply_server_update(self, guild_id: int, token: str | None, endpoint: str | None) -> None:
        session = self._session_for(guild_id)
        session.apply_server(token, endpoint)
        logger.debug(LogTemplates.VOICE_SERVER_APPLIED, guild_id, endpoint)
        if session.is_ready:
            logger.debug(LogTemplates.VOICE_SESSION_READY, guild_id)

    def is_ready(self, guild_id: int) -> bool:
        session = self._sessions.get(guild_id)
        return session is not None and session.is_ready

    def get(self, guild_id: int) -> VoiceSession | None:
        """Return a copy of the guild's session so callers cannot mutate tracker state."""
        session = self._sessions.get(guild_id)
        if session is None:
            return None
        return session.model_copy()

    def forget(self, guild_id: int) -> None:
        if self._sessions.pop(guild_id, None) is not None:
            logger.debug(LogTemplates.VOICE_SESSION_FORGOTTEN, guild_id)
