"""Voice session credentials assembled from two independent gateway events."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class VoiceSession(BaseModel):
    """The three-part credential the engine needs to join a guild's voice channel.

    ``session_id`` arrives with a voice *state* update; ``token`` and
    ``endpoint`` arrive together with a voice *server* update. The two can
    land in either order and may be replayed.
    """

    model_config = ConfigDict(strict=True)

    session_id: str | None = None
    token: str | None = None
    endpoint: str | None = None

    @property
    def is_ready(self) -> bool:
        return bool(self.session_id and self.token and self.endpoint)

    def apply_state(self, session_id: str | None) -> None:
        self.session_id = session_id

    def apply_server(self, token: str | None, endpoint: str | None) -> None:
        # A new pair always replaces the old one; never mix halves of two pairs.
        self.token = token
        self.endpoint = endpoint

    def to_engine_payload(self) -> dict[str, str]:
        return {
            "token": self.token or "",
            "endpoint": self.endpoint or "",
            "sessionId": self.session_id or "",
        }
