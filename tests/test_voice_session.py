"""Unit tests for VoiceSession and VoiceSessionTracker."""

import pytest

from discord_autoqueue.domain.voice.session import VoiceSession
from discord_autoqueue.domain.voice.tracker import VoiceSessionTracker

GUILD_ID = 987654321
OTHER_GUILD_ID = 123456789


# =============================================================================
# VoiceSession
# =============================================================================


class TestVoiceSession:
    def test_empty_is_not_ready(self):
        assert VoiceSession().is_ready is False

    def test_all_three_fields_make_ready(self):
        session = VoiceSession()
        session.apply_state("sess")
        session.apply_server("tok", "endpoint.discord.media")

        assert session.is_ready is True

    def test_server_update_replaces_both_fields(self):
        session = VoiceSession(session_id="sess", token="old", endpoint="old.example")
        session.apply_server("new", None)

        assert session.token == "new"
        assert session.endpoint is None
        assert session.is_ready is False

    def test_engine_payload_uses_lavalink_keys(self):
        session = VoiceSession(session_id="sess", token="tok", endpoint="ep")

        assert session.to_engine_payload() == {
            "token": "tok",
            "endpoint": "ep",
            "sessionId": "sess",
        }


# =============================================================================
# VoiceSessionTracker
# =============================================================================


class TestVoiceSessionTracker:
    def test_unknown_guild_not_ready(self):
        tracker = VoiceSessionTracker()

        assert tracker.is_ready(GUILD_ID) is False
        assert tracker.get(GUILD_ID) is None

    def test_state_only_not_ready(self):
        tracker = VoiceSessionTracker()
        tracker.apply_state_update(GUILD_ID, "sess")

        assert tracker.is_ready(GUILD_ID) is False

    def test_token_without_endpoint_not_ready(self):
        tracker = VoiceSessionTracker()
        tracker.apply_state_update(GUILD_ID, "sess")
        tracker.apply_server_update(GUILD_ID, "tok", None)

        assert tracker.is_ready(GUILD_ID) is False

    @pytest.mark.parametrize("state_first", [True, False])
    def test_ready_in_either_order(self, state_first):
        tracker = VoiceSessionTracker()
        if state_first:
            tracker.apply_state_update(GUILD_ID, "sess")
            tracker.apply_server_update(GUILD_ID, "tok", "ep")
        else:
            tracker.apply_server_update(GUILD_ID, "tok", "ep")
            tracker.apply_state_update(GUILD_ID, "sess")

        assert tracker.is_ready(GUILD_ID) is True

    def test_replayed_updates_keep_latest_values(self):
        tracker = VoiceSessionTracker()
        tracker.apply_state_update(GUILD_ID, "sess-1")
        tracker.apply_server_update(GUILD_ID, "tok-1", "ep-1")
        tracker.apply_server_update(GUILD_ID, "tok-2", "ep-2")
        tracker.apply_state_update(GUILD_ID, "sess-2")

        session = tracker.get(GUILD_ID)
        assert (session.session_id, session.token, session.endpoint) == ("sess-2", "tok-2", "ep-2")

    def test_readiness_recomputed_after_renegotiation(self):
        tracker = VoiceSessionTracker()
        tracker.apply_state_update(GUILD_ID, "sess")
        tracker.apply_server_update(GUILD_ID, "tok", "ep")
        tracker.apply_server_update(GUILD_ID, "tok", None)

        assert tracker.is_ready(GUILD_ID) is False

    def test_get_returns_copy(self):
        tracker = VoiceSessionTracker()
        tracker.apply_state_update(GUILD_ID, "sess")

        copy = tracker.get(GUILD_ID)
        copy.apply_state("tampered")

        assert tracker.get(GUILD_ID).session_id == "sess"

    def test_guilds_are_independent(self):
        tracker = VoiceSessionTracker()
        tracker.apply_state_update(GUILD_ID, "sess")
        tracker.apply_server_update(GUILD_ID, "tok", "ep")

        assert tracker.is_ready(OTHER_GUILD_ID) is False

    def test_forget(self):
        tracker = VoiceSessionTracker()
        tracker.apply_state_update(GUILD_ID, "sess")
        tracker.apply_server_update(GUILD_ID, "tok", "ep")
        tracker.forget(GUILD_ID)

        assert tracker.is_ready(GUILD_ID) is False
        tracker.forget(GUILD_ID)
