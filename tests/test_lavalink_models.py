"""
Unit Tests for Lavalink wire models

Tests for:
- LavalinkTrackInfo / LavalinkTrack parsing, play ids, and conversion to Track
- LavalinkLoadResponse for every loadType
- websocket event models
"""

import pytest
from pydantic import ValidationError

from discord_autoqueue.domain.music.value_objects import LoadType, TrackEndReason
from discord_autoqueue.infrastructure.lavalink.models import (
    MAX_TITLE_LENGTH,
    UNKNOWN_TITLE,
    LavalinkLoadResponse,
    LavalinkReady,
    LavalinkTrack,
    LavalinkTrackEndEvent,
    LavalinkTrackInfo,
    LavalinkTrackStuckEvent,
)


def _track_payload(title="Never Gonna Give You Up", encoded="QAAAjQIAJFJpY2s=", **info):
    data = {
        "identifier": "dQw4w9WgXcQ",
        "isSeekable": True,
        "author": "Rick Astley",
        "length": 212000,
        "isStream": False,
        "position": 0,
        "title": title,
        "uri": "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "artworkUrl": "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
        "isrc": None,
        "sourceName": "youtube",
    }
    data.update(info)
    return {"encoded": encoded, "info": data, "pluginInfo": {}, "userData": {}}


# =============================================================================
# Track parsing
# =============================================================================


class TestLavalinkTrackInfo:
    def test_parses_camel_case(self):
        info = LavalinkTrackInfo.model_validate(_track_payload()["info"])

        assert info.is_stream is False
        assert info.artwork_url.endswith("maxresdefault.jpg")
        assert info.length == 212000

    @pytest.mark.parametrize("title", ["", "   ", None])
    def test_missing_title_defaults(self, title):
        info = LavalinkTrackInfo.model_validate({"title": title})
        assert info.title == UNKNOWN_TITLE

    def test_long_title_truncated(self):
        info = LavalinkTrackInfo.model_validate({"title": "x" * 800})
        assert len(info.title) == MAX_TITLE_LENGTH

    def test_null_author_becomes_empty(self):
        info = LavalinkTrackInfo.model_validate({"title": "Song", "author": None})
        assert info.author == ""


class TestLavalinkTrack:
    def test_to_domain(self):
        track = LavalinkTrack.model_validate(_track_payload()).to_domain()

        assert track.title == "Never Gonna Give You Up"
        assert track.author == "Rick Astley"
        assert track.duration_ms == 212000
        assert track.encoded == "QAAAjQIAJFJpY2s="
        assert track.is_stream is False

    def test_stream_has_zero_duration(self):
        payload = _track_payload(isStream=True, length=9223372036854775807)
        track = LavalinkTrack.model_validate(payload).to_domain()

        assert track.is_stream is True
        assert track.duration_ms == 0

    def test_missing_encoded_rejected(self):
        with pytest.raises(ValidationError):
            LavalinkTrack.model_validate({"encoded": "", "info": {}})

    def test_play_id_read_from_user_data(self):
        payload = {"encoded": "enc", "info": {}, "userData": {"playId": 42}}

        assert LavalinkTrack.model_validate(payload).play_id == 42

    @pytest.mark.parametrize(
        "user_data", [None, {}, {"playId": "42"}, {"playId": True}, {"other": 1}]
    )
    def test_play_id_missing_or_foreign(self, user_data):
        payload = {"encoded": "enc", "info": {}, "userData": user_data}

        assert LavalinkTrack.model_validate(payload).play_id is None


# =============================================================================
# Load responses
# =============================================================================


class TestLavalinkLoadResponse:
    def test_track(self):
        result = LavalinkLoadResponse.model_validate(
            {"loadType": "track", "data": _track_payload()}
        ).to_domain()

        assert result.load_type == LoadType.TRACK
        assert len(result.tracks) == 1

    def test_search(self):
        result = LavalinkLoadResponse.model_validate(
            {
                "loadType": "search",
                "data": [_track_payload("A", "enc-a"), _track_payload("B", "enc-b")],
            }
        ).to_domain()

        assert result.load_type == LoadType.SEARCH
        assert [t.title for t in result.tracks] == ["A", "B"]
        assert result.first_playable().encoded == "enc-a"

    def test_playlist_with_selected_track(self):
        result = LavalinkLoadResponse.model_validate(
            {
                "loadType": "playlist",
                "data": {
                    "info": {"name": "Mix", "selectedTrack": 1},
                    "pluginInfo": {},
                    "tracks": [_track_payload("A", "enc-a"), _track_payload("B", "enc-b")],
                },
            }
        ).to_domain()

        assert result.playlist_name == "Mix"
        assert result.selected_track == 1
        assert result.first_playable().title == "B"

    def test_playlist_without_selection(self):
        result = LavalinkLoadResponse.model_validate(
            {
                "loadType": "playlist",
                "data": {"info": {"name": "Mix", "selectedTrack": -1}, "tracks": [_track_payload("A", "enc-a")]},
            }
        ).to_domain()

        assert result.selected_track is None
        assert result.first_playable().title == "A"

    def test_empty(self):
        result = LavalinkLoadResponse.model_validate({"loadType": "empty", "data": {}}).to_domain()

        assert result.load_type == LoadType.EMPTY
        assert result.first_playable() is None

    def test_error(self):
        result = LavalinkLoadResponse.model_validate(
            {
                "loadType": "error",
                "data": {"message": "This video is unavailable", "severity": "common", "cause": "..."},
            }
        ).to_domain()

        assert result.load_type == LoadType.ERROR
        assert result.error == "This video is unavailable"

    def test_error_without_message(self):
        result = LavalinkLoadResponse.model_validate({"loadType": "error", "data": None}).to_domain()
        assert result.error == "Unknown error"

    def test_unknown_load_type_rejected(self):
        with pytest.raises(ValidationError):
            LavalinkLoadResponse.model_validate({"loadType": "mystery", "data": {}})


# =============================================================================
# Websocket messages
# =============================================================================


class TestWebsocketModels:
    def test_ready(self):
        ready = LavalinkReady.model_validate({"op": "ready", "resumed": False, "sessionId": "abc123"})

        assert ready.session_id == "abc123"
        assert ready.resumed is False

    def test_track_end_event(self):
        event = LavalinkTrackEndEvent.model_validate(
            {
                "op": "event",
                "type": "TrackEndEvent",
                "guildId": "987654321",
                "track": _track_payload(),
                "reason": "finished",
            }
        )

        assert event.guild_id == 987654321
        assert event.reason is TrackEndReason.FINISHED
        assert event.track.encoded == "QAAAjQIAJFJpY2s="
        assert event.track.play_id is None

    def test_track_end_event_echoes_play_id(self):
        track = {**_track_payload(), "userData": {"playId": 3}}
        event = LavalinkTrackEndEvent.model_validate(
            {"guildId": "1", "track": track, "reason": "finished"}
        )

        assert event.track.play_id == 3

    def test_track_end_event_load_failed_reason(self):
        event = LavalinkTrackEndEvent.model_validate(
            {"guildId": "1", "track": _track_payload(), "reason": "loadFailed"}
        )
        assert event.reason is TrackEndReason.LOAD_FAILED

    def test_track_stuck_event(self):
        event = LavalinkTrackStuckEvent.model_validate(
            {"op": "event", "type": "TrackStuckEvent", "guildId": "42", "thresholdMs": 10000}
        )
        assert event.threshold_ms == 10000
