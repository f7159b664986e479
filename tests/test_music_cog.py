"""
Unit Tests for MusicCog

Tests for all slash commands:
- /play, /skip, /stop, /queue, /nowplaying, /filter, /clearfilter, /volume
- guild-only checks
- announcements of unattended advances via the event bus

The cog runs against a real PlaybackCoordinator over a mocked audio engine,
so replies reflect actual queue transitions.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import discord
import pytest

from discord_autoqueue.application.services.playback_models import PlaybackResult
from discord_autoqueue.domain.music.value_objects import AdvanceTrigger, TrackEndReason
from discord_autoqueue.domain.shared.events import PlaybackAdvanced
from discord_autoqueue.domain.shared.messages import DiscordUIMessages, ErrorMessages
from discord_autoqueue.infrastructure.discord.cogs.music_cog import MusicCog, setup

GUILD_ID = 987654321
ENSURE_VOICE_PATH = "discord_autoqueue.infrastructure.discord.cogs.music_cog.ensure_voice"

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_bot():
    bot = MagicMock()
    bot.add_cog = AsyncMock()
    return bot


@pytest.fixture
def mock_container(coordinator, ready_voice, event_bus):
    container = MagicMock()
    container.playback_coordinator = coordinator
    container.event_bus = event_bus
    container.voice_tracker = ready_voice
    container.play_track_handler = MagicMock()
    container.play_track_handler.handle = AsyncMock()
    return container


@pytest.fixture
def music_cog(mock_bot, mock_container):
    return MusicCog(mock_bot, mock_container)


@pytest.fixture
def mock_interaction():
    """Create a mock Discord Interaction."""
    interaction = MagicMock(spec=discord.Interaction)
    interaction.response = MagicMock()
    interaction.response.is_done.return_value = False
    interaction.response.send_message = AsyncMock()
    interaction.response.defer = AsyncMock()
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()

    interaction.guild = MagicMock()
    interaction.guild.id = GUILD_ID
    interaction.guild.voice_client = None
    interaction.channel = MagicMock()
    interaction.channel.send = AsyncMock()

    member = MagicMock(spec=discord.Member)
    member.voice = MagicMock()
    interaction.user = member
    return interaction


def _reply(interaction) -> str:
    return interaction.response.send_message.call_args[0][0]


async def _play(coordinator, tracks):
    for track in tracks:
        await coordinator.enqueue_or_start(GUILD_ID, track)


# =============================================================================
# /play
# =============================================================================


class TestPlayCommand:
    @pytest.mark.asyncio
    async def test_play_forwards_query_and_replies(self, music_cog, mock_container, mock_interaction, sample_track):
        mock_container.play_track_handler.handle.return_value = PlaybackResult.now_playing(sample_track)

        with patch(ENSURE_VOICE_PATH, new=AsyncMock(return_value=True)):
            await music_cog.play.callback(music_cog, mock_interaction, "test song")

        mock_interaction.response.defer.assert_awaited_once()
        command = mock_container.play_track_handler.handle.call_args[0][0]
        assert command.guild_id == GUILD_ID
        assert command.query == "test song"
        assert command.response_target is mock_interaction.channel
        message = mock_interaction.followup.send.call_args[0][0]
        assert "Test Track" in message

    @pytest.mark.asyncio
    async def test_play_stops_when_voice_guard_fails(self, music_cog, mock_container, mock_interaction):
        with patch(ENSURE_VOICE_PATH, new=AsyncMock(return_value=False)):
            await music_cog.play.callback(music_cog, mock_interaction, "test song")

        mock_container.play_track_handler.handle.assert_not_awaited()
        mock_interaction.followup.send.assert_not_awaited()


# =============================================================================
# /skip and /stop
# =============================================================================


class TestSkipStopCommands:
    @pytest.mark.asyncio
    async def test_skip_advances(self, music_cog, coordinator, mock_interaction, tracks):
        await _play(coordinator, tracks[:2])

        await music_cog.skip.callback(music_cog, mock_interaction)

        assert "T1" in _reply(mock_interaction)
        assert "T2" in _reply(mock_interaction)
        assert coordinator.get_snapshot(GUILD_ID).now_playing is tracks[1]

    @pytest.mark.asyncio
    async def test_skip_with_nothing_playing(self, music_cog, mock_interaction, engine):
        await music_cog.skip.callback(music_cog, mock_interaction)

        assert _reply(mock_interaction) == DiscordUIMessages.STATE_NOTHING_PLAYING
        engine.update_player.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_skip_outside_guild(self, music_cog, mock_interaction):
        mock_interaction.guild = None

        await music_cog.skip.callback(music_cog, mock_interaction)

        mock_interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.STATE_SERVER_ONLY, ephemeral=True
        )

    @pytest.mark.asyncio
    async def test_stop_clears_and_leaves_voice(self, music_cog, coordinator, mock_interaction, engine, tracks):
        await _play(coordinator, tracks)
        voice_client = MagicMock()
        voice_client.disconnect = AsyncMock()
        mock_interaction.guild.voice_client = voice_client

        await music_cog.stop.callback(music_cog, mock_interaction)

        assert _reply(mock_interaction) == DiscordUIMessages.STOPPED
        assert coordinator.get_snapshot(GUILD_ID) is None
        engine.destroy_player.assert_awaited_with(GUILD_ID)
        voice_client.disconnect.assert_awaited_once_with(force=True)

    @pytest.mark.asyncio
    async def test_stop_when_idle(self, music_cog, mock_interaction):
        await music_cog.stop.callback(music_cog, mock_interaction)

        assert _reply(mock_interaction) == DiscordUIMessages.STATE_NOTHING_PLAYING


# =============================================================================
# /queue and /nowplaying
# =============================================================================


class TestQueueCommands:
    @pytest.mark.asyncio
    async def test_queue_lists_tracks(self, music_cog, coordinator, mock_interaction, tracks):
        await _play(coordinator, tracks)

        await music_cog.queue.callback(music_cog, mock_interaction)

        reply = _reply(mock_interaction)
        assert DiscordUIMessages.QUEUE_HEADER_NOW_PLAYING in reply
        assert "T2" in reply
        assert "T3" in reply

    @pytest.mark.asyncio
    async def test_queue_empty(self, music_cog, mock_interaction):
        await music_cog.queue.callback(music_cog, mock_interaction)

        assert _reply(mock_interaction) == DiscordUIMessages.STATE_QUEUE_EMPTY

    @pytest.mark.asyncio
    async def test_nowplaying_shows_volume_and_filters(self, music_cog, coordinator, mock_interaction, sample_track):
        await _play(coordinator, [sample_track])
        await coordinator.update_filters(GUILD_ID, {"timescale": {"speed": 1.2}})

        await music_cog.nowplaying.callback(music_cog, mock_interaction)

        reply = _reply(mock_interaction)
        assert "Test Track" in reply
        assert "100%" in reply
        assert "timescale" in reply
        assert f"<{sample_track.uri}>" in reply

    @pytest.mark.asyncio
    async def test_nowplaying_when_idle(self, music_cog, mock_interaction):
        await music_cog.nowplaying.callback(music_cog, mock_interaction)

        mock_interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.STATE_NOTHING_PLAYING, ephemeral=True
        )


# =============================================================================
# /filter, /clearfilter, /volume
# =============================================================================


class TestPlayerPropertyCommands:
    @pytest.mark.asyncio
    async def test_filter_applies_without_restart(self, music_cog, coordinator, mock_interaction, engine, sample_track):
        await _play(coordinator, [sample_track])

        await music_cog.filter.callback(music_cog, mock_interaction, "speed", 1.25)

        engine.update_player_properties.assert_awaited_once_with(
            GUILD_ID, filters={"timescale": {"speed": 1.25}}
        )
        assert engine.update_player.await_count == 1
        assert "timescale" in _reply(mock_interaction)

    @pytest.mark.asyncio
    async def test_filters_accumulate(self, music_cog, coordinator, mock_interaction, sample_track):
        await _play(coordinator, [sample_track])

        await music_cog.filter.callback(music_cog, mock_interaction, "speed", 1.25)
        await music_cog.filter.callback(music_cog, mock_interaction, "rotation", 0.2)

        assert set(coordinator.get_snapshot(GUILD_ID).filters) == {"timescale", "rotation"}

    @pytest.mark.asyncio
    async def test_filter_out_of_range(self, music_cog, mock_interaction, engine):
        await music_cog.filter.callback(music_cog, mock_interaction, "speed", 10.0)

        mock_interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.ERROR_INVALID_FILTER_VALUE, ephemeral=True
        )
        engine.update_player_properties.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_clearfilter(self, music_cog, coordinator, mock_interaction, sample_track):
        await _play(coordinator, [sample_track])
        await coordinator.update_filters(GUILD_ID, {"rotation": {"rotationHz": 0.2}})

        await music_cog.clearfilter.callback(music_cog, mock_interaction)

        assert _reply(mock_interaction) == DiscordUIMessages.FILTERS_CLEARED
        assert coordinator.get_snapshot(GUILD_ID).filters == {}

    @pytest.mark.asyncio
    async def test_volume(self, music_cog, coordinator, mock_interaction, engine, sample_track):
        await _play(coordinator, [sample_track])

        await music_cog.volume.callback(music_cog, mock_interaction, 150)

        engine.update_player_properties.assert_awaited_once_with(GUILD_ID, volume=150)
        assert _reply(mock_interaction) == DiscordUIMessages.VOLUME_UPDATED.format(volume=150)

    @pytest.mark.asyncio
    async def test_volume_out_of_range_is_reported(self, music_cog, coordinator, mock_interaction, engine, sample_track):
        await _play(coordinator, [sample_track])

        await music_cog.volume.callback(music_cog, mock_interaction, 5000)

        assert _reply(mock_interaction) == DiscordUIMessages.ERROR_INVALID_VOLUME
        engine.update_player_properties.assert_not_awaited()


# =============================================================================
# Auto-advance announcements
# =============================================================================


def _advanced(trigger: AdvanceTrigger, target, message: str = "▶️ Now playing: **T2**") -> PlaybackAdvanced:
    return PlaybackAdvanced(
        guild_id=GUILD_ID,
        trigger=trigger,
        message=message,
        previous_title="T1",
        next_title="T2",
        response_target=target,
    )


def _channel() -> MagicMock:
    target = MagicMock()
    target.send = AsyncMock()
    return target


class TestAutoAdvance:
    @pytest.mark.asyncio
    async def test_cog_load_subscribes_to_advances(self, music_cog, coordinator, engine, tracks):
        await music_cog.cog_load()
        target = _channel()
        await coordinator.enqueue_or_start(GUILD_ID, tracks[0], target)
        await coordinator.enqueue_or_start(GUILD_ID, tracks[1])

        await coordinator.handle_track_end(
            GUILD_ID,
            tracks[0].encoded,
            TrackEndReason.FINISHED,
            play_id=engine.update_player.call_args.kwargs["play_id"],
        )

        target.send.assert_awaited_once()
        assert "T2" in target.send.call_args[0][0]

    @pytest.mark.asyncio
    async def test_skip_is_not_announced_twice(self, music_cog, coordinator, mock_interaction, tracks):
        await music_cog.cog_load()
        target = _channel()
        await coordinator.enqueue_or_start(GUILD_ID, tracks[0], target)
        await coordinator.enqueue_or_start(GUILD_ID, tracks[1])

        await music_cog.skip.callback(music_cog, mock_interaction)

        mock_interaction.response.send_message.assert_awaited_once()
        target.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cog_unload_unsubscribes(self, music_cog, event_bus):
        await music_cog.cog_load()
        await music_cog.cog_unload()
        target = _channel()

        await event_bus.publish(_advanced(AdvanceTrigger.TIMER, target))

        target.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_send_failure_is_logged(self, music_cog, caplog):
        target = MagicMock()
        target.send = AsyncMock(
            side_effect=discord.HTTPException(MagicMock(status=403, reason="Forbidden"), "Missing Access")
        )

        await music_cog._on_playback_advanced(_advanced(AdvanceTrigger.ENGINE, target))

        assert f"Failed to announce auto-advance in guild {GUILD_ID}" in caplog.text

    @pytest.mark.asyncio
    async def test_no_target_is_ignored(self, music_cog):
        await music_cog._on_playback_advanced(_advanced(AdvanceTrigger.TIMER, None))


# =============================================================================
# setup()
# =============================================================================


@pytest.mark.asyncio
async def test_setup_adds_cog(mock_bot, mock_container):
    mock_bot.container = mock_container

    await setup(mock_bot)

    mock_bot.add_cog.assert_awaited_once()
    assert isinstance(mock_bot.add_cog.call_args[0][0], MusicCog)


@pytest.mark.asyncio
async def test_setup_without_container():
    bot = MagicMock(spec=["add_cog"])

    with pytest.raises(RuntimeError, match=ErrorMessages.CONTAINER_NOT_FOUND):
        await setup(bot)
