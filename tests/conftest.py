from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

GUILD_ID = 987654321


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


def make_track(title: str = "Test Track", **overrides):
    """Build a Track with sensible defaults; ``encoded`` defaults from the title."""
    from discord_autoqueue.domain.music.entities import Track

    data = {
        "title": title,
        "author": "Test Artist",
        "duration_ms": 180_000,
        "identifier": title.lower().replace(" ", "-"),
        "uri": f"https://example.com/{title.lower().replace(' ', '-')}",
        "encoded": f"encoded-{title}",
    }
    data.update(overrides)
    return Track(**data)


@pytest.fixture
def track_factory():
    """Factory building tracks by title."""
    return make_track


@pytest.fixture
def sample_track():
    """Create a sample track for testing."""
    return make_track()


@pytest.fixture
def tracks():
    """Three distinct tracks T1, T2, T3."""
    return [make_track(f"T{i}") for i in (1, 2, 3)]


# ============================================================================
# Event Bus Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_global_event_bus():
    """Keep handlers registered in one test from leaking into the next."""
    from discord_autoqueue.domain.shared.events import reset_event_bus

    reset_event_bus()
    yield
    reset_event_bus()


@pytest.fixture
def event_bus():
    from discord_autoqueue.domain.shared.events import EventBus

    return EventBus()


# ============================================================================
# Coordinator Fixtures
# ============================================================================


@pytest.fixture
def engine():
    """AudioEngine double whose calls succeed immediately."""
    from discord_autoqueue.application.interfaces.audio_engine import AudioEngine

    mock = MagicMock(spec=AudioEngine)
    mock.load_track = AsyncMock()
    mock.update_player = AsyncMock()
    mock.update_player_properties = AsyncMock()
    mock.destroy_player = AsyncMock()
    return mock


@pytest.fixture
def queue_store():
    from discord_autoqueue.domain.music.queue_store import GuildQueueStore

    return GuildQueueStore()


@pytest.fixture
def voice_tracker():
    from discord_autoqueue.domain.voice.tracker import VoiceSessionTracker

    return VoiceSessionTracker()


@pytest.fixture
def ready_voice(voice_tracker):
    """Voice tracker with a complete session for GUILD_ID."""
    voice_tracker.apply_state_update(GUILD_ID, "session-abc")
    voice_tracker.apply_server_update(GUILD_ID, "token-xyz", "us-east1.discord.media")
    return voice_tracker


@pytest.fixture
def timers():
    from discord_autoqueue.application.services.advance_timer import AdvanceTimerRegistry

    return AdvanceTimerRegistry(grace_ms=1000)


@pytest_asyncio.fixture
async def coordinator(queue_store, ready_voice, timers, engine, event_bus):
    from discord_autoqueue.application.services.playback_coordinator import PlaybackCoordinator

    coord = PlaybackCoordinator(
        queue_store=queue_store,
        voice_tracker=ready_voice,
        timers=timers,
        engine=engine,
        event_bus=event_bus,
    )
    yield coord
    timers.cancel_all()

