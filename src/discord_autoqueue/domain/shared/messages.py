"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Engine Errors
    ENGINE_SESSION_NOT_ESTABLISHED = "Lavalink session is not established"
    ENGINE_REQUEST_FAILED = "Lavalink {operation} failed: {detail}"
    ENGINE_UNREACHABLE = "Lavalink node is unreachable: {detail}"
    ENGINE_LOAD_FAILED = "Lavalink could not load the query: {detail}"

    # Settings Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    LAVALINK_PASSWORD_REQUIRED = "LAVALINK__PASSWORD must not be empty"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Queue Store
    QUEUE_CREATED = "Created queue for guild %s"
    QUEUE_DELETED = "Deleted queue for guild %s"
    QUEUE_ENQUEUED = "Queued '%s' at position %s in guild %s"

    # Voice Session
    VOICE_STATE_APPLIED = "Voice state update for guild %s (session=%s)"
    VOICE_SERVER_APPLIED = "Voice server update for guild %s (endpoint=%s)"
    VOICE_SESSION_READY = "Voice session ready for guild %s"
    VOICE_SESSION_FORGOTTEN = "Forgot voice session for guild %s"
    VOICE_REFRESH_FAILED = "Failed to push new voice credentials for guild %s: %s"
    VOICE_WAIT_TIMEOUT = "Voice session for guild %s not ready after %.1fs"
    VOICE_CONNECT_FAILED = "Failed to join voice in guild %s: %s"
    VOICE_DISCONNECTED = "Left voice in guild %s"

    # Advance Timer
    TIMER_SCHEDULED = "Scheduled advance for '%s' in guild %s in %.1fs (generation %s)"
    TIMER_CANCELLED = "Cancelled advance timer for guild %s (generation %s)"
    TIMER_FIRED = "Advance timer fired for guild %s (generation %s)"
    TIMER_CALLBACK_ERROR = "Advance timer callback failed for guild %s"

    # Playback Coordinator
    PLAYBACK_NOT_READY = "Cannot start playback in guild %s: voice session not ready"
    PLAYBACK_STARTED = "Started playing '%s' in guild %s"
    PLAYBACK_START_FAILED = "Failed to start '%s' in guild %s: %s"
    PLAYBACK_ADVANCE_FAILED = "Failed to advance to '%s' in guild %s: %s"
    PLAYBACK_ENDED = "Queue exhausted in guild %s, destroying player"
    PLAYBACK_DESTROY_FAILED = "Failed to destroy player in guild %s: %s"
    PLAYBACK_ABANDONED = "Tearing down the engine player in guild %s after a failed advance"
    PLAYBACK_STOPPED = "Stopped playback in guild %s"
    PLAYBACK_EMPTY_QUEUE = "Ignoring %s in guild %s: nothing is playing"
    PLAYBACK_STALE_ADVANCE = "Discarding stale %s for guild %s"
    PLAYBACK_END_IGNORED = "Ignoring track end in guild %s (reason=%s)"
    PLAYBACK_FILTERS_UPDATED = "Updated filters in guild %s: %s"
    PLAYBACK_FILTERS_FAILED = "Failed to update filters in guild %s: %s"
    PLAYBACK_VOLUME_UPDATED = "Updated volume in guild %s to %s"
    PLAYBACK_VOLUME_FAILED = "Failed to update volume in guild %s: %s"
    PLAYBACK_VOLUME_INVALID = "Rejected volume %s for guild %s"
    PLAYBACK_SHUTDOWN = "Cancelled %d advance timer(s) on shutdown"

    # Track Operations
    TRACK_SKIPPED = "Skipped track: %s in guild %s"
    TRACK_LOADED = "Loaded %s result for query '%s' (%d track(s))"
    TRACK_LOAD_EMPTY = "No results for query '%s'"
    TRACK_LOAD_FAILED = "Load failed for query '%s': %s"

    # Lavalink Node
    LAVALINK_CONNECTING = "Connecting to Lavalink websocket %s"
    LAVALINK_READY = "Lavalink session %s ready (resumed=%s)"
    LAVALINK_DISCONNECTED = "Lavalink websocket closed, reconnecting in %.1fs"
    LAVALINK_CONNECT_FAILED = "Lavalink websocket connection failed: %r"
    LAVALINK_EVENT = "Lavalink %s for guild %s"
    LAVALINK_TRACK_EXCEPTION = "Lavalink track exception in guild %s: %s"
    LAVALINK_TRACK_STUCK = "Lavalink track stuck in guild %s after %sms"
    LAVALINK_UNKNOWN_OP = "Ignoring Lavalink op %r"
    LAVALINK_NODE_UPDATE = "Lavalink %s received for guild %s"
    LAVALINK_BAD_PAYLOAD = "Ignoring malformed Lavalink payload: %r"
    LAVALINK_REQUEST = "Lavalink %s %s"

    # Bot Lifecycle
    BOT_STARTING = "Starting bot in %s mode"
    BOT_STARTING_RUN = "Connecting to Discord"
    BOT_STOPPED = "Bot stopped"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down"
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SETTINGS_INVALID = "Invalid configuration:\n%s"
    BOT_CONFIG_OK = "Configuration OK"
    BOT_LAVALINK_NODE = "Lavalink node: %s (websocket %s)"
    BOT_PLAYBACK_CONFIG = "Auto-advance grace %sms, fallback duration %sms"
    BOT_LOGGING_CONFIG_MISSING = "Could not load %s, falling back to basic config"
    BOT_SETUP = "Running bot setup hook"
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_COG_LOADED = "Loaded cog %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_READY = "Logged in as %s (%s)"
    BOT_SYNCED_GUILD = "Synced %d slash command(s) to guild %s"
    BOT_SYNCED_GLOBAL = "Synced %d slash command(s) globally"
    BOT_SYNC_FAILED = "Failed to sync slash commands: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot"
    BOT_SHUTDOWN_COMPLETE = "Shutdown complete"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %.1fs"
    BOT_VOICE_DISCONNECT_FAILED = "Failed to leave voice during shutdown: %s"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error shutting down container: %s"
    BOT_SLASH_COMMAND_ERROR = "Slash command '%s' failed: %s"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Failed to send error message to user"
    BOT_AUTO_ADVANCE_SEND_FAILED = "Failed to announce auto-advance in guild %s: %s"
    BOT_NODE_STARTED = "Started Lavalink node as user %s"


class DiscordUIMessages:
    """User-facing strings sent back to Discord."""

    # Playback results
    NOW_PLAYING = "🎵 Now playing: **{title}** by {author} [{duration}]"
    QUEUED = "🆙 Added to queue: **{title}** by {author} (position {position})"
    SKIPPED_NEXT = "⏭️ Skipped: **{skipped}**\n🎵 Now playing: **{title}** by {author}"
    SKIPPED_ENDED = "⏭️ Skipped: **{skipped}**\n📭 No more songs in queue"
    STOPPED = "⏹️ Stopped playback and cleared the queue."
    FILTERS_UPDATED = "🎛️ Filters updated: {filters}"
    FILTERS_CLEARED = "🎛️ All filters removed, audio reset to normal"
    VOLUME_UPDATED = "🔊 Volume set to {volume}"
    NOW_PLAYING_DETAILS = "🔊 {volume}% · 🎛️ Filters: {filters}"

    # Conditions
    STATE_NOTHING_PLAYING = "Nothing is playing."
    STATE_QUEUE_EMPTY = "📭 No songs in queue"
    STATE_NEED_TO_BE_IN_VOICE = "You need to be in a voice channel first."
    STATE_SERVER_ONLY = "This command can only be used in a server."
    STATE_VERIFY_VOICE_FAILED = "Could not verify your voice state."
    STATE_VOICE_NOT_READY = "❌ Voice state not ready."

    # Errors
    ERROR_NO_RESULTS = "❌ No results found."
    ERROR_LOAD_FAILED = "❌ {error}"
    ERROR_ENGINE = "❌ {error}"
    ERROR_COULD_NOT_JOIN_VOICE = "I couldn't join your voice channel."
    ERROR_INVALID_FILTER_VALUE = "❌ Value out of range for that filter."
    ERROR_INVALID_VOLUME = "❌ Volume must be between 0 and 1000."
    ERROR_OCCURRED = "❌ An error occurred: {error}"

    # Queue listing
    QUEUE_HEADER_NOW_PLAYING = "🎵 Now Playing:"
    QUEUE_HEADER_UP_NEXT = "📝 Up Next:"
    QUEUE_ENTRY = "  [{index}] {title} by {author} [{duration}]"
    QUEUE_MORE = "  ...and {count} more songs"
    QUEUE_FOOTER = "🔊 {volume}% · {count} queued · {duration} pending"
