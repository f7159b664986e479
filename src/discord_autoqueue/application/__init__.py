"""
Application Layer

Contains use cases, command handlers, and application services.
This layer orchestrates domain objects and infrastructure to fulfill use cases.

Structure:
- commands/: Write operations (PlayTrackCommand)
- services/: Playback coordinator, advance timers, result models
- interfaces/: Port interfaces for infrastructure adapters
"""
