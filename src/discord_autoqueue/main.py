#!/usr/bin/env python3
"""Command-line entry point: configure logging, validate settings, run the bot."""

from __future__ import annotations

import argparse
import json
import logging
import logging.config
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from discord_autoqueue.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_autoqueue.config.settings import Settings

LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"
FALLBACK_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

logger = logging.getLogger(__name__)


def load_logging_config(path: Path) -> dict[str, Any] | None:
    """Read a ``logging.config.dictConfig`` document, or None if it is unusable."""
    try:
        with open(path) as f:
            config = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        return None
    return config if isinstance(config, dict) else None


def setup_logging(log_level: str = "INFO", *, config_path: Path = LOGGING_CONFIG_PATH) -> None:
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    config = load_logging_config(config_path)
    if config is not None:
        try:
            logging.config.dictConfig(config)
        except (ValueError, TypeError):
            config = None

    if config is None:
        logging.basicConfig(
            level=resolved_level, format=FALLBACK_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"
        )
        logger.warning(LogTemplates.BOT_LOGGING_CONFIG_MISSING, config_path)

    logging.getLogger().setLevel(resolved_level)


def check_settings(settings: Settings) -> list[str]:
    """Return the problems that would stop the bot from reaching Discord or Lavalink."""
    problems = []
    if not settings.discord.token.get_secret_value():
        problems.append(ErrorMessages.DISCORD_TOKEN_REQUIRED)
    if not settings.lavalink.password.get_secret_value():
        problems.append(ErrorMessages.LAVALINK_PASSWORD_REQUIRED)
    return problems


def log_startup(settings: Settings) -> None:
    logger.info(LogTemplates.BOT_STARTING, settings.environment)
    lavalink = settings.lavalink
    logger.info(LogTemplates.BOT_LAVALINK_NODE, lavalink.rest_url, lavalink.ws_url)
    logger.info(
        LogTemplates.BOT_PLAYBACK_CONFIG,
        settings.playback.grace_ms,
        settings.playback.fallback_duration_ms,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="discord-autoqueue",
        description="Run the Discord auto-queue music bot against a Lavalink v4 node.",
    )
    parser.add_argument(
        "--log-level",
        "-l",
        default=None,
        help="override LOG_LEVEL from the environment (e.g. DEBUG)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="validate configuration and exit without connecting",
    )
    return parser


def run(settings: Settings) -> int:
    from discord_autoqueue.config.container import create_container
    from discord_autoqueue.infrastructure.discord.bot import create_bot

    container = create_container(settings)
    bot = create_bot(container, settings)

    try:
        logger.info(LogTemplates.BOT_STARTING_RUN)
        bot.run_with_graceful_shutdown(settings.discord.token.get_secret_value())
        logger.info(LogTemplates.BOT_STOPPED)
        return 0
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
        return 0
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1


def main(argv: Sequence[str] = ()) -> int:
    args = build_parser().parse_args(list(argv))

    from discord_autoqueue.config.settings import get_settings

    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging(args.log_level or "INFO")
        logger.error(LogTemplates.BOT_SETTINGS_INVALID, e)
        return 1

    setup_logging(args.log_level or settings.log_level)

    problems = check_settings(settings)
    for problem in problems:
        logger.error(problem)
    if problems:
        return 1

    log_startup(settings)
    if args.check:
        logger.info(LogTemplates.BOT_CONFIG_OK)
        return 0

    return run(settings)


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
    cli()  # pragma: no cover
