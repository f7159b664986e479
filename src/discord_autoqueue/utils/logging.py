"""Console logging formatter used by ``logging_config.json``."""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

PACKAGE_PREFIX = "discord_autoqueue."


class ColoredFormatter(logging.Formatter):
    """Colors the levelname and shortens this package's logger names.

    ``discord_autoqueue.application.services.playback_coordinator`` is shown
    as ``application.services.playback_coordinator``; third-party logger names
    are left alone. Colors are disabled when ``NO_COLOR`` is set or the
    stream is not a TTY.
    """

    COLORS: dict[int, str] = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        *args,
        stream: TextIO | None = None,
        strip_prefix: str | None = PACKAGE_PREFIX,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._stream = stream
        self._strip_prefix = strip_prefix

    def _use_color(self) -> bool:
        if os.environ.get("NO_COLOR") is not None:
            return False
        stream = self._stream or sys.stdout
        return hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        use_color = self._use_color()
        shorten = bool(self._strip_prefix) and record.name.startswith(self._strip_prefix)
        if not (use_color or shorten):
            return super().format(record)

        # Other handlers share the record, so edit a copy
        record = logging.makeLogRecord(record.__dict__)
        if shorten:
            record.name = record.name[len(self._strip_prefix) :]
        if use_color:
            color = self.COLORS.get(record.levelno, "")
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)
