"""
Console Logging
===============

Color-coded, timestamped console output:

  [2025-07-11 10:42:01] Verifying prerequisites...
  [SUCCESS] 2025-07-11 10:42:02 Prerequisites verified
  [WARN] 2025-07-11 10:42:02 xhost not found - X11 forwarding may not work properly
  [ERROR] 2025-07-11 10:42:03 Docker daemon is not running

Everything goes to stderr so the interactive session owns stdout.
"""

from __future__ import annotations
import logging
import os
import sys
from typing import Optional, Union

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

DATEFMT = "%Y-%m-%d %H:%M:%S"

# ─── ANSI colors ──────────────────────────────────────────────────────────────

RED    = "\033[0;31m"
GREEN  = "\033[0;32m"
YELLOW = "\033[1;33m"
BLUE   = "\033[0;34m"
CYAN   = "\033[0;36m"
WHITE  = "\033[1;37m"
NC     = "\033[0m"


class ColorFormatter(logging.Formatter):
    """Severity prefix + timestamp, colored when the stream is a terminal."""

    PREFIXES = {
        logging.ERROR:    ("[ERROR]", RED),
        logging.CRITICAL: ("[ERROR]", RED),
        logging.WARNING:  ("[WARN]", YELLOW),
        SUCCESS:          ("[SUCCESS]", GREEN),
    }

    def __init__(self, use_color: bool = True, debug: bool = False):
        super().__init__(datefmt=DATEFMT)
        self.use_color = use_color
        self.debug     = debug

    def format(self, record: logging.LogRecord) -> str:
        stamp   = self.formatTime(record, self.datefmt)
        message = record.getMessage()
        if self.debug:
            message = f"{record.name}:{record.lineno} {message}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        prefix = self.PREFIXES.get(record.levelno)
        if prefix is None:
            return f"[{stamp}] {message}"

        tag, color = prefix
        line = f"{tag} {stamp} {message}"
        return f"{color}{line}{NC}" if self.use_color else line


def colors_enabled(stream) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


def setup_logging(level: Optional[Union[int, str]] = None, stream=None) -> None:
    """Configure the root logger once. Level defaults to JETSON_LOG_LEVEL or INFO."""
    if stream is None:
        stream = sys.stderr
    if level is None:
        level = os.environ.get("JETSON_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColorFormatter(use_color=colors_enabled(stream), debug=level == logging.DEBUG))
    root.addHandler(handler)

    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))


def success(logger: logging.Logger, message: str, *args) -> None:
    logger.log(SUCCESS, message, *args)
