"""Banner, summary box and the final `docker exec -it` hand-off."""

from __future__ import annotations
import logging
import sys
import time
from typing import NoReturn

from . import shell
from .config import LauncherConfig
from .logs import BLUE, CYAN, GREEN, NC, WHITE, colors_enabled

log = logging.getLogger(__name__)

BANNER = r"""
       _      _                    ____ ____  _   _
      | | ___| |_ ___  ___  _ __  / ___|  _ \| | | |
   _  | |/ _ \ __/ __|/ _ \| '_ \| |  _| |_) | | | |
  | |_| |  __/ |_\__ \ (_) | | | | |_| |  __/| |_| |
   \___/ \___|\__|___/\___/|_| |_|\____|_|    \___/
"""

BOX_WIDTH = 64


def _paint(color: str, text: str, stream) -> str:
    return f"{color}{text}{NC}" if colors_enabled(stream) else text


def print_banner(stream=None, pause: float = 0.0):
    stream = stream or sys.stderr
    print(_paint(BLUE, BANNER, stream), file=stream)
    print(_paint(WHITE, "                 GPU Passthrough Environment", stream), file=stream)
    print(file=stream)
    print(_paint(CYAN, "Initializing AI Development Environment...\n", stream), file=stream)
    if pause:
        time.sleep(pause)


def summary_lines(config: LauncherConfig) -> list[str]:
    rows = [
        f"Container: {config.container_name}",
        "GPU Support: Enabled",
        "Working Directory: /app",
        "Mounted Volumes:",
        *(f"  ./{d} → /app/{d}" for d in config.project_dirs),
    ]
    top    = "╔" + "═" * BOX_WIDTH + "╗"
    sep    = "╠" + "═" * BOX_WIDTH + "╣"
    bottom = "╚" + "═" * BOX_WIDTH + "╝"
    title  = "Container Successfully Started!".center(BOX_WIDTH)
    return [top, f"║{title}║", sep, *(f"║  {r:<{BOX_WIDTH - 2}}║" for r in rows), bottom]


def print_summary(config: LauncherConfig, stream=None):
    stream = stream or sys.stderr
    print(file=stream)
    for line in summary_lines(config):
        print(_paint(GREEN, line, stream), file=stream)
    print(file=stream)


def connect(config: LauncherConfig) -> NoReturn:
    log.info("Connecting to container...")
    print_summary(config)
    shell.exec_replace(["docker", "exec", "-it", config.container_name, config.shell])
