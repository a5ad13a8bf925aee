"""
Subprocess boundary. Every docker / xauth / xhost call goes through run().
"""

from __future__ import annotations
import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import Mapping, NoReturn, Optional, Sequence

from .outcome import LauncherError

log = logging.getLogger(__name__)

EXIT_NOT_FOUND = 127
EXIT_TIMEOUT   = 124


@dataclass
class CommandResult:
    returncode: int
    stdout:     str = ""
    stderr:     str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def command_exists(name: str) -> bool:
    return shutil.which(name) is not None


def run(
    cmd:     Sequence[str],
    timeout: Optional[float] = 60,
    input:   Optional[str] = None,
    env:     Optional[Mapping[str, str]] = None,
    check:   bool = False,
) -> CommandResult:
    """
    Run a command and capture its output.
    A missing binary or a timeout comes back as a failed CommandResult
    (127 / 124), not an exception, unless check=True.
    """
    cmd = [str(c) for c in cmd]
    log.debug(f"$ {' '.join(cmd)}")

    try:
        p = subprocess.run(
            cmd,
            capture_output = True,
            text           = True,
            input          = input,
            timeout        = timeout,
            env            = dict(env) if env is not None else None,
        )
        result = CommandResult(p.returncode, p.stdout or "", p.stderr or "")
    except FileNotFoundError as e:
        result = CommandResult(EXIT_NOT_FOUND, "", str(e))
    except subprocess.TimeoutExpired:
        result = CommandResult(EXIT_TIMEOUT, "", f"timed out after {timeout}s")

    if not result.ok:
        log.debug(f"  exit {result.returncode}: {result.stderr.strip()[:300]}")
    if check and not result.ok:
        raise LauncherError(
            f"Command failed ({result.returncode}): {' '.join(cmd)}: {result.stderr.strip()[:300]}"
        )
    return result


def run_passthrough(
    cmd:     Sequence[str],
    timeout: Optional[float] = None,
    env:     Optional[Mapping[str, str]] = None,
) -> int:
    """Run with the terminal attached (progress bars, script output). Returns exit code."""
    cmd = [str(c) for c in cmd]
    log.debug(f"$ {' '.join(cmd)}")
    try:
        return subprocess.run(cmd, timeout=timeout, env=dict(env) if env is not None else None).returncode
    except FileNotFoundError:
        return EXIT_NOT_FOUND
    except subprocess.TimeoutExpired:
        return EXIT_TIMEOUT


def exec_replace(cmd: Sequence[str]) -> NoReturn:
    """Replace the current process. Never returns."""
    cmd = [str(c) for c in cmd]
    log.debug(f"exec {' '.join(cmd)}")
    os.execvp(cmd[0], cmd)
