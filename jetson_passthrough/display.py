"""
Display Forwarding
==================

Lets GUI applications in the container draw on the host X server:

  1. Resolve DISPLAY, XAUTHORITY (via `xauth info`) and XDG_RUNTIME_DIR
  2. `xhost +local:docker`
  3. Regenerate the shared authority file the compose service mounts:
       xauth nlist $DISPLAY | sed -e 's/^..../ffff/' | xauth -f <file> nmerge -
     The ffff family makes the cookie valid for any hostname, which is what
     a host-networked container presents.

All of it is best-effort. A failure here is a warning; the container still
starts, it just cannot open windows.
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from . import shell
from .config import LauncherConfig
from .logs import success
from .outcome import StepOutcome

log = logging.getLogger(__name__)

STEP = "display"


@dataclass
class DisplaySettings:
    display:         Optional[str]
    xauthority:      Optional[str]
    xdg_runtime_dir: Optional[str]
    xauth_file:      Path
    configured:      bool = False
    warnings:        list[str] = field(default_factory=list)

    def compose_env(self, base: Optional[Mapping[str, str]] = None) -> dict[str, str]:
        """Environment for the compose call only; the host process env is left alone."""
        env = dict(os.environ if base is None else base)
        for key, value in (
            ("DISPLAY",         self.display),
            ("XAUTHORITY",      self.xauthority),
            ("XDG_RUNTIME_DIR", self.xdg_runtime_dir),
        ):
            if value:
                env[key] = value
        return env

    def outcome(self) -> StepOutcome:
        if self.warnings:
            return StepOutcome.recoverable(STEP, "X11 forwarding partially configured", self.warnings)
        return StepOutcome.success(STEP, "X11 configuration completed")


def parse_xauth_info(text: str) -> Optional[str]:
    """Pull the path out of the 'Authority file:' line of `xauth info`."""
    for line in text.splitlines():
        if line.strip().startswith("Authority file"):
            _, _, value = line.partition(":")
            return value.strip() or None
    return None


def wildcard_family(nlist: str) -> str:
    """Rewrite the 4-char family field of every `xauth nlist` entry to ffff."""
    return "".join(
        "ffff" + line[4:] if len(line) >= 4 else line
        for line in nlist.splitlines(keepends=True)
    )


def configure_display(
    config: LauncherConfig,
    env:    Optional[Mapping[str, str]] = None,
) -> DisplaySettings:
    env = os.environ if env is None else env
    log.info("Configuring X11 forwarding...")

    settings = DisplaySettings(
        display         = env.get("DISPLAY") or None,
        xauthority      = env.get("XAUTHORITY") or None,
        xdg_runtime_dir = env.get("XDG_RUNTIME_DIR") or None,
        xauth_file      = Path(config.xauth_file),
    )

    if env.get("SSH_CONNECTION"):
        _warn(settings, "SSH session detected - X11 forwarding may require additional configuration")

    if settings.display:
        log.info(f"DISPLAY={settings.display}")
    else:
        _warn(settings, "DISPLAY variable not set")

    if settings.xauthority:
        log.info(f"XAUTHORITY={settings.xauthority}")
    elif shell.command_exists("xauth"):
        path = parse_xauth_info(shell.run(["xauth", "info"], timeout=10).stdout)
        if path:
            settings.xauthority = path
            log.info(f"XAUTHORITY set to: {path}")

    if not settings.xdg_runtime_dir:
        settings.xdg_runtime_dir = f"/run/user/{os.getuid()}"
        log.info(f"XDG_RUNTIME_DIR set to: {settings.xdg_runtime_dir}")

    if shell.command_exists("xhost") and settings.display:
        _grant_local_access(settings, env)
        _write_xauth_file(settings, config, env)
        settings.configured = True
    else:
        _warn(settings, "X11 forwarding not configured - GUI applications may not work")

    success(log, "X11 configuration completed")
    return settings


def _grant_local_access(settings: DisplaySettings, env: Mapping[str, str]):
    log.info("Configuring xhost access...")
    if not shell.run(["xhost", "+local:docker"], timeout=10, env=settings.compose_env(env)).ok:
        _warn(settings, "Failed to configure xhost")


def _write_xauth_file(settings: DisplaySettings, config: LauncherConfig, env: Mapping[str, str]):
    log.info("Creating X authentication file...")
    path = settings.xauth_file
    try:
        path.unlink(missing_ok=True)
        path.touch()
    except OSError as e:
        _warn(settings, f"Cannot recreate {path}: {e}")
        return

    if shell.command_exists("xauth"):
        child_env = settings.compose_env(env)
        nlist = shell.run(["xauth", "nlist", settings.display], timeout=10, env=child_env)
        merged = nlist.ok and shell.run(
            ["xauth", "-f", str(path), "nmerge", "-"],
            timeout = 10,
            input   = wildcard_family(nlist.stdout),
            env     = child_env,
        ).ok
        if not merged:
            _warn(settings, "Failed to merge X authentication data")

    try:
        os.chmod(path, config.xauth_mode)
    except OSError as e:
        log.debug(f"chmod {oct(config.xauth_mode)} {path} failed: {e}")


def _warn(settings: DisplaySettings, message: str):
    settings.warnings.append(message)
    log.warning(message)
