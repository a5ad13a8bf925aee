"""
Container Supervisor
====================

Owns the one named container defined by docker-compose.yml.

  NOT_RUNNING ──pull, up -d──▶ STARTING ──exec echo ready──▶ READY
                              │
                              └── 30 failed checks ──▶ FAILED (fatal)

A container with the same name that is already running is brought down
first, so there is never more than one instance. A half-started container
is left in place on failure; its log tail is printed for diagnosis.
"""

from __future__ import annotations
import enum
import logging
import time
from typing import Callable, Mapping, Optional, Sequence

from . import shell
from .config import LauncherConfig
from .logs import success
from .outcome import LauncherError
from .retry import PollResult, poll

log = logging.getLogger(__name__)

STEP = "supervisor"


class ContainerState(enum.Enum):
    NOT_RUNNING = "not-running"
    STARTING    = "starting"
    READY       = "ready"
    FAILED      = "failed"


def running_container_names() -> list[str]:
    result = shell.run(["docker", "ps", "--format", "{{.Names}}"], timeout=30)
    if not result.ok:
        return []
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def is_container_running(name: str) -> bool:
    return name in running_container_names()


class ContainerSupervisor:
    def __init__(
        self,
        config:      LauncherConfig,
        compose_cmd: Sequence[str],
        env:         Optional[Mapping[str, str]] = None,
        sleep:       Callable[[float], None] = time.sleep,
    ):
        self.config      = config
        self.compose_cmd = list(compose_cmd)
        self.env         = env
        self.sleep       = sleep
        self.state       = ContainerState.NOT_RUNNING

    # ─── Compose ──────────────────────────────────────────────────────────────

    def _compose_cmd(self, *args: str) -> list[str]:
        return [*self.compose_cmd, "-f", str(self.config.compose_path), *args]

    def _compose(self, *args: str, timeout: Optional[float] = None) -> shell.CommandResult:
        return shell.run(self._compose_cmd(*args), timeout=timeout, env=self.env)

    def is_running(self) -> bool:
        return is_container_running(self.config.container_name)

    def stop_existing(self) -> bool:
        """Bring down a running instance. Returns True if one was stopped."""
        if not self.is_running():
            return False
        log.info("Stopping existing container...")
        result = self._compose(
            "down", "--timeout", str(self.config.compose_timeout),
            timeout=self.config.compose_timeout + 60,
        )
        if not result.ok:
            log.warning(f"compose down failed: {result.stderr.strip()[:300]}")
        self.state = ContainerState.NOT_RUNNING
        return True

    def pull(self) -> bool:
        """Pull the image with progress on the terminal. A failure is left for `up` to report."""
        log.info(f"Pulling image (budget {self.config.pull_timeout}s)...")
        code = shell.run_passthrough(
            self._compose_cmd("pull"),
            timeout = self.config.pull_timeout or None,
            env     = self.env,
        )
        if code != 0:
            log.warning(f"compose pull exited with {code} - trying the local image")
        return code == 0

    def logs_tail(self, lines: Optional[int] = None) -> str:
        lines = lines or self.config.log_tail_lines
        result = self._compose("logs", f"--tail={lines}", timeout=60)
        return (result.stdout + result.stderr).strip()

    # ─── Lifecycle ────────────────────────────────────────────────────────────

    def start(self) -> ContainerState:
        log.info("Starting Docker containers...")

        if not self.config.compose_path.is_file():
            raise LauncherError(f"docker-compose.yml not found at {self.config.compose_path}", step=STEP)

        self.stop_existing()
        self.pull()

        log.info(f"Starting container with {' '.join(self.compose_cmd)}...")
        self.state = ContainerState.STARTING
        # image is local after pull(); compose --timeout bounds container shutdown only
        result = self._compose("up", "-d", "--timeout", str(self.config.compose_timeout))
        if not result.ok:
            self.state = ContainerState.FAILED
            log.error("Failed to start containers")
            if result.stderr.strip():
                log.error(result.stderr.strip()[-2000:])
            self._dump_logs()
            raise LauncherError("Failed to start containers", step=STEP)

        return self.wait_ready()

    def ping(self) -> bool:
        return shell.run(
            ["docker", "exec", self.config.container_name, "echo", "ready"],
            timeout=10,
        ).ok

    def wait_ready(self) -> ContainerState:
        log.info("Waiting for container to be ready...")
        result: PollResult = poll(
            self.ping,
            attempts = self.config.ready_attempts,
            delay    = self.config.ready_delay,
            sleep    = self.sleep,
        )
        if result.ok:
            self.state = ContainerState.READY
            success(log, f"Container is ready (attempt {result.attempts})")
            return self.state

        self.state = ContainerState.FAILED
        log.error(f"Container failed to become ready after {result.attempts} attempts")
        self._dump_logs()
        raise LauncherError("Container failed to become ready", step=STEP)

    def _dump_logs(self):
        tail = self.logs_tail()
        if tail:
            log.error(f"Last {self.config.log_tail_lines} log lines:\n{tail}")
