"""
Prerequisite Checker
====================

Runs before anything touches the filesystem or docker:

  FATAL   docker missing, no compose (docker-compose or `docker compose`),
          docker daemon unreachable
  WARN    xhost missing, NVIDIA runtime not registered with docker,
          not a Jetson / device nodes missing, low free disk
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Optional

from . import shell
from .config import LauncherConfig
from .jetson import JetsonInfo, discover_jetson
from .logs import success
from .outcome import StepOutcome

log = logging.getLogger(__name__)

STEP = "prerequisites"


@dataclass
class PrerequisiteReport:
    missing:     list[str] = field(default_factory=list)
    warnings:    list[str] = field(default_factory=list)
    errors:      list[str] = field(default_factory=list)
    compose_cmd: Optional[list[str]] = None
    platform:    Optional[JetsonInfo] = None

    def outcome(self) -> StepOutcome:
        if self.missing:
            return StepOutcome.failure(
                STEP,
                f"Missing required dependencies: {' '.join(self.missing)}",
                ["Please install the missing dependencies and try again"],
            )
        if self.errors:
            return StepOutcome.failure(STEP, self.errors[0], self.errors[1:])
        if self.warnings:
            return StepOutcome.recoverable(STEP, "Prerequisites verified with warnings", self.warnings)
        return StepOutcome.success(STEP, "Prerequisites verified")


def resolve_compose_command() -> Optional[list[str]]:
    """Prefer the standalone docker-compose binary, fall back to the docker plugin."""
    if shell.command_exists("docker-compose"):
        return ["docker-compose"]
    if shell.command_exists("docker") and shell.run(["docker", "compose", "version"], timeout=15).ok:
        return ["docker", "compose"]
    return None


def check_prerequisites(config: LauncherConfig) -> PrerequisiteReport:
    log.info("Verifying prerequisites...")
    report = PrerequisiteReport()

    if not shell.command_exists("docker"):
        report.missing.append("docker")

    report.compose_cmd = resolve_compose_command()
    if report.compose_cmd is None:
        report.missing.append("docker-compose")

    if not shell.command_exists("xhost"):
        _warn(report, "xhost not found - X11 forwarding may not work properly")

    if report.missing:
        log.error(f"Missing required dependencies: {' '.join(report.missing)}")
        log.error("Please install the missing dependencies and try again")
        return report

    info = shell.run(["docker", "info"], timeout=30)
    if not info.ok:
        report.errors.append("Docker daemon is not running")
        log.error("Docker daemon is not running")
        return report

    if "nvidia" not in info.stdout.lower():
        _warn(report, "NVIDIA Docker runtime not detected - GPU acceleration may not work")

    report.platform = discover_jetson(config)
    _check_platform(config, report)

    if not report.warnings:
        success(log, "Prerequisites verified")
    else:
        success(log, f"Prerequisites verified ({len(report.warnings)} warning(s))")
    return report


def _check_platform(config: LauncherConfig, report: PrerequisiteReport):
    info = report.platform
    if info is None:
        return

    if not info.is_jetson:
        _warn(report, "No Jetson platform detected - device passthrough will fail on this host")
    elif info.device_nodes_missing:
        _warn(report, f"Accelerator device nodes missing: {', '.join(info.device_nodes_missing)}")

    if info.free_disk_gb is not None and info.free_disk_gb < config.min_free_disk_gb:
        _warn(
            report,
            f"Only {info.free_disk_gb} GB free under {config.project_root} "
            f"(image pull may need {config.min_free_disk_gb} GB)",
        )


def _warn(report: PrerequisiteReport, message: str):
    report.warnings.append(message)
    log.warning(message)
