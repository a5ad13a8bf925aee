"""
Launcher CLI
============

Entry points:

  jetson-build   prerequisites → directories → X11 → compose up → readiness
                 → post-start installers → interactive shell
  jetson-init    ONNX Runtime GPU installer against the running container

No flag is required. Exit codes: 0 success, 1 any fatal condition,
130 interrupted.
"""

from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .config import CONFIG_PATH, LauncherConfig
from .display import configure_display
from .logs import setup_logging
from .onnx_installer import OnnxRuntimeInstaller
from .outcome import LauncherError, Severity, StepOutcome
from .post_start import run_post_start_scripts
from .prerequisites import check_prerequisites
from .scaffold import init_project_structure
from .session import connect, print_banner
from .supervisor import ContainerSupervisor

log = logging.getLogger("jetson_passthrough")


# ─── Arguments ────────────────────────────────────────────────────────────────

def _common_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", type=Path, default=os.getenv("JETSON_CONFIG", str(CONFIG_PATH)),
                        help="JSON config file (default: ~/.jetson-passthrough/config.json)")
    parser.add_argument("--project-root", type=Path, default=None,
                        help="Directory holding docker-compose.yml (default: current directory)")
    parser.add_argument("--container", dest="container_name", default=None,
                        help="Container name from docker-compose.yml")
    parser.add_argument("--host-download", action="store_true", default=None,
                        help="Download the ONNX Runtime wheel on the host and docker cp it in")
    parser.add_argument("--log-level", default=os.getenv("JETSON_LOG_LEVEL", "INFO"),
                        help="DEBUG, INFO, WARNING, ERROR (default: INFO)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_parser() -> argparse.ArgumentParser:
    parser = _common_parser("Bring up the Jetson GPU passthrough container")
    parser.add_argument("--no-banner", action="store_true",
                        help="Skip the startup banner")
    parser.add_argument("--no-attach", action="store_true",
                        help="Exit after startup instead of opening a shell in the container")
    parser.add_argument("--skip-onnx", action="store_true",
                        help="Do not install ONNX Runtime GPU after startup")
    return parser


def init_parser() -> argparse.ArgumentParser:
    return _common_parser("Install ONNX Runtime GPU into the running Jetson container")


def _load_config(args: argparse.Namespace, **extra) -> LauncherConfig:
    try:
        return LauncherConfig.from_sources(
            path           = args.config,
            project_root   = args.project_root.resolve() if args.project_root else None,
            container_name = args.container_name,
            host_download  = args.host_download,
            **extra,
        )
    except (OSError, ValueError) as e:
        raise LauncherError(f"Invalid configuration: {e}", step="config") from e


# ─── Commands ─────────────────────────────────────────────────────────────────

def build(config: LauncherConfig, attach: bool = True) -> int:
    try:
        os.chdir(config.project_root)
    except OSError as e:
        raise LauncherError(f"Cannot enter project root: {e}", step="config") from e

    report = check_prerequisites(config)
    outcomes = [report.outcome().raise_if_fatal()]

    try:
        init_project_structure(config)
    except OSError as e:
        raise LauncherError(f"Cannot create project directories: {e}", step="scaffold") from e

    display = configure_display(config)
    outcomes.append(display.outcome())

    supervisor = ContainerSupervisor(
        config      = config,
        compose_cmd = report.compose_cmd,
        env         = display.compose_env(),
    )
    supervisor.start()

    outcomes.extend(run_post_start_scripts(config))
    report_warnings(outcomes)

    if attach:
        connect(config)
    return 0


def report_warnings(outcomes: list[StepOutcome]) -> int:
    """Repeat the non-fatal problems once more before the hand-off."""
    recoverable = [o for o in outcomes if o.severity is Severity.RECOVERABLE]
    for o in recoverable:
        log.warning(f"{o.name}: {o.message}")
        for detail in o.details:
            log.warning(f"  - {detail}")
    if recoverable:
        log.warning(f"Started with {len(recoverable)} warning(s)")
    return len(recoverable)


def init(config: LauncherConfig) -> int:
    OnnxRuntimeInstaller(config).install()
    return 0


def _run(fn) -> int:
    try:
        return fn()
    except LauncherError as e:
        where = f" [{e.step}]" if e.step else ""
        log.error(f"Launcher failed{where}: {e}")
        return 1
    except KeyboardInterrupt:
        log.warning("Interrupted")
        return 130


# ─── Entry Points ─────────────────────────────────────────────────────────────

def build_main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    if not args.no_banner:
        print_banner(pause=1.0 if sys.stderr.isatty() else 0.0)

    return _run(
        lambda: build(
            _load_config(args, install_onnx=False if args.skip_onnx else None),
            attach=not args.no_attach,
        )
    )


def init_main(argv: Optional[Sequence[str]] = None) -> int:
    args = init_parser().parse_args(argv)
    setup_logging(args.log_level)
    return _run(lambda: init(_load_config(args)))


if __name__ == "__main__":
    raise SystemExit(build_main())
