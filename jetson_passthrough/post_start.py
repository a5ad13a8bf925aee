"""Post-start initialization: ONNX Runtime GPU, then any init-*.sh in the project root."""

from __future__ import annotations
import logging
import os
import stat
from pathlib import Path
from typing import Optional

from . import shell
from .config import LauncherConfig
from .logs import success
from .onnx_installer import OnnxRuntimeInstaller
from .outcome import LauncherError, StepOutcome

log = logging.getLogger(__name__)

STEP = "post-start"


def find_init_scripts(config: LauncherConfig) -> list[Path]:
    return sorted(p for p in Path(config.project_root).glob(config.init_script_glob) if p.is_file())


def _ensure_executable(path: Path):
    mode = path.stat().st_mode
    if not mode & stat.S_IXUSR:
        os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def run_post_start_scripts(
    config:    LauncherConfig,
    installer: Optional[OnnxRuntimeInstaller] = None,
) -> list[StepOutcome]:
    """
    Each item is best-effort: a failure is logged as a warning and the
    remaining items still run. Returns one outcome per item.
    """
    log.info("Running post-start initialization...")
    outcomes = []

    if config.install_onnx:
        installer = installer or OnnxRuntimeInstaller(config)
        try:
            installer.install()
            outcomes.append(StepOutcome.success("onnxruntime", "ONNX Runtime GPU installation completed"))
            success(log, "ONNX Runtime GPU installation completed")
        except LauncherError as e:
            outcomes.append(StepOutcome.recoverable("onnxruntime", str(e)))
            log.warning(f"ONNX Runtime GPU installation failed - continuing anyway ({e})")
    else:
        log.warning("ONNX Runtime GPU installation skipped")
        log.warning("To install later, run: jetson-init")

    for script in find_init_scripts(config):
        log.info(f"Running initialization script: {script.name}")
        try:
            _ensure_executable(script)
        except OSError as e:
            log.debug(f"chmod +x {script} failed: {e}")

        code = shell.run_passthrough([str(script)])
        if code == 0:
            outcomes.append(StepOutcome.success(script.name, "completed"))
        else:
            outcomes.append(StepOutcome.recoverable(script.name, f"exited with {code}"))
            log.warning(f"Script {script.name} failed (exit {code})")

    return outcomes
