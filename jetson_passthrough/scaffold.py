"""Project directory scaffolding. Safe to run any number of times."""

from __future__ import annotations
import logging
from pathlib import Path

from .config import LauncherConfig
from .logs import success

log = logging.getLogger(__name__)

MARKER = ".gitkeep"


def init_project_structure(config: LauncherConfig) -> list[Path]:
    """
    Create the working directories mounted into the container.
    Returns the directories that did not exist before this call.
    An empty directory gets a .gitkeep marker so it survives in git.
    """
    log.info("Checking project directory structure...")

    created = []
    for path in config.dir_paths():
        if not path.is_dir():
            path.mkdir(parents=True, exist_ok=True)
            created.append(path)
            log.info(f"Created directory: {path.name}")
        else:
            log.info(f"Directory already exists: {path.name}")

    for path in config.dir_paths():
        if not any(path.iterdir()):
            (path / MARKER).touch()

    success(log, "Project structure verified")
    return created
