"""
Jetson Discovery
================

Identifies the host board before the container is started:
  - L4T release from /etc/nv_tegra_release (mounted into the container too)
  - Board model from /proc/device-tree/model
  - Which of the accelerator device nodes the compose service maps exist
  - Total memory and free disk under the project root (psutil)

Every lookup is best-effort. A desktop / CI host simply reports model=None
and all device nodes missing; the prerequisite checker turns that into
warnings, never a failure.
"""

from __future__ import annotations
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import psutil  # type: ignore

from .config import LauncherConfig

log = logging.getLogger(__name__)

TEGRA_RELEASE_FILE = Path("/etc/nv_tegra_release")
DEVICE_MODEL_FILE  = Path("/proc/device-tree/model")

_L4T_RE = re.compile(r"#\s*R(\d+)\s*\(release\),\s*REVISION:\s*([\d.]+)")


# ─── Jetson Info ──────────────────────────────────────────────────────────────

@dataclass
class JetsonInfo:
    model:                 Optional[str]      # e.g. "NVIDIA Jetson AGX Orin Developer Kit"
    l4t_release:           Optional[tuple]    # (35, "4.1") → L4T R35.4.1 / JetPack 5.1.2
    device_nodes_present:  list[str] = field(default_factory=list)
    device_nodes_missing:  list[str] = field(default_factory=list)
    total_memory_gb:       float = 0.0
    free_disk_gb:          Optional[float] = None

    @property
    def is_jetson(self) -> bool:
        return self.l4t_release is not None or bool(self.model and "jetson" in self.model.lower())

    @property
    def l4t_version(self) -> Optional[str]:
        if self.l4t_release is None:
            return None
        major, revision = self.l4t_release
        return f"R{major}.{revision}"


def parse_l4t_release(text: str) -> Optional[tuple]:
    """'# R35 (release), REVISION: 4.1, GCID: ...' → (35, '4.1')"""
    m = _L4T_RE.search(text or "")
    if not m:
        return None
    return int(m.group(1)), m.group(2)


# ─── Discovery ────────────────────────────────────────────────────────────────

def discover_jetson(config: LauncherConfig) -> JetsonInfo:
    present, missing = [], []
    for node in config.device_nodes:
        (present if os.path.exists(node) else missing).append(node)

    info = JetsonInfo(
        model                = _read_model(),
        l4t_release          = _read_l4t_release(),
        device_nodes_present = present,
        device_nodes_missing = missing,
        total_memory_gb      = _total_memory_gb(),
        free_disk_gb         = _free_disk_gb(Path(config.project_root)),
    )

    if info.is_jetson:
        log.info(f"Platform: {info.model or 'Jetson'} (L4T {info.l4t_version or 'unknown'})")
    else:
        log.debug("No Jetson platform detected")
    return info


def _read_model() -> Optional[str]:
    try:
        return DEVICE_MODEL_FILE.read_text(errors="ignore").strip("\x00 \n") or None
    except OSError:
        return None


def _read_l4t_release() -> Optional[tuple]:
    try:
        return parse_l4t_release(TEGRA_RELEASE_FILE.read_text(errors="ignore"))
    except OSError:
        return None


def _total_memory_gb() -> float:
    try:
        return round(psutil.virtual_memory().total / (1024 ** 3), 1)
    except Exception as e:
        log.debug(f"Memory query unavailable: {e}")
        return 0.0


def _free_disk_gb(path: Path) -> Optional[float]:
    try:
        return round(psutil.disk_usage(str(path)).free / (1024 ** 3), 1)
    except Exception as e:
        log.debug(f"Disk query unavailable for {path}: {e}")
        return None
