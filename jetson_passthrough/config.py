"""
Launcher Config
===============

One LauncherConfig is built at startup and passed to every step. Nothing in
the launcher mutates os.environ; the only environment handed to a child is
the one built for the compose call (see display.DisplaySettings).

Precedence (highest first):
  1. CLI overrides
  2. JETSON_* environment variables
  3. ~/.jetson-passthrough/config.json
  4. Defaults below (the values the shipped compose file expects)
"""

from __future__ import annotations
import dataclasses
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

log = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".jetson-passthrough" / "config.json"

ONNX_WHEEL_URL  = "https://nvidia.box.com/shared/static/iizg3ggrtdkqawkmebbfixo7sce6j365.whl"
ONNX_WHEEL_NAME = "onnxruntime_gpu-1.16.0-cp38-cp38-linux_aarch64.whl"

# Device nodes the compose service maps into the container
JETSON_DEVICES = (
    "/dev/nvhost-ctrl",
    "/dev/nvhost-ctrl-gpu",
    "/dev/nvhost-prof-gpu",
    "/dev/nvmap",
    "/dev/nvhost-gpu",
    "/dev/nvhost-as-gpu",
    "/dev/nvhost-vic",
    "/dev/nvhost-msenc",
    "/dev/nvhost-nvdec",
    "/dev/nvhost-nvjpg",
    "/dev/nvgpu/igpu0",
)


def load_config(path: Path) -> dict:
    if path.exists():
        return json.loads(path.read_text())
    return {}

def save_config(path: Path, cfg: dict):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(cfg, indent=2))


# ─── Launcher Config ──────────────────────────────────────────────────────────

@dataclass
class LauncherConfig:
    container_name:    str            = "advantech-l2-02"
    project_root:      Path           = field(default_factory=Path.cwd)
    compose_file:      Optional[Path] = None        # None → <project_root>/docker-compose.yml
    project_dirs:      tuple          = ("src", "models", "data")
    xauth_file:        Path           = Path("/tmp/.docker.xauth")   # the path the compose service mounts
    xauth_mode:        int            = 0o666
    compose_timeout:   int            = 60           # seconds, passed to compose up/down
    pull_timeout:      int            = 3600         # seconds for the image pull, 0 = unbounded
    ready_attempts:    int            = 30
    ready_delay:       float          = 1.0          # seconds between readiness checks
    log_tail_lines:    int            = 50
    install_onnx:      bool           = True
    onnx_wheel_url:    str            = ONNX_WHEEL_URL
    onnx_wheel_name:   str            = ONNX_WHEEL_NAME
    onnx_provider:     str            = "CUDAExecutionProvider"
    host_download:     bool           = False        # fetch the wheel on the host, docker cp it in
    init_script_glob:  str            = "init-*.sh"
    device_nodes:      tuple          = JETSON_DEVICES
    min_free_disk_gb:  float          = 10.0
    shell:             str            = "bash"

    @property
    def compose_path(self) -> Path:
        if self.compose_file is not None:
            return Path(self.compose_file)
        return Path(self.project_root) / "docker-compose.yml"

    def dir_paths(self) -> list[Path]:
        root = Path(self.project_root)
        return [root / d for d in self.project_dirs]

    @classmethod
    def from_sources(
        cls,
        path:      Optional[Path] = None,
        env:       Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> "LauncherConfig":
        """Merge defaults, the JSON file, JETSON_* env vars and CLI overrides."""
        env = os.environ if env is None else env
        known = {f.name: f for f in dataclasses.fields(cls)}

        values: dict[str, Any] = {}

        file_cfg = load_config(Path(path) if path else CONFIG_PATH)
        for key, raw in file_cfg.items():
            if key not in known:
                log.warning(f"Ignoring unknown config key '{key}'")
                continue
            values[key] = raw

        for name in known:
            env_key = f"JETSON_{name.upper()}"
            if env_key in env:
                values[name] = env[env_key]

        values.update({k: v for k, v in overrides.items() if v is not None})

        config = cls(**{k: _coerce(known[k], v) for k, v in values.items()})
        config.validate()
        return config

    def validate(self):
        """Raise ValueError for settings the launcher cannot run with."""
        if not Path(self.project_root).is_dir():
            raise ValueError(f"project root {self.project_root} is not a directory")
        if self.ready_attempts < 1:
            raise ValueError(f"ready_attempts must be >= 1, got {self.ready_attempts}")
        if self.ready_delay < 0:
            raise ValueError(f"ready_delay must be >= 0, got {self.ready_delay}")
        if self.compose_timeout < 0 or self.pull_timeout < 0:
            raise ValueError("compose_timeout and pull_timeout must be >= 0")
        if not 0 <= self.xauth_mode <= 0o777:
            raise ValueError(f"xauth_mode {oct(self.xauth_mode)} is not a permission mode")


def _coerce(f: dataclasses.Field, raw: Any) -> Any:
    """Convert JSON/env values to the field's type."""
    default = f.default if f.default is not dataclasses.MISSING else None
    if default is None and f.default_factory is not dataclasses.MISSING:  # type: ignore[misc]
        default = f.default_factory()  # type: ignore[misc]

    if f.name == "xauth_mode":
        # 666 in JSON means 0o666, same as the string "666"
        return int(str(raw).strip(), 8)
    if isinstance(default, bool):
        if isinstance(raw, str):
            return raw.strip().lower() in ("1", "true", "yes", "on")
        return bool(raw)
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    if isinstance(default, tuple):
        if isinstance(raw, str):
            return tuple(p.strip() for p in raw.split(",") if p.strip())
        return tuple(raw)
    if isinstance(default, Path) or f.name == "compose_file":
        return Path(raw).expanduser()
    return raw
