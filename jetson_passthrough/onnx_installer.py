"""
ONNX Runtime GPU Installer
==========================

Installs NVIDIA's JetPack 5.1.2 build of onnxruntime-gpu (1.16.0, cp38,
aarch64) inside the running container.

Sequence:
  0. Container must be running (else fatal: run jetson-build first)
  1. Already has CUDAExecutionProvider?  → done, nothing else runs
  2. pip3 uninstall onnxruntime onnxruntime-gpu   (errors ignored)
  3. Download the pinned wheel to /tmp in the container
       - default: wget inside the container
       - host_download: requests on the host, then `docker cp`
  4. pip3 install the wheel, remove it
  5. Verify the provider list again; missing provider is fatal

PyPI's aarch64 onnxruntime wheels are CPU-only, which is why the wheel comes
from a pinned NVIDIA URL instead of `pip install onnxruntime-gpu`.
"""

from __future__ import annotations
import json
import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import requests

from . import shell
from .config import LauncherConfig
from .logs import success
from .outcome import LauncherError
from .supervisor import is_container_running

log = logging.getLogger(__name__)

STEP = "onnxruntime"

CONTAINER_TMP    = "/tmp"
DOWNLOAD_TIMEOUT = 900
INSTALL_TIMEOUT  = 900
CHUNK_SIZE       = 1 << 20

PROVIDER_QUERY = (
    "import json, onnxruntime as ort; "
    "print(json.dumps({'version': ort.__version__, 'providers': ort.get_available_providers()}))"
)


@dataclass
class RuntimeStatus:
    version:   Optional[str] = None
    providers: list[str] = field(default_factory=list)


@dataclass
class InstallReport:
    version:           Optional[str]
    providers:         list[str]
    already_installed: bool


def parse_provider_query(stdout: str) -> RuntimeStatus:
    """The query prints one JSON object; anything before it (warnings) is skipped."""
    for line in reversed(stdout.strip().splitlines()):
        line = line.strip()
        if not line.startswith("{"):
            continue
        try:
            data = json.loads(line)
        except ValueError:
            continue
        return RuntimeStatus(version=data.get("version"), providers=list(data.get("providers") or []))
    return RuntimeStatus()


class OnnxRuntimeInstaller:
    def __init__(self, config: LauncherConfig, session: Optional[requests.Session] = None):
        self.config  = config
        self.session = session

    @property
    def container_wheel_path(self) -> str:
        return f"{CONTAINER_TMP}/{self.config.onnx_wheel_name}"

    def _exec(self, *args: str, timeout: float = 120) -> shell.CommandResult:
        return shell.run(["docker", "exec", self.config.container_name, *args], timeout=timeout)

    # ─── Checks ───────────────────────────────────────────────────────────────

    def check_container(self):
        if not is_container_running(self.config.container_name):
            raise LauncherError(
                f"Container '{self.config.container_name}' is not running. Start it with: jetson-build",
                step=STEP,
            )

    def status(self) -> RuntimeStatus:
        result = self._exec("python3", "-c", PROVIDER_QUERY, timeout=60)
        if not result.ok:
            return RuntimeStatus()
        return parse_provider_query(result.stdout)

    def is_gpu_enabled(self, status: Optional[RuntimeStatus] = None) -> bool:
        status = status or self.status()
        return self.config.onnx_provider in status.providers

    # ─── Steps ────────────────────────────────────────────────────────────────

    def uninstall(self):
        log.info("Removing existing ONNX Runtime...")
        result = self._exec("pip3", "uninstall", "-y", "onnxruntime", "onnxruntime-gpu", timeout=300)
        if not result.ok:
            log.debug(f"pip3 uninstall exit {result.returncode} (ignored)")

    def download(self):
        log.info("Downloading ONNX Runtime GPU wheel...")
        if self.config.host_download:
            self._download_on_host()
            return

        result = self._exec(
            "wget", "-q", self.config.onnx_wheel_url, "-O", self.container_wheel_path,
            timeout=DOWNLOAD_TIMEOUT,
        )
        if not result.ok:
            raise LauncherError(
                f"Failed to download ONNX Runtime wheel: {result.stderr.strip()[:300]}", step=STEP
            )

    def _download_on_host(self):
        """For images without wget or without outbound network."""
        if self.session is not None:
            self._fetch_and_copy(self.session)
            return
        with requests.Session() as session:
            self._fetch_and_copy(session)

    def _fetch_and_copy(self, session: requests.Session):
        with tempfile.TemporaryDirectory(prefix="onnxrt-") as tmp:
            local = Path(tmp) / self.config.onnx_wheel_name
            try:
                with session.get(self.config.onnx_wheel_url, stream=True, timeout=60) as resp:
                    resp.raise_for_status()
                    with open(local, "wb") as fh:
                        for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                            if chunk:
                                fh.write(chunk)
            except requests.RequestException as e:
                raise LauncherError(f"Failed to download ONNX Runtime wheel: {e}", step=STEP) from e

            log.info(f"Downloaded {local.stat().st_size:,} bytes, copying into container")
            copied = shell.run(
                ["docker", "cp", str(local), f"{self.config.container_name}:{self.container_wheel_path}"],
                timeout=300,
            )
            if not copied.ok:
                raise LauncherError(
                    f"Failed to copy wheel into container: {copied.stderr.strip()[:300]}", step=STEP
                )

    def install_wheel(self):
        log.info("Installing...")
        result = self._exec("pip3", "install", self.container_wheel_path, timeout=INSTALL_TIMEOUT)
        if not result.ok:
            raise LauncherError(
                f"Failed to install ONNX Runtime: {result.stderr.strip()[-500:]}", step=STEP
            )
        self._exec("rm", "-f", self.container_wheel_path, timeout=30)

    def verify(self) -> RuntimeStatus:
        log.info("Verifying GPU support...")
        status = self.status()
        log.info(f"Version: {status.version}")
        log.info(f"Providers: {status.providers}")
        if not self.is_gpu_enabled(status):
            log.error("✗ GPU Support: NOT DETECTED")
            raise LauncherError("GPU support verification failed", step=STEP)
        log.info("✓ GPU Support: ENABLED")
        return status

    # ─── Entry ────────────────────────────────────────────────────────────────

    def install(self) -> InstallReport:
        log.info("Installing ONNX Runtime GPU for JetPack 5.1.2...")
        self.check_container()

        current = self.status()
        if self.is_gpu_enabled(current):
            success(log, "ONNX Runtime GPU is already installed and working")
            log.info(f"Version: {current.version}")
            log.info(f"Providers: {current.providers}")
            return InstallReport(current.version, current.providers, already_installed=True)

        self.uninstall()
        self.download()
        self.install_wheel()
        status = self.verify()

        success(log, "ONNX Runtime GPU installed successfully!")
        return InstallReport(status.version, status.providers, already_installed=False)
