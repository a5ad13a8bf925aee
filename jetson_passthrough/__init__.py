"""
Jetson GPU Passthrough Launcher
===============================

Brings up the prebuilt Jetson GPU passthrough container on an edge device
and hands the operator an interactive shell inside it.

What it does:
  1. Verify docker, compose and the docker daemon (NVIDIA runtime optional)
  2. Create the project working directories (src, models, data)
  3. Configure X11 forwarding (DISPLAY, XAUTHORITY, xhost, /tmp/.docker.xauth)
  4. Replace any running instance and bring the compose service up
  5. Poll the container until it answers a trivial command
  6. Install the GPU build of ONNX Runtime inside the container
  7. exec into the container with an interactive bash

Everything heavy (CUDA, TensorRT, device passthrough) lives in JetPack and the
container image. This package only orchestrates docker / docker compose.

Requirements:
  pip install requests psutil

Usage:
  jetson-build                 # full bring-up, ends inside the container
  jetson-init                  # (re)install ONNX Runtime GPU into it
"""

__version__ = "2.1.0"
