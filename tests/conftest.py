"""Shared fixtures. Nothing here talks to a real docker daemon."""

from unittest.mock import patch

import pytest

from jetson_passthrough.config import LauncherConfig
from jetson_passthrough.shell import CommandResult


class FakeShell:
    """
    Stands in for shell.run. Rules are (prefix, result) pairs; the first
    rule whose prefix matches the start of the command wins. Unmatched
    commands succeed with empty output.
    """

    def __init__(self):
        self.rules = []
        self.calls = []
        self.passthrough_calls = []
        self.passthrough_code = 0

    def on(self, *prefix, returncode=0, stdout="", stderr=""):
        self.rules.insert(0, (list(prefix), CommandResult(returncode, stdout, stderr)))
        return self

    def on_sequence(self, *prefix, results):
        """Successive calls matching prefix return successive results (last one repeats)."""
        queue = list(results)

        def next_result():
            return queue.pop(0) if len(queue) > 1 else queue[0]

        self.rules.insert(0, (list(prefix), next_result))
        return self

    def __call__(self, cmd, timeout=60, input=None, env=None, check=False):
        cmd = [str(c) for c in cmd]
        self.calls.append({"cmd": cmd, "input": input, "env": env, "timeout": timeout})
        for prefix, result in self.rules:
            if cmd[: len(prefix)] == prefix:
                return result() if callable(result) else result
        return CommandResult(0, "", "")

    def passthrough(self, cmd, timeout=None, env=None):
        self.passthrough_calls.append({"cmd": [str(c) for c in cmd], "timeout": timeout, "env": env})
        return self.passthrough_code

    def commands(self):
        return [c["cmd"] for c in self.calls]

    def ran(self, *prefix):
        return [c for c in self.commands() if c[: len(prefix)] == list(prefix)]


@pytest.fixture
def fake_shell():
    fake = FakeShell()
    with patch("jetson_passthrough.shell.run", side_effect=fake), \
         patch("jetson_passthrough.shell.run_passthrough", side_effect=fake.passthrough):
        yield fake


@pytest.fixture
def config(tmp_path):
    (tmp_path / "docker-compose.yml").write_text("services: {}\n")
    return LauncherConfig(
        project_root = tmp_path,
        xauth_file   = tmp_path / ".docker.xauth",
        ready_delay  = 0.0,
        device_nodes = (),
    )
