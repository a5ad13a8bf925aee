"""Tests for the subprocess boundary."""

import subprocess
from unittest.mock import Mock, patch

import pytest

from jetson_passthrough import shell
from jetson_passthrough.outcome import LauncherError


class TestRun:
    @patch("subprocess.run")
    def test_captures_output(self, mock_run):
        mock_run.return_value = Mock(returncode=0, stdout="ok\n", stderr="")
        result = shell.run(["docker", "info"], timeout=5)

        assert result.ok
        assert result.stdout == "ok\n"
        kwargs = mock_run.call_args.kwargs
        assert kwargs["capture_output"] is True
        assert kwargs["timeout"] == 5

    @patch("subprocess.run", side_effect=FileNotFoundError("docker"))
    def test_missing_binary(self, _):
        result = shell.run(["docker", "info"])
        assert result.returncode == shell.EXIT_NOT_FOUND
        assert not result.ok

    @patch("subprocess.run", side_effect=subprocess.TimeoutExpired(["docker"], 5))
    def test_timeout(self, _):
        result = shell.run(["docker", "info"], timeout=5)
        assert result.returncode == shell.EXIT_TIMEOUT

    @patch("subprocess.run")
    def test_check_raises(self, mock_run):
        mock_run.return_value = Mock(returncode=2, stdout="", stderr="bad")
        with pytest.raises(LauncherError, match="bad"):
            shell.run(["false"], check=True)

    @patch("subprocess.run")
    def test_stdin_and_env(self, mock_run):
        mock_run.return_value = Mock(returncode=0, stdout="", stderr="")
        shell.run(["xauth", "nmerge", "-"], input="ffff ...", env={"DISPLAY": ":0"})
        kwargs = mock_run.call_args.kwargs
        assert kwargs["input"] == "ffff ..."
        assert kwargs["env"] == {"DISPLAY": ":0"}


class TestExecReplace:
    @patch("os.execvp")
    def test_replaces_process(self, execvp):
        shell.exec_replace(["docker", "exec", "-it", "c", "bash"])
        execvp.assert_called_once_with("docker", ["docker", "exec", "-it", "c", "bash"])
