"""
Tests for dh2ecr/engine/docker.py

All subprocess calls are mocked — no docker daemon needed.
"""

import subprocess
from unittest import mock

import pytest

from dh2ecr.engine.docker import MASK, DockerEngine, mask_command
from dh2ecr.validation import EngineError


def _completed(returncode: int = 0):
    return subprocess.CompletedProcess(args=["docker"], returncode=returncode)


class TestCommands:
    """Each operation runs exactly one docker command with inherited streams."""

    @mock.patch("dh2ecr.engine.docker.subprocess.run")
    def test_pull(self, mock_run):
        mock_run.return_value = _completed()
        DockerEngine().pull("nginx:1.25")
        mock_run.assert_called_once_with(["docker", "pull", "nginx:1.25"], check=False)

    @mock.patch("dh2ecr.engine.docker.subprocess.run")
    def test_tag(self, mock_run):
        mock_run.return_value = _completed()
        DockerEngine().tag("nginx:1.25", "1.dkr.ecr.us-east-1.amazonaws.com/nginx:1.25")
        mock_run.assert_called_once_with(
            ["docker", "tag", "nginx:1.25", "1.dkr.ecr.us-east-1.amazonaws.com/nginx:1.25"],
            check=False,
        )

    @mock.patch("dh2ecr.engine.docker.subprocess.run")
    def test_push(self, mock_run):
        mock_run.return_value = _completed()
        DockerEngine().push("1.dkr.ecr.us-east-1.amazonaws.com/nginx:1.25")
        mock_run.assert_called_once_with(
            ["docker", "push", "1.dkr.ecr.us-east-1.amazonaws.com/nginx:1.25"], check=False
        )

    @mock.patch("dh2ecr.engine.docker.subprocess.run")
    def test_login(self, mock_run):
        mock_run.return_value = _completed()
        DockerEngine().login("AWS", "s3cr3t", "https://1.dkr.ecr.us-east-1.amazonaws.com")
        mock_run.assert_called_once_with(
            ["docker", "login", "-u", "AWS", "-p", "s3cr3t", "https://1.dkr.ecr.us-east-1.amazonaws.com"],
            check=False,
        )

    @mock.patch("dh2ecr.engine.docker.subprocess.run")
    def test_output_not_captured(self, mock_run):
        """Child output goes straight to our stdout/stderr."""
        mock_run.return_value = _completed()
        DockerEngine().pull("nginx:1.25")
        _, kwargs = mock_run.call_args
        assert "stdout" not in kwargs
        assert "stderr" not in kwargs
        assert "capture_output" not in kwargs

    @mock.patch("dh2ecr.engine.docker.subprocess.run")
    def test_custom_binary(self, mock_run):
        mock_run.return_value = _completed()
        DockerEngine(binary="/usr/local/bin/docker").pull("nginx:1.25")
        assert mock_run.call_args[0][0][0] == "/usr/local/bin/docker"


class TestFailures:
    """Non-zero exits and missing binaries raise EngineError."""

    @mock.patch("dh2ecr.engine.docker.subprocess.run")
    def test_nonzero_exit(self, mock_run):
        mock_run.return_value = _completed(returncode=1)

        with pytest.raises(EngineError) as exc_info:
            DockerEngine().pull("nginx:1.25")

        err = exc_info.value
        assert err.returncode == 1
        assert err.step == "pull"
        assert err.command == ["docker", "pull", "nginx:1.25"]
        assert "exited with status 1" in str(err)

    @mock.patch("dh2ecr.engine.docker.subprocess.run")
    def test_login_failure_hides_password(self, mock_run):
        mock_run.return_value = _completed(returncode=1)

        with pytest.raises(EngineError) as exc_info:
            DockerEngine().login("AWS", "s3cr3t", "https://registry")

        assert "s3cr3t" not in str(exc_info.value)
        assert "s3cr3t" not in exc_info.value.command
        assert exc_info.value.step == "login"

    @mock.patch("dh2ecr.engine.docker.subprocess.run")
    def test_binary_missing(self, mock_run):
        mock_run.side_effect = FileNotFoundError(2, "No such file or directory", "docker")

        with pytest.raises(EngineError) as exc_info:
            DockerEngine().push("registry/nginx:1.25")

        assert "unable to run docker" in str(exc_info.value)
        assert exc_info.value.returncode is None


class TestMaskCommand:
    """Passwords never appear in logged commands."""

    def test_short_flag(self):
        cmd = ["docker", "login", "-u", "AWS", "-p", "s3cr3t", "https://registry"]
        assert mask_command(cmd) == ["docker", "login", "-u", "AWS", "-p", MASK, "https://registry"]

    def test_long_flag(self):
        assert mask_command(["docker", "login", "--password", "x"]) == ["docker", "login", "--password", MASK]

    def test_no_password(self):
        cmd = ["docker", "pull", "nginx:1.25"]
        assert mask_command(cmd) == cmd

    def test_original_untouched(self):
        cmd = ["docker", "login", "-p", "s3cr3t"]
        mask_command(cmd)
        assert cmd[-1] == "s3cr3t"
