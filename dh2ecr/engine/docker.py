"""
Docker Engine — Pull, tag, push and login via the local docker CLI.

Each operation runs one ``docker`` subprocess that inherits this process's
stdout and stderr, so pull/push progress is shown to the operator as-is.
A non-zero exit raises EngineError.
"""

from __future__ import annotations

import logging
import subprocess
from typing import List, Sequence

from ..validation import EngineError

logger = logging.getLogger(__name__)

MASK = "********"


def mask_command(cmd: Sequence[str]) -> List[str]:
    """Copy of ``cmd`` with the value after ``-p``/``--password`` hidden."""
    masked = list(cmd)
    for i, arg in enumerate(masked[:-1]):
        if arg in ("-p", "--password"):
            masked[i + 1] = MASK
    return masked


class DockerEngine:
    """Container engine backed by the ``docker`` binary on PATH."""

    def __init__(self, binary: str = "docker"):
        self.binary = binary

    def _run(self, step: str, *args: str) -> None:
        cmd = [self.binary, *args]
        display = " ".join(mask_command(cmd))
        logger.debug(f"[docker] {display}")

        try:
            result = subprocess.run(cmd, check=False)
        except OSError as e:
            raise EngineError(
                f"unable to run {self.binary}, {e}",
                command=mask_command(cmd),
                step=step,
            ) from e

        if result.returncode != 0:
            raise EngineError(
                f"`{display}` exited with status {result.returncode}",
                command=mask_command(cmd),
                returncode=result.returncode,
                step=step,
            )

    def login(self, user: str, password: str, endpoint: str) -> None:
        self._run("login", "login", "-u", user, "-p", password, endpoint)

    def pull(self, image: str) -> None:
        self._run("pull", "pull", image)

    def tag(self, source: str, target: str) -> None:
        self._run("tag", "tag", source, target)

    def push(self, target: str) -> None:
        self._run("push", "push", target)
