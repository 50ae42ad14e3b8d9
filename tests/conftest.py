"""
Shared fixtures for mirror tests.

Provides a recording stand-in for the docker engine and a mocked ECR
client so that no test touches docker, AWS or the network.
"""

from __future__ import annotations

import base64
from pathlib import Path
from typing import List, Optional, Set, Tuple
from unittest import mock

import pytest
from botocore.exceptions import ClientError

from dh2ecr.validation import EngineError

REGION = "us-east-1"
ACCOUNT_ID = "111122223333"
REGISTRY = f"{ACCOUNT_ID}.dkr.ecr.{REGION}.amazonaws.com"
ENDPOINT = f"https://{REGISTRY}"


class RecordingEngine:
    """Engine that records each call instead of running docker."""

    def __init__(self, calls: Optional[List[Tuple]] = None, fail_on: Optional[Set[str]] = None):
        self.calls = calls if calls is not None else []
        self.fail_on = fail_on or set()

    def _record(self, *call: str) -> None:
        self.calls.append(call)
        if call[0] in self.fail_on:
            raise EngineError(f"{call[0]} failed", command=["docker", *call], returncode=1, step=call[0])

    def login(self, user: str, password: str, endpoint: str) -> None:
        self._record("login", "-u", user, "-p", password, endpoint)

    def pull(self, image: str) -> None:
        self._record("pull", image)

    def tag(self, source: str, target: str) -> None:
        self._record("tag", source, target)

    def push(self, target: str) -> None:
        self._record("push", target)


def client_error(code: str, message: str = "", operation: str = "CreateRepository") -> ClientError:
    """Build a botocore ClientError the way ECR returns them."""
    return ClientError(
        {"Error": {"Code": code, "Message": message or code}},
        operation,
    )


def auth_response(token: str = "AWS:s3cr3t", endpoint: str = ENDPOINT) -> dict:
    encoded = base64.b64encode(token.encode()).decode() if token else ""
    return {
        "authorizationData": [
            {"authorizationToken": encoded, "proxyEndpoint": endpoint},
        ]
    }


@pytest.fixture
def calls() -> List[Tuple]:
    """Shared timeline of engine and control-plane calls."""
    return []


@pytest.fixture
def engine(calls) -> RecordingEngine:
    return RecordingEngine(calls)


@pytest.fixture
def ecr_client(calls) -> mock.MagicMock:
    """Mock ECR client that logs create_repository into the shared timeline."""
    client = mock.MagicMock()
    client.get_authorization_token.return_value = auth_response()

    def create_repository(**kwargs):
        calls.append(("create_repository", kwargs["repositoryName"]))
        return {"repository": {"repositoryName": kwargs["repositoryName"]}}

    client.create_repository.side_effect = create_repository
    return client


@pytest.fixture
def write_plan(tmp_path: Path):
    """Write plan YAML into tmp_path and return its path."""

    def _write(text: str, name: str = "plan.yaml") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
