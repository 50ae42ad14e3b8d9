"""
ECR — Control-plane access to the destination registry.

Wraps the three ECR calls the mirror needs:
- building an authenticated client from the ambient credential chain
- fetching a short-lived authorization token for docker login
- creating destination repositories on demand

botocore errors are translated into CredentialError / RegistryError here,
so nothing above this module needs to know about botocore.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..validation import CredentialError, RegistryError

logger = logging.getLogger(__name__)

ALREADY_EXISTS = "RepositoryAlreadyExistsException"


@dataclass(frozen=True)
class AuthGrant:
    """A short-lived ECR authorization token and the registry it is valid for."""

    token: str
    proxy_endpoint: str
    expires_at: Optional[datetime] = None

    def credentials(self) -> Tuple[str, str]:
        """
        Decode the token into a (user, password) pair.

        The token is base64 of ``user:password``. It is split on the first
        colon and both halves must be non-empty.
        """
        if not self.token:
            raise CredentialError("empty auth token", step="login")

        try:
            decoded = base64.b64decode(self.token, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise CredentialError(f"unable to decode auth token, {e}", step="login") from e

        if not decoded:
            raise CredentialError("empty auth token", step="login")

        user, sep, password = decoded.partition(":")
        if not sep or not user or not password:
            raise CredentialError("invalid auth token", step="login")

        return user, password


def create_ecr_client(region: str) -> Any:
    """
    Build an ECR client for ``region`` using the ambient credential chain.

    Credentials are resolved eagerly so a missing profile or role fails
    here rather than on the first API call.
    """
    try:
        session = boto3.Session(region_name=region)
        credentials = session.get_credentials()
    except BotoCoreError as e:
        raise CredentialError(f"unable to load SDK config, {e}", step="client") from e

    if credentials is None:
        raise CredentialError(
            "unable to load SDK config, no AWS credentials found", step="client"
        )

    logger.debug(f"Using {credentials.method} credentials for region {region}")

    # Region format is only checked when the client is built
    try:
        return session.client("ecr", region_name=region)
    except BotoCoreError as e:
        raise CredentialError(f"unable to create ecr client, {e}", step="client") from e


def get_auth_grant(client: Any) -> AuthGrant:
    """Request an authorization token for docker login."""
    try:
        response = client.get_authorization_token()
    except (ClientError, BotoCoreError) as e:
        raise CredentialError(f"unable to get auth token, {e}", step="login") from e

    data = response.get("authorizationData") or []
    if not data:
        raise CredentialError("unable to get auth token, no authorization data returned", step="login")

    entry = data[0]
    endpoint = entry.get("proxyEndpoint")
    if not endpoint:
        raise CredentialError("unable to get auth token, no proxy endpoint returned", step="login")

    return AuthGrant(
        token=entry.get("authorizationToken") or "",
        proxy_endpoint=endpoint,
        expires_at=entry.get("expiresAt"),
    )


def is_already_exists(error: Exception) -> bool:
    """Whether a control-plane error means the repository is already there."""
    if isinstance(error, ClientError):
        code = error.response.get("Error", {}).get("Code")
        if code:
            return code == ALREADY_EXISTS
    return ALREADY_EXISTS in str(error)


def ensure_repository(client: Any, name: str) -> bool:
    """
    Create the repository ``name`` unless it already exists.

    Returns:
        True if the repository was created, False if it was already there.

    Raises:
        RegistryError: for any other control-plane failure
    """
    try:
        client.create_repository(repositoryName=name)
    except (ClientError, BotoCoreError) as e:
        if is_already_exists(e):
            logger.info(f"repository {name} already exists", extra={"repository": name})
            return False
        code = None
        if isinstance(e, ClientError):
            code = e.response.get("Error", {}).get("Code")
        raise RegistryError(
            f"unable to create repository {name}, {e}", code=code, step="create-repository"
        ) from e

    logger.info(f"created repository {name}", extra={"repository": name})
    return True
