"""
Validation — Error taxonomy and input validation utilities.

Every fatal condition raised by dh2ecr derives from MirrorError so the CLI
can report it in one place and exit non-zero.

## Usage

    from dh2ecr.validation import ValidationError, validate_required_options

    try:
        validate_required_options(aws_region=region, aws_account_id=account, config=path)
    except ValidationError as e:
        print(f"Validation failed: {e}")
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional


class MirrorError(Exception):
    """Base class for every error that aborts a mirror run."""

    step: str = "mirror"

    def __init__(self, message: str, step: Optional[str] = None):
        self.message = message
        if step:
            self.step = step
        super().__init__(message)


class ValidationError(MirrorError):
    """Raised when operator input fails validation."""

    step = "validation"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict] = None,
        step: Optional[str] = None,
    ):
        self.field = field
        self.details = details or {}
        super().__init__(message, step=step)
        # Exception.args drives str(); keep the field prefix in it
        self.args = (self._format_message(),)

    def _format_message(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


class ConfigurationError(ValidationError):
    """Raised when the mirror plan file is missing, unreadable or malformed."""

    step = "config"


class CredentialError(MirrorError):
    """Raised when ambient credentials or the registry auth grant are unusable."""

    step = "credentials"


class RegistryError(MirrorError):
    """Raised when the destination registry control plane rejects a request."""

    step = "registry"

    def __init__(self, message: str, code: Optional[str] = None, step: Optional[str] = None):
        self.code = code
        super().__init__(message, step=step)


class EngineError(MirrorError):
    """Raised when a container engine command fails."""

    step = "engine"

    def __init__(
        self,
        message: str,
        command: Optional[list] = None,
        returncode: Optional[int] = None,
        step: Optional[str] = None,
    ):
        self.command = command or []
        self.returncode = returncode
        super().__init__(message, step=step)


# Checked in this order; the first missing one is reported
REQUIRED_OPTIONS = (
    ("aws_region", "aws region is not set (--aws-region / -r)"),
    ("aws_account_id", "aws account id is not set (--aws-account-id / -a)"),
    ("config", "config file is not set (--config / -c)"),
)


def validate_required_options(**values: Optional[str]) -> None:
    """
    Check that every required operator input is present and non-empty.

    Raises:
        ValidationError: naming the first missing input
    """
    for name, message in REQUIRED_OPTIONS:
        value = values.get(name)
        if value is None or not str(value).strip():
            raise ValidationError(message, field=name, step="intake")


def validate_file_readable(path: Path, description: str = "File") -> None:
    """Validate that a file exists and is a regular file."""
    if not path.exists():
        raise ConfigurationError(f"{description} does not exist: {path}")

    if not path.is_file():
        raise ConfigurationError(f"{description} is not a file: {path}")
