"""
Plan Loader — Load and validate the mirror plan YAML file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

import pydantic
import yaml

from ..validation import ConfigurationError, validate_file_readable
from .models import MirrorPlan, MirrorPlanFile

logger = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses mappings with repeated keys."""

    def construct_mapping(self, node, deep=False):
        # Only keys written in this mapping; merged (<<) keys may be overridden
        seen = set()
        for key_node, _ in node.value:
            if not isinstance(key_node, yaml.ScalarNode):
                continue
            if key_node.tag == "tag:yaml.org,2002:merge":
                continue
            key = self.construct_object(key_node, deep=deep)
            if key in seen:
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    f"found duplicate key {key!r}",
                    key_node.start_mark,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML file and return its top-level mapping."""
    try:
        # Binary mode lets the YAML reader report bad encodings as YAMLError
        with path.open("rb") as f:
            data = yaml.load(f, Loader=UniqueKeyLoader)
    except OSError as e:
        raise ConfigurationError(f"unable to read config file, {e}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"unable to unmarshal config file, {e}")

    if data is None:
        raise ConfigurationError(f"config file is empty: {path}")
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"config file must contain a mapping, got {type(data).__name__}"
        )
    return data


def _describe(error: pydantic.ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in error.errors()
    )


def load_plan(path: Path) -> MirrorPlan:
    """
    Load the mirror plan from a YAML file.

    Mapping order in the file is kept: repositories are mirrored in the
    order they are declared.

    Args:
        path: Path to the plan file

    Returns:
        Frozen MirrorPlan with parsed image references

    Raises:
        ConfigurationError: if the file cannot be read, decoded or validated
    """
    path = Path(path)
    logger.info(f"reading config {path}")

    validate_file_readable(path, "Config file")
    data = load_yaml(path)

    try:
        plan = MirrorPlanFile.model_validate(data).to_plan()
    except pydantic.ValidationError as e:
        raise ConfigurationError(
            f"config file does not match the expected shape: {_describe(e)}",
            details={"path": str(path), "errors": e.errors()},
        ) from e
    except ValueError as e:
        raise ConfigurationError(str(e), details={"path": str(path)}) from e

    logger.info(f"config: {plan.as_mapping()}")
    return plan
