"""
Plan Models — Pydantic schemas for the mirror plan.

The plan file declares which Docker Hub images land in which ECR
repository:

    registryMap:
      nginx:
        - nginx:1.25
        - nginx:1.25-alpine

The raw file is validated with MirrorPlanFile, then frozen into a
MirrorPlan whose image references are already parsed.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ImageReference(BaseModel):
    """A ``name:tag`` reference to a source image."""

    model_config = ConfigDict(frozen=True)

    name: str
    tag: str

    @classmethod
    def parse(cls, value: str) -> "ImageReference":
        """
        Split a reference into name and tag.

        Exactly one ``:`` is allowed and both sides must be non-empty, so
        digest references and registry hosts with ports are rejected.

        Raises:
            ValueError: if the reference is not of the form name:tag
        """
        parts = value.split(":")
        if len(parts) != 2 or not parts[0] or not parts[1] or "@" in value:
            raise ValueError(f"invalid image tag {value!r}, expected name:tag")
        return cls(name=parts[0], tag=parts[1])

    def __str__(self) -> str:
        return f"{self.name}:{self.tag}"


class RepositoryPlan(BaseModel):
    """One destination repository and the images mirrored into it."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    images: Tuple[ImageReference, ...] = ()


class MirrorPlan(BaseModel):
    """Ordered, immutable set of repositories to mirror."""

    model_config = ConfigDict(frozen=True)

    repositories: Tuple[RepositoryPlan, ...] = ()

    def __len__(self) -> int:
        return len(self.repositories)

    @property
    def image_count(self) -> int:
        return sum(len(repo.images) for repo in self.repositories)

    def as_mapping(self) -> Dict[str, List[str]]:
        """Plain mapping form, used when echoing the plan to the log."""
        return {
            repo.name: [str(image) for image in repo.images]
            for repo in self.repositories
        }


# --- Raw file schema ---


class MirrorPlanFile(BaseModel):
    """The plan YAML schema. Unknown top-level keys are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    registry_map: Dict[str, Optional[List[str]]] = Field(alias="registryMap")

    def to_plan(self) -> MirrorPlan:
        """
        Parse every image reference and freeze the result.

        Raises:
            ValueError: on the first malformed reference
        """
        repositories = []
        for name, images in self.registry_map.items():
            parsed = tuple(ImageReference.parse(image) for image in images or [])
            repositories.append(RepositoryPlan(name=name, images=parsed))
        return MirrorPlan(repositories=tuple(repositories))
