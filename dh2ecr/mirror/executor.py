"""
Mirror Executor — Copy every planned image into its ECR repository.

For each repository in the plan, in declared order:
1. Ensure the repository exists on ECR
2. For each image, in declared order:
   a. docker pull <name:tag>
   b. docker tag <name:tag> <account>.dkr.ecr.<region>.amazonaws.com/<name:tag>
   c. docker push <destination>

Every step must succeed before the next starts; the first failure raises
and aborts the run.

## Dry Run

With ``dry_run=True`` the same log lines are written but no control-plane
call is issued and no docker process is started.

## Usage

    from dh2ecr.mirror.executor import MirrorExecutor, RunContext

    context = RunContext(region="us-east-1", account_id="111122223333",
                         client=client, engine=DockerEngine())
    report = MirrorExecutor(context).run(plan)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..plan.models import ImageReference, MirrorPlan, RepositoryPlan
from ..registry.ecr import ensure_repository, get_auth_grant
from ..validation import MirrorError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunContext:
    """Everything a run needs, fixed before the first repository is touched."""

    region: str
    account_id: str
    dry_run: bool = False
    client: Optional[Any] = None  # ECR client; None in dry runs
    engine: Optional[Any] = None  # anything with login/pull/tag/push

    def __post_init__(self) -> None:
        if not self.dry_run and (self.client is None or self.engine is None):
            raise MirrorError("a live run needs both a registry client and an engine")

    @property
    def registry_host(self) -> str:
        return f"{self.account_id}.dkr.ecr.{self.region}.amazonaws.com"

    def destination_address(self, image: ImageReference) -> str:
        """Full ECR address an image is tagged and pushed as."""
        return f"{self.registry_host}/{image}"


@dataclass
class MirrorReport:
    """Outcome of a mirror run."""

    dry_run: bool = False
    repositories_ensured: List[str] = field(default_factory=list)
    repositories_created: List[str] = field(default_factory=list)
    repositories_existing: List[str] = field(default_factory=list)
    images_mirrored: List[str] = field(default_factory=list)


class MirrorExecutor:
    """Runs a MirrorPlan against a RunContext."""

    def __init__(self, context: RunContext):
        self.context = context

    def run(self, plan: MirrorPlan) -> MirrorReport:
        report = MirrorReport(dry_run=self.context.dry_run)

        for repository in plan.repositories:
            self.mirror_repository(repository, report)

        return report

    def mirror_repository(self, repository: RepositoryPlan, report: MirrorReport) -> None:
        """Ensure one repository exists, then move each of its images."""
        self.ensure_repository(repository.name, report)

        for image in repository.images:
            destination = self.mirror_image(image, repository.name)
            report.images_mirrored.append(destination)

    def ensure_repository(self, name: str, report: MirrorReport) -> None:
        extra = {"repository": name, "step": "create-repository"}
        logger.info(f"creating repository {name}", extra=extra)

        if self.context.dry_run:
            report.repositories_ensured.append(name)
            return

        created = ensure_repository(self.context.client, name)
        report.repositories_ensured.append(name)
        if created:
            report.repositories_created.append(name)
        else:
            report.repositories_existing.append(name)

    def mirror_image(self, image: ImageReference, repository: str) -> str:
        """Pull, tag and push one image. Returns the destination address."""
        source = str(image)
        destination = self.context.destination_address(image)
        engine = self.context.engine
        live = not self.context.dry_run

        logger.info(
            f"pulling image {source} from docker hub",
            extra={"repository": repository, "image": source, "step": "pull"},
        )
        if live:
            engine.pull(source)

        logger.info(
            f"tagging image {source} with tag {destination}",
            extra={"repository": repository, "image": source, "step": "tag"},
        )
        if live:
            engine.tag(source, destination)

        logger.info(
            f"pushing image {destination} to ecr",
            extra={"repository": repository, "image": source, "step": "push"},
        )
        if live:
            engine.push(destination)

        return destination


def login_engine(context: RunContext) -> None:
    """Log the engine in to ECR with a fresh authorization token."""
    grant = get_auth_grant(context.client)
    user, password = grant.credentials()

    logger.info(f"logging in to {grant.proxy_endpoint}", extra={"step": "login"})
    context.engine.login(user, password, grant.proxy_endpoint)
