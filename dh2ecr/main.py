"""
dh2ecr — CLI Entry Point

Copies images from Docker Hub into Amazon ECR.

Usage:
    dh2ecr -c mirror.yaml -r us-east-1 -a 111122223333
    dh2ecr -c mirror.yaml -r us-east-1 -a 111122223333 --dry-run
    python -m dh2ecr --version
"""

from __future__ import annotations

# Load .env file FIRST so LOG_* and AWS_* settings reach logging and boto3
from pathlib import Path
from dotenv import load_dotenv

_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

import logging
from typing import Any, Callable, Optional

import click

from . import __version__
from .engine.docker import DockerEngine
from .logging_config import setup_logging
from .mirror.executor import MirrorExecutor, MirrorReport, RunContext, login_engine
from .plan.loader import load_plan
from .registry.ecr import create_ecr_client
from .validation import MirrorError, validate_required_options

# Initialize logging
setup_logging()

logger = logging.getLogger(__name__)


def run_mirror(
    config: str,
    aws_region: str,
    aws_account_id: str,
    dry_run: bool = False,
    engine: Optional[Any] = None,
    client_factory: Optional[Callable[[str], Any]] = None,
) -> MirrorReport:
    """
    Validate inputs, load the plan and mirror it.

    Raises:
        MirrorError: on the first failure of any step
    """
    validate_required_options(
        aws_region=aws_region,
        aws_account_id=aws_account_id,
        config=config,
    )

    plan = load_plan(Path(config))

    if dry_run:
        context = RunContext(region=aws_region, account_id=aws_account_id, dry_run=True)
    else:
        context = RunContext(
            region=aws_region,
            account_id=aws_account_id,
            client=(client_factory or create_ecr_client)(aws_region),
            engine=engine or DockerEngine(),
        )
        login_engine(context)

    return MirrorExecutor(context).run(plan)


@click.command("dh2ecr")
@click.option("--config", "-c", "config", default="", help="Path to the YAML mirror plan")
@click.option("--aws-region", "-r", default="", help="Destination ECR region")
@click.option("--aws-account-id", "-a", default="", help="Destination AWS account id")
@click.option("--dry-run", "-d", is_flag=True, help="Log what would happen without doing it")
@click.version_option(__version__, prog_name="dh2ecr")
def cli(config: str, aws_region: str, aws_account_id: str, dry_run: bool) -> None:
    """Copy images from Docker Hub to ECR, creating repositories as needed."""
    if dry_run:
        click.secho("(Dry run — no repositories created, no images moved)", fg="cyan")

    try:
        report = run_mirror(config, aws_region, aws_account_id, dry_run=dry_run)
    except MirrorError as e:
        logger.error(f"{e.step} failed: {e}")
        click.secho(f"✗ {e.step} failed: {e}", fg="red", err=True)
        raise SystemExit(1)

    click.echo("")
    click.echo(f"  Repositories: {len(report.repositories_ensured)}")
    if not report.dry_run:
        click.echo(f"    created:        {len(report.repositories_created)}")
        click.echo(f"    already there:  {len(report.repositories_existing)}")
    click.echo(f"  Images:       {len(report.images_mirrored)}")

    if report.dry_run:
        click.secho("\n(Dry run — nothing was changed)", fg="cyan")
    else:
        click.secho("✓ Mirror complete", fg="green")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
