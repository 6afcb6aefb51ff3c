"""``lockwright why-not <package> <constraint>`` — what blocks a version?

Adds the requirement to the project's composer.json in memory and solves.
With a composer.lock present, every other locked package keeps its version,
so the answer is about the project as it is locked today.

Exit Codes:
    0 — The package can be installed at that constraint.
    1 — It cannot; the problems explain what prevents it.
    2 — Bad input (constraint, manifest, lock, repository or platform data).
    3 — The solve did not finish within ``--timeout``.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from lockwright.cli.lock import (
    EXIT_BAD_INPUT,
    EXIT_OK,
    EXIT_TIMEOUT,
    EXIT_UNSATISFIABLE,
    build_pool,
    parse_platform_overrides,
)
from lockwright.exceptions import LockwrightError
from lockwright.lock import LOCK_FILENAME, MANIFEST_FILENAME, LockFile, reconcile
from lockwright.manifest import Manifest
from lockwright.solver import Deadline, ResolutionStatus

logger = logging.getLogger(__name__)


@click.command("why-not")
@click.argument("package")
@click.argument("constraint")
@click.argument("project_dir", type=click.Path(exists=True, file_okay=False), default=".")
@click.option(
    "--repository", "-r",
    "repositories",
    type=click.Path(exists=True, dir_okay=False),
    multiple=True,
    required=True,
    help="packages.json file to resolve against (repeatable, highest priority first).",
)
@click.option(
    "--platform", "-p",
    "platform",
    multiple=True,
    help="Platform package version, e.g. php=8.2.0 (repeatable).",
)
@click.option("--no-dev", is_flag=True, help="Ignore require-dev packages.")
@click.option(
    "--timeout",
    type=float,
    default=None,
    envvar="LOCKWRIGHT_TIMEOUT",
    help="Give up after this many seconds.",
)
def why_not_command(
    package: str,
    constraint: str,
    project_dir: str,
    repositories: tuple[str, ...],
    platform: tuple[str, ...],
    no_dev: bool,
    timeout: float | None,
) -> None:
    """Explain why PACKAGE cannot be installed at CONSTRAINT in PROJECT_DIR.

    Exit code 0 if it can, 1 if it cannot, 2 on bad input, 3 on timeout.
    """
    from lockwright.cli.output import print_timeout, print_why_not

    target = Path(project_dir)
    lock_path = target / LOCK_FILENAME
    overrides = parse_platform_overrides(platform)

    try:
        manifest = Manifest.read(target / MANIFEST_FILENAME).with_requirement(package, constraint)
        lock = LockFile.read(lock_path) if lock_path.exists() else None
        pool, platform_repo = build_pool(manifest, lock, repositories, overrides, dev=not no_dev)
        logger.info("Checking %s %s against %d candidate(s)", package, constraint, len(pool))
        resolution = reconcile(
            lock,
            manifest,
            pool,
            deadline=Deadline(seconds=timeout) if timeout is not None else None,
            update=[package],
            dev=not no_dev,
            fixed=platform_repo.candidates(),
        )
    except (LockwrightError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_BAD_INPUT)

    if resolution.status is ResolutionStatus.TIMEOUT:
        print_timeout(resolution)
        sys.exit(EXIT_TIMEOUT)
    print_why_not(package, constraint, resolution)
    sys.exit(EXIT_OK if resolution.success else EXIT_UNSATISFIABLE)
