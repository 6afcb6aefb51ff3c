"""``lockwright lock <project>`` — resolve composer.json and write composer.lock.

Reads the manifest, reuses an up-to-date composer.lock as-is, and otherwise
re-solves against the given repositories (keeping locked versions where
possible) and writes the new lock.

Exit Codes:
    0 — Lock file is up to date or was written.
    1 — The requirements are unsatisfiable.
    2 — Bad input (manifest, lock, repository or platform data).
    3 — The solve did not finish within ``--timeout``.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from lockwright.exceptions import LockwrightError
from lockwright.lock import LOCK_FILENAME, MANIFEST_FILENAME, LockFile, reconcile
from lockwright.manifest import Manifest
from lockwright.pool import Pool, PoolBuilder
from lockwright.repository import JsonRepository, PlatformRepository
from lockwright.solver import Deadline, ResolutionStatus, Transaction

logger = logging.getLogger(__name__)

EXIT_OK, EXIT_UNSATISFIABLE, EXIT_BAD_INPUT, EXIT_TIMEOUT = 0, 1, 2, 3


def parse_platform_overrides(values: tuple[str, ...]) -> dict[str, str]:
    """Parse ``--platform name=version`` options.

    Raises:
        click.BadParameter: If a value has no ``=``.
    """
    overrides: dict[str, str] = {}
    for value in values:
        name, sep, version = value.partition("=")
        if not sep or not name.strip() or not version.strip():
            raise click.BadParameter(f"expected NAME=VERSION, got {value!r}", param_hint="--platform")
        overrides[name.strip()] = version.strip()
    return overrides


def build_pool(
    manifest: Manifest,
    lock: LockFile | None,
    repositories: tuple[str, ...],
    overrides: dict[str, str],
    dev: bool,
) -> tuple[Pool, PlatformRepository]:
    """Load the repositories and collect every candidate the project can reach.

    Raises:
        LockwrightError: If a repository or platform version is unusable.
    """
    platform_repo = PlatformRepository({**manifest.platform, **overrides})
    repos = [platform_repo] + [JsonRepository.from_path(Path(p)) for p in repositories]
    names = list(manifest.require)
    if dev:
        names += list(manifest.require_dev)
    locked = lock.all_packages if lock is not None else []
    pool = PoolBuilder(repos).build(
        names + [c.name for c in locked], extra=platform_repo.candidates()
    )
    return pool, platform_repo


@click.command("lock")
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
@click.option("--no-dev", is_flag=True, help="Skip require-dev packages.")
@click.option(
    "--prefer-lowest",
    is_flag=True,
    envvar="LOCKWRIGHT_PREFER_LOWEST",
    help="Prefer the lowest matching versions.",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    envvar="LOCKWRIGHT_TIMEOUT",
    help="Give up after this many seconds.",
)
@click.option(
    "--update", "-u",
    "update",
    multiple=True,
    help="Only update these packages (repeatable, wildcards allowed).",
)
@click.option("--update-all", is_flag=True, help="Ignore locked versions entirely.")
@click.option("--ignore-platform-reqs", is_flag=True, help="Ignore php/ext-* requirements.")
@click.option("--dry-run", is_flag=True, help="Resolve and report without writing the lock.")
def lock_command(
    project_dir: str,
    repositories: tuple[str, ...],
    platform: tuple[str, ...],
    no_dev: bool,
    prefer_lowest: bool,
    timeout: float | None,
    update: tuple[str, ...],
    update_all: bool,
    ignore_platform_reqs: bool,
    dry_run: bool,
) -> None:
    """Resolve PROJECT_DIR/composer.json and write composer.lock.

    Exit code 0 on success, 1 if unsatisfiable, 2 on bad input, 3 on
    timeout.
    """
    from lockwright.cli.output import (
        console,
        print_problems,
        print_resolution_summary,
        print_timeout,
        print_transaction,
    )

    target = Path(project_dir)
    lock_path = target / LOCK_FILENAME
    overrides = parse_platform_overrides(platform)

    try:
        manifest = Manifest.read(target / MANIFEST_FILENAME)
        lock = LockFile.read(lock_path) if lock_path.exists() else None
        pool, platform_repo = build_pool(manifest, lock, repositories, overrides, dev=not no_dev)
        resolution = reconcile(
            lock,
            manifest,
            pool,
            deadline=Deadline(seconds=timeout) if timeout is not None else None,
            update=True if update_all else (list(update) or None),
            dev=not no_dev,
            fixed=platform_repo.candidates(),
            prefer_lowest=prefer_lowest,
            ignore_platform=ignore_platform_reqs,
        )
    except (LockwrightError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_BAD_INPUT)

    if resolution.status is ResolutionStatus.TIMEOUT:
        print_timeout(resolution)
        sys.exit(EXIT_TIMEOUT)
    if resolution.status is ResolutionStatus.UNSATISFIABLE:
        print_problems(resolution)
        sys.exit(EXIT_UNSATISFIABLE)

    decisions = resolution.unwrap()
    print_resolution_summary(resolution)
    if not resolution.solved:
        sys.exit(EXIT_OK)

    print_transaction(Transaction.from_decisions(lock.decisions() if lock else None, decisions))
    if dry_run:
        console.print("[dim]Dry run: composer.lock not written.[/dim]")
        sys.exit(EXIT_OK)

    new_lock = LockFile.from_decisions(
        decisions,
        manifest,
        manifest.to_request(prefer_lowest=prefer_lowest, dev=not no_dev),
        dev=not no_dev,
    )
    new_lock.write(lock_path)
    logger.info("Wrote %s", lock_path)
    click.echo(f"\nLock file written to: {lock_path}")
    sys.exit(EXIT_OK)
