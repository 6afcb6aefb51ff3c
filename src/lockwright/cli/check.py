"""``lockwright check <project>`` — is composer.lock in sync with composer.json?

Exit Codes:
    0 — The lock is up to date (and valid, with ``--strict``).
    1 — The lock is missing, stale, or (with ``--strict``) inconsistent.
    2 — The manifest or lock cannot be read.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from lockwright.exceptions import LockwrightError
from lockwright.lock import LOCK_FILENAME, MANIFEST_FILENAME, LockFile, is_stale
from lockwright.manifest import Manifest


@click.command("check")
@click.argument("project_dir", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--strict", is_flag=True, help="Also fail when the lock has consistency errors.")
@click.option("--no-dev", is_flag=True, help="Accept a lock written without require-dev.")
def check_command(project_dir: str, strict: bool, no_dev: bool) -> None:
    """Check that PROJECT_DIR/composer.lock matches composer.json.

    Exit code 0 if fresh, 1 if stale or missing, 2 on unreadable input.
    """
    from lockwright.cli.output import print_lock_status

    target = Path(project_dir)
    lock_path = target / LOCK_FILENAME
    try:
        manifest = Manifest.read(target / MANIFEST_FILENAME)
        if not lock_path.exists():
            click.echo(f"No {LOCK_FILENAME} found in {target}.")
            sys.exit(1)
        lock = LockFile.read(lock_path)
    except LockwrightError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    fresh = not is_stale(lock, manifest, dev=not no_dev)
    errors = lock.validate() if strict else []
    print_lock_status(fresh, errors)
    sys.exit(0 if fresh and not errors else 1)
