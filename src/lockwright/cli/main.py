"""Lockwright CLI — resolve dependencies and keep composer.lock in sync.

Entry point for the ``lockwright`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    lock     — Resolve composer.json and write composer.lock.
    check    — Report whether composer.lock is up to date.
    why-not  — Explain what blocks a package version.

Usage::

    lockwright lock ./project -r packages.json
    lockwright lock ./project -r packages.json --platform php=8.2.0
    lockwright lock ./project -r packages.json --update vendor/pkg
    lockwright check ./project
    lockwright why-not vendor/pkg ^3.0 ./project -r packages.json
"""

from __future__ import annotations

import logging

import click

from lockwright import __version__
from lockwright.cli.check import check_command
from lockwright.cli.lock import lock_command
from lockwright.cli.why_not import why_not_command


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", count=True, help="Log solver progress (-vv for debug).")
def cli(verbose: int) -> None:
    """Lockwright: dependency resolution for composer.json projects.

    Solves package requirements with a conflict-driven SAT solver and
    writes reproducible, Composer-compatible lock files.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG if verbose > 1 else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )


# Register all subcommands
cli.add_command(lock_command)
cli.add_command(check_command)
cli.add_command(why_not_command)
