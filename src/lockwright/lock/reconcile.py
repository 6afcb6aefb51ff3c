"""Deciding whether a lock is still valid, and re-solving when it is not.

A lock is stale when the manifest's content hash no longer matches the one
stored in the lock, or when the platform requirements recorded in the lock
differ from the manifest's. A lock written with ``--no-dev`` is also stale
for a solve that wants the dev requirements. A fresh lock is returned as-is
without running the solver; a stale one is re-solved with its versions as
the first preference, so unrelated packages keep their locked versions.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from lockwright.package import Candidate
from lockwright.pool import Pool
from lockwright.solver import Deadline, Policy, Resolution, ResolutionStatus, solve

if TYPE_CHECKING:
    from lockwright.lock.lockfile import LockFile
    from lockwright.manifest import Manifest

logger = logging.getLogger(__name__)


def is_stale(lock: LockFile, manifest: Manifest, dev: bool = True) -> bool:
    """True when *lock* no longer reflects *manifest*.

    Args:
        lock: The current lock.
        manifest: The project manifest.
        dev: Whether the caller needs ``require-dev`` resolved.
    """
    if lock.content_hash != manifest.content_hash():
        logger.debug("content-hash %s differs from manifest", lock.content_hash)
        return True
    if lock.platform != manifest.platform_requirements():
        return True
    if lock.platform_dev != manifest.platform_requirements(dev=True):
        return True
    if dev and not lock.dev_included and manifest.require_dev:
        logger.debug("lock was written without require-dev")
        return True
    return False


def reconcile(
    lock: LockFile | None,
    manifest: Manifest,
    pool: Pool,
    deadline: Deadline | None = None,
    update: bool | Iterable[str] | None = None,
    dev: bool = True,
    fixed: Iterable[Candidate] = (),
    prefer_lowest: bool = False,
    ignore_platform: bool = False,
    policy: Policy | None = None,
) -> Resolution:
    """Bring *lock* in line with *manifest*.

    Args:
        lock: The current lock, or None when there is none yet.
        manifest: The project manifest.
        pool: Candidates to solve against.
        deadline: Optional cancellation budget for the solve.
        update: None (or False) to re-solve only a stale lock, True for a
            full update ignoring locked versions, or names (patterns) for a
            partial update that pins every other locked package.
        dev: Include ``require-dev``.
        fixed: Pinned candidates, normally the platform packages.
        prefer_lowest: Prefer the lowest matching versions.
        ignore_platform: Drop requirements on platform packages.
        policy: Candidate preference; derived from the request when None.

    Returns:
        A ``Resolution``. When the lock is fresh and no update was asked
        for, its decisions are the lock's own and ``solved`` is False.
    """
    if lock is not None and not update and not is_stale(lock, manifest, dev):
        logger.info("Lock file is up to date (%d package(s))", len(lock.all_packages))
        return Resolution(ResolutionStatus.SOLVED, decisions=lock.decisions(dev), solved=False)

    locked: tuple[Candidate, ...] = ()
    allowlist: list[str] | None = None
    prior = None
    if lock is not None and update is not True:
        locked = tuple(lock.all_packages)
        if update:
            allowlist = list(update)
            logger.info("Partial update of %s", ", ".join(allowlist))
        else:
            prior = lock.decisions()
            logger.info("Lock file is stale; re-solving with locked versions preferred")

    request = manifest.to_request(
        locked=locked,
        update=allowlist,
        dev=dev,
        fixed=fixed,
        prefer_lowest=prefer_lowest,
        ignore_platform=ignore_platform,
    )
    return solve(pool, request, prior_decisions=prior, deadline=deadline, policy=policy)
