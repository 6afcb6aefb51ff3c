"""Building a lock from a solver result.

``from_decisions`` is the normal way a lock comes into existence::

    resolution = solve(pool, manifest.to_request())
    lock = LockFile.from_decisions(resolution.unwrap(), manifest, request)
    lock.write(Path("composer.lock"))

Installed packages are split into ``packages`` and ``packages-dev`` by
reachability: anything reachable from a ``require`` entry of the manifest,
following requirement links through the decision set, is a runtime package;
the rest were pulled in only by ``require-dev``.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Any

from lockwright.package import Candidate
from lockwright.solver import DecisionSet, Request

if TYPE_CHECKING:
    from lockwright.manifest import Manifest


def runtime_packages(decisions: DecisionSet, root_names: list[str]) -> set[str]:
    """Keys of installed packages reachable from *root_names*."""
    answers: dict[str, list[Candidate]] = {}
    for candidate in decisions:
        for name in candidate.names():
            answers.setdefault(name, []).append(candidate)

    reached: set[str] = set()
    queue: deque[str] = deque(name.lower() for name in root_names)
    visited: set[str] = set()
    while queue:
        name = queue.popleft()
        if name in visited:
            continue
        visited.add(name)
        for candidate in answers.get(name, ()):
            if candidate.key in reached:
                continue
            reached.add(candidate.key)
            queue.extend(link.key for link in candidate.requires)
    return reached


def _from_decisions(
    cls: type,
    decisions: DecisionSet,
    manifest: Manifest,
    request: Request | None = None,
    dev: bool = True,
) -> Any:
    """Create a lock for *decisions* computed from *manifest*.

    Args:
        decisions: A successful solve's decision set.
        manifest: The manifest the request was built from; supplies the
            content hash, stability settings and platform requirements.
        request: The request that was solved, for ``prefer-lowest``.
        dev: Whether ``require-dev`` was part of the solve. When False the
            lock records that dev packages were left out.

    Returns:
        A new ``LockFile`` with packages sorted by name.
    """
    runtime = runtime_packages(decisions, list(manifest.require))
    packages = [c for c in decisions if c.key in runtime]
    packages_dev = [c for c in decisions if c.key not in runtime]
    if not dev:
        packages, packages_dev = packages + packages_dev, []

    return cls(
        content_hash=manifest.content_hash(),
        packages=sorted(packages, key=lambda c: c.key),
        packages_dev=sorted(packages_dev, key=lambda c: c.key),
        dev_included=dev,
        minimum_stability=manifest.minimum_stability,
        stability_flags=manifest.stability_flags(),
        prefer_stable=manifest.prefer_stable,
        prefer_lowest=request.prefer_lowest if request is not None else False,
        platform=manifest.platform_requirements(),
        platform_dev=manifest.platform_requirements(dev=True),
        platform_overrides=manifest.platform or None,
    )
