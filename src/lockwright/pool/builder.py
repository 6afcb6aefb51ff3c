"""Transitive pool construction from repository collaborators.

The builder asks repositories for candidates name by name, starting from the
root requirement names and following every ``require`` target it discovers.
Repositories are consulted in priority order: the first repository that
knows a name supplies all of its candidates, unless ``merge=True``.

Repositories that can also answer "who provides this name" (the optional
``providers_of`` method of ``ArrayRepository``) contribute providers and
replacers of each visited name, so virtual packages resolve.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterable, Protocol, Sequence, runtime_checkable

from lockwright.package import Candidate
from lockwright.pool.pool import Pool
from lockwright.repository import Repository

logger = logging.getLogger(__name__)


@runtime_checkable
class ProviderIndex(Protocol):
    """Optional repository capability: reverse lookup of provide/replace links."""

    def providers_of(self, name: str) -> list[Candidate]:
        ...


class PoolBuilder:
    """Collect every candidate reachable from a set of root names.

    Args:
        repositories: Repositories in priority order (platform first).
        merge: When True, every repository contributes candidates for a
            name instead of only the first one that knows it.
    """

    def __init__(self, repositories: Sequence[Repository], merge: bool = False) -> None:
        self.repositories = tuple(repositories)
        self.merge = merge

    def build(self, request_names: Iterable[str], extra: Iterable[Candidate] = ()) -> Pool:
        """Fetch candidates transitively and build a validated pool.

        Args:
            request_names: Root requirement names to start from.
            extra: Candidates to add up front (for example locked
                candidates no longer published by any repository).

        Returns:
            The pool, candidates in discovery order.

        Raises:
            RepositoryUnavailable: If any repository fails to answer.
            ProvideCycle: If the collected candidates alias each other
                in a cycle.
        """
        collected: list[Candidate] = []
        seen_candidates: set[int] = set()
        visited: set[str] = set()
        queue: deque[str] = deque()

        def add(candidate: Candidate) -> None:
            if id(candidate) in seen_candidates:
                return
            seen_candidates.add(id(candidate))
            collected.append(candidate)
            for link in candidate.requires:
                if link.key not in visited:
                    queue.append(link.key)

        for candidate in extra:
            add(candidate)
        for name in request_names:
            queue.append(name.lower())

        fetches = 0
        while queue:
            name = queue.popleft()
            if name in visited:
                continue
            visited.add(name)
            for candidate in self._fetch(name):
                add(candidate)
            fetches += 1

        logger.info(
            "Collected %d candidate(s) for %d name(s) from %d repositor%s",
            len(collected), fetches, len(self.repositories),
            "y" if len(self.repositories) == 1 else "ies",
        )
        return Pool.build(collected)

    def _fetch(self, name: str) -> list[Candidate]:
        found: list[Candidate] = []
        for repo in self.repositories:
            candidates = repo.fetch_candidates(name)
            if candidates:
                found.extend(candidates)
                if not self.merge:
                    break
        for repo in self.repositories:
            if isinstance(repo, ProviderIndex):
                found.extend(c for c in repo.providers_of(name) if c not in found)
        if not found:
            logger.debug("No repository knows %s", name)
        return found
