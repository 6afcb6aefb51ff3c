"""The candidate pool: an immutable index over every known package version.

The pool is built once from repository data and then only read. It is safe
to share one pool between any number of concurrent solves (for example one
per platform target): nothing in it changes after ``Pool.build`` returns.

Provide/replace links are validated at build time. A cycle between names
(``a`` provides ``b``, ``b`` replaces ``a``) is rejected with
``ProvideCycle`` instead of being discovered, or looped on, during search.

Candidate ids are positive integers assigned in input order; the solver uses
them as Boolean variables.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from lockwright.exceptions import ProvideCycle
from lockwright.package import Candidate, Link
from lockwright.semver import Constraint, Stability

logger = logging.getLogger(__name__)


class Pool:
    """Read-only index of candidates by name, version and provided names.

    Use ``Pool.build`` to construct one; it validates provide/replace links.
    """

    def __init__(self, candidates: Iterable[Candidate]) -> None:
        self._candidates: tuple[Candidate, ...] = tuple(candidates)
        self._ids: dict[Candidate, int] = {}
        by_name: dict[str, list[Candidate]] = defaultdict(list)
        providers: dict[str, list[tuple[Candidate, Link]]] = defaultdict(list)
        replacers: dict[str, list[Candidate]] = defaultdict(list)

        for index, candidate in enumerate(self._candidates, start=1):
            if candidate in self._ids:
                raise ValueError(f"{candidate} was added to the pool twice")
            self._ids[candidate] = index
            by_name[candidate.key].append(candidate)
            for link in candidate.provides + candidate.replaces:
                if link.key != candidate.key:
                    providers[link.key].append((candidate, link))
            for link in candidate.replaces:
                if link.key != candidate.key and candidate not in replacers[link.key]:
                    replacers[link.key].append(candidate)

        # sorted() is stable: equal versions keep insertion order.
        self._by_name: Mapping[str, tuple[Candidate, ...]] = MappingProxyType({
            name: tuple(sorted(group, key=lambda c: c.version, reverse=True))
            for name, group in by_name.items()
        })
        self._providers: Mapping[str, tuple[tuple[Candidate, Link], ...]] = MappingProxyType(
            {name: tuple(group) for name, group in providers.items()}
        )
        self._replacers: Mapping[str, tuple[Candidate, ...]] = MappingProxyType(
            {name: tuple(group) for name, group in replacers.items()}
        )

    @classmethod
    def build(cls, candidates: Iterable[Candidate]) -> Pool:
        """Build a pool, rejecting provide/replace cycles.

        Args:
            candidates: Candidates in repository order. The order decides
                ids and breaks ties between equal versions.

        Returns:
            The immutable pool.

        Raises:
            ProvideCycle: If provide/replace links between names form a cycle.
        """
        candidates = tuple(candidates)
        cycle = find_provide_cycle(candidates)
        if cycle:
            raise ProvideCycle(cycle)
        pool = cls(candidates)
        logger.debug("Built pool with %d candidate(s) over %d name(s)", len(pool), len(pool.names))
        return pool

    # -- Lookup -------------------------------------------------------------

    def lookup(self, name: str) -> tuple[Candidate, ...]:
        """Candidates named *name*, highest version first (stable on ties)."""
        return self._by_name.get(name.lower(), ())

    def satisfiers(
        self,
        name: str,
        constraint: Constraint,
        minimum_stability: Stability = Stability.STABLE,
        stability_flags: Mapping[str, Stability] | None = None,
    ) -> Iterator[Candidate]:
        """Lazily yield candidates that satisfy a requirement on *name*.

        Direct candidates come first in ``lookup`` order, then candidates of
        other names whose provide/replace link targets *name* with a
        constraint overlapping *constraint*, in pool order.

        Args:
            name: Required package name.
            constraint: Required versions.
            minimum_stability: Stability floor for candidates without a
                per-package flag.
            stability_flags: Per-package floors overriding the default.
        """
        flags = stability_flags or {}
        for candidate in self.lookup(name):
            floor = flags.get(candidate.key, minimum_stability)
            if candidate.satisfies(constraint, floor):
                yield candidate
        seen: set[Candidate] = set()
        for candidate, link in self._providers.get(name.lower(), ()):
            if candidate in seen:
                continue
            floor = constraint.effective_stability(flags.get(candidate.key, minimum_stability))
            if candidate.stability >= floor and link.constraint.intersects(constraint):
                seen.add(candidate)
                yield candidate

    def providers(self, name: str) -> tuple[Candidate, ...]:
        """Candidates of other names that provide or replace *name*."""
        out: list[Candidate] = []
        for candidate, _ in self._providers.get(name.lower(), ()):
            if candidate not in out:
                out.append(candidate)
        return tuple(out)

    def replacers(self, name: str) -> tuple[Candidate, ...]:
        """Candidates of other names that replace *name*."""
        return self._replacers.get(name.lower(), ())

    def candidate(self, candidate_id: int) -> Candidate:
        """Return the candidate with id *candidate_id* (1-based)."""
        if candidate_id < 1:
            raise KeyError(candidate_id)
        return self._candidates[candidate_id - 1]

    def id_of(self, candidate: Candidate) -> int:
        return self._ids[candidate]

    def __contains__(self, candidate: object) -> bool:
        return candidate in self._ids

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._by_name)

    def __len__(self) -> int:
        return len(self._candidates)

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self._candidates)

    def __repr__(self) -> str:
        return f"Pool({len(self)} candidates)"


# ---------------------------------------------------------------------------
# Provide/replace cycle detection
# ---------------------------------------------------------------------------


def find_provide_cycle(candidates: Iterable[Candidate]) -> list[str]:
    """Find a cycle in the name graph induced by provide/replace links.

    Uses iterative DFS coloring so deep alias chains cannot exhaust the
    interpreter stack. Self links are ignored.

    Returns:
        The cycle as a list of names with the first name repeated at the end,
        or an empty list when the graph is acyclic.
    """
    adj: dict[str, list[str]] = {}
    for candidate in candidates:
        targets = adj.setdefault(candidate.key, [])
        for link in candidate.provides + candidate.replaces:
            if link.key != candidate.key and link.key not in targets:
                targets.append(link.key)
            adj.setdefault(link.key, [])

    WHITE, GRAY, BLACK = 0, 1, 2
    color: dict[str, int] = {name: WHITE for name in adj}

    for root in adj:
        if color[root] != WHITE:
            continue
        path: list[str] = [root]
        stack: list[Iterator[str]] = [iter(adj[root])]
        color[root] = GRAY
        while stack:
            nxt = next(stack[-1], None)
            if nxt is None:
                color[path.pop()] = BLACK
                stack.pop()
                continue
            if color[nxt] == GRAY:
                return path[path.index(nxt):] + [nxt]
            if color[nxt] == WHITE:
                color[nxt] = GRAY
                path.append(nxt)
                stack.append(iter(adj[nxt]))
    return []
