"""Repository collaborator contract and the in-memory repository.

A repository answers one question: which candidates exist for a name. The
core requires answers to be deterministic for a given name and to report
failures with ``RepositoryUnavailable`` instead of an empty list, which would
be read as "this package does not exist".
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable, Protocol, runtime_checkable

from lockwright.package import Candidate

logger = logging.getLogger(__name__)


@runtime_checkable
class Repository(Protocol):
    """Anything that can list candidates for a package name."""

    name: str

    def fetch_candidates(self, name: str) -> list[Candidate]:
        """Return every known candidate for *name* (case-insensitive).

        Raises:
            RepositoryUnavailable: If the repository cannot answer.
        """
        ...


class ArrayRepository:
    """A repository backed by an in-memory list of candidates.

    Candidates are returned in insertion order, which makes the pool (and
    therefore the solver) deterministic for a given input ordering.
    """

    def __init__(self, candidates: Iterable[Candidate] = (), name: str = "array") -> None:
        self.name = name
        self._by_name: dict[str, list[Candidate]] = defaultdict(list)
        for candidate in candidates:
            self.add(candidate)

    def add(self, candidate: Candidate) -> None:
        self._by_name[candidate.key].append(candidate)

    def fetch_candidates(self, name: str) -> list[Candidate]:
        found = list(self._by_name.get(name.lower(), ()))
        logger.debug("%s: %d candidate(s) for %s", self.name, len(found), name)
        return found

    def providers_of(self, name: str) -> list[Candidate]:
        """Candidates of other names that provide or replace *name*."""
        key = name.lower()
        return [
            c
            for candidates in self._by_name.values()
            for c in candidates
            if c.key != key and key in c.names()
        ]

    def candidates(self) -> list[Candidate]:
        return [c for candidates in self._by_name.values() for c in candidates]

    def __len__(self) -> int:
        return sum(len(v) for v in self._by_name.values())
