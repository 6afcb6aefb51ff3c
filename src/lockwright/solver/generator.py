"""Rule generation: turn a request and the reachable pool into rules.

Reachability is a breadth-first walk from the satisfiers of the root
requirements and the pinned candidates, following requirement links. Rules
come out in a fixed order, which the solver relies on when choosing what to
decide next:

1. one ``ROOT_REQUIRE`` rule per root requirement, in request order;
2. ``FIXED`` and ``LOCKED`` unit rules, then ``ROOT_CONFLICT`` unit rules;
3. ``PACKAGE_REQUIRES`` and ``PACKAGE_CONFLICT`` rules in walk order;
4. one ``SAME_NAME`` rule per name shared by two or more reachable candidates.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterable

from lockwright.package import Candidate, Link
from lockwright.pool import Pool
from lockwright.semver import Constraint
from lockwright.solver.request import Request
from lockwright.solver.rules import Rule, RuleSet, RuleType

logger = logging.getLogger(__name__)


class RuleGenerator:
    """Generate the rule set for one solve.

    Args:
        pool: The pool to draw candidates from.
        request: The request being solved.
    """

    def __init__(self, pool: Pool, request: Request) -> None:
        self.pool = pool
        self.request = request
        self.reachable: list[Candidate] = []
        self.fixed_ids: set[int] = set()
        self._reached: set[int] = set()
        self._queue: deque[Candidate] = deque()

    def generate(self) -> RuleSet:
        """Build and return the rules.

        Raises:
            ValueError: If a fixed candidate has no counterpart in the pool.
        """
        rules = RuleSet()
        pool, request = self.pool, self.request

        for link in request.requires:
            satisfiers = self._satisfiers(link.name, link.constraint)
            rules.add(Rule(tuple(pool.id_of(c) for c in satisfiers), RuleType.ROOT_REQUIRE, link=link))
            self._reach(satisfiers)

        for fixed in request.fixed:
            candidate = self._find(fixed)
            if candidate is None:
                raise ValueError(f"fixed candidate {fixed} is not in the pool")
            candidate_id = pool.id_of(candidate)
            self.fixed_ids.add(candidate_id)
            rules.add(Rule((candidate_id,), RuleType.FIXED, source=candidate))
            self._reach([candidate])

        for candidate in self._pinned_locks():
            candidate_id = pool.id_of(candidate)
            self.fixed_ids.add(candidate_id)
            rules.add(Rule((candidate_id,), RuleType.LOCKED, source=candidate))
            self._reach([candidate])

        for link in request.conflicts:
            for other in self._conflicting(link.name, link.constraint, exclude=None):
                rules.add(Rule((-pool.id_of(other),), RuleType.ROOT_CONFLICT, link=link))

        while self._queue:
            candidate = self._queue.popleft()
            candidate_id = pool.id_of(candidate)
            for link in candidate.requires:
                satisfiers = self._satisfiers(link.target, link.constraint)
                if candidate in satisfiers:
                    # a package satisfying its own requirement needs nothing
                    continue
                literals = (-candidate_id,) + tuple(pool.id_of(c) for c in satisfiers)
                rules.add(Rule(literals, RuleType.PACKAGE_REQUIRES, source=candidate, link=link))
                self._reach(satisfiers)
            for link in candidate.conflicts:
                for other in self._conflicting(link.target, link.constraint, exclude=candidate):
                    rules.add(
                        Rule(
                            (-candidate_id, -pool.id_of(other)),
                            RuleType.PACKAGE_CONFLICT,
                            source=candidate,
                            link=link,
                        )
                    )

        for members in self._same_name_groups():
            rules.add(Rule(tuple(-pool.id_of(c) for c in members), RuleType.SAME_NAME))

        logger.debug(
            "Generated %d rule(s) over %d reachable candidate(s)", len(rules), len(self.reachable)
        )
        return rules

    # -- Helpers ------------------------------------------------------------

    def _satisfiers(self, name: str, constraint: Constraint) -> list[Candidate]:
        request = self.request
        return list(
            self.pool.satisfiers(name, constraint, request.minimum_stability, request.stability_flags)
        )

    def _conflicting(self, name: str, constraint: Constraint, exclude: Candidate | None) -> list[Candidate]:
        """Candidates a conflict link on *name* matches, ignoring stability."""
        found = [c for c in self.pool.lookup(name) if c.satisfies(constraint)]
        for provider in self.pool.providers(name):
            links: Iterable[Link] = provider.provides + provider.replaces
            if any(a.key == name.lower() and a.constraint.intersects(constraint) for a in links):
                found.append(provider)
        return [c for c in found if c is not exclude]

    def _find(self, candidate: Candidate) -> Candidate | None:
        """The pool's own candidate for *candidate* (same object, or same name and version)."""
        if candidate in self.pool:
            return candidate
        for match in self.pool.lookup(candidate.name):
            if match.version == candidate.version:
                return match
        return None

    def _pinned_locks(self) -> list[Candidate]:
        """Locked candidates a partial update is not allowed to move."""
        if self.request.update_allowlist is None:
            return []
        pinned = []
        for locked in self.request.locked:
            if self.request.may_update(locked.name):
                continue
            candidate = self._find(locked)
            if candidate is None:
                logger.warning("Locked %s is no longer available and cannot be kept", locked)
                continue
            pinned.append(candidate)
        return pinned

    def _reach(self, candidates: Iterable[Candidate]) -> None:
        for candidate in candidates:
            candidate_id = self.pool.id_of(candidate)
            if candidate_id not in self._reached:
                self._reached.add(candidate_id)
                self.reachable.append(candidate)
                self._queue.append(candidate)

    def _same_name_groups(self) -> list[list[Candidate]]:
        groups: dict[str, list[Candidate]] = {}
        for candidate in self.reachable:
            for name in candidate.names(include_provides=False):
                groups.setdefault(name, []).append(candidate)
        return [members for members in groups.values() if len(members) > 1]
