"""Solver outputs: the decision set and the resolution result around it."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator

from lockwright.exceptions import SolverTimeout, UnsatisfiableError
from lockwright.package import Candidate
from lockwright.semver import Version
from lockwright.solver.problems import Problem


# ---------------------------------------------------------------------------
# DecisionSet
# ---------------------------------------------------------------------------


class DecisionSet:
    """The chosen version of every installed package.

    Equality and hashing look only at the ``name -> version`` mapping of
    non-platform packages, so a decision set read back from a lock file
    equals the one that produced it.

    Args:
        candidates: Installed candidates. Platform packages are split off
            into ``platform``.
        absent: Names that were considered and explicitly not installed.
    """

    def __init__(self, candidates: Iterable[Candidate] = (), absent: Iterable[str] = ()) -> None:
        installed: dict[str, Candidate] = {}
        platform: dict[str, Candidate] = {}
        for candidate in candidates:
            target = platform if candidate.is_platform else installed
            if candidate.key in target and target[candidate.key] is not candidate:
                raise ValueError(f"two versions of {candidate.name} in one decision set")
            target[candidate.key] = candidate
        self._installed = {k: installed[k] for k in sorted(installed)}
        self.platform: tuple[Candidate, ...] = tuple(platform[k] for k in sorted(platform))
        self.absent: frozenset[str] = frozenset(n.lower() for n in absent) - set(self._installed)

    def get(self, name: str) -> Version | None:
        candidate = self._installed.get(name.lower())
        return candidate.version if candidate else None

    def candidate(self, name: str) -> Candidate | None:
        return self._installed.get(name.lower())

    def is_installed(self, name: str) -> bool:
        return name.lower() in self._installed

    def as_dict(self) -> dict[str, str]:
        """``name -> pretty version`` in name order."""
        return {c.name: c.pretty_version for c in self._installed.values()}

    def versions(self) -> dict[str, Version]:
        return {key: c.version for key, c in self._installed.items()}

    @property
    def candidates(self) -> tuple[Candidate, ...]:
        return tuple(self._installed.values())

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self._installed.values())

    def __len__(self) -> int:
        return len(self._installed)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.is_installed(name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DecisionSet):
            return NotImplemented
        return self.versions() == other.versions()

    def __hash__(self) -> int:
        return hash(frozenset(self.versions().items()))

    def __repr__(self) -> str:
        return f"DecisionSet({self.as_dict()})"


# ---------------------------------------------------------------------------
# Deadline
# ---------------------------------------------------------------------------


class Deadline:
    """Cooperative cancellation for a solve.

    The clock starts when the deadline is created. Either limit may be
    omitted; with neither the deadline never expires.

    Args:
        seconds: Wall-clock budget measured with ``time.monotonic``.
        max_decisions: Number of decision levels the solver may push.
    """

    def __init__(self, seconds: float | None = None, max_decisions: int | None = None) -> None:
        self.seconds = seconds
        self.max_decisions = max_decisions
        self._start = time.monotonic()

    def expired(self, decisions: int = 0) -> bool:
        if self.max_decisions is not None and decisions >= self.max_decisions:
            return True
        if self.seconds is not None and time.monotonic() - self._start >= self.seconds:
            return True
        return False

    @property
    def remaining(self) -> float | None:
        if self.seconds is None:
            return None
        return max(0.0, self.seconds - (time.monotonic() - self._start))

    def __repr__(self) -> str:
        return f"Deadline(seconds={self.seconds}, max_decisions={self.max_decisions})"


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class ResolutionStatus(str, Enum):
    SOLVED = "solved"
    UNSATISFIABLE = "unsatisfiable"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class SolverStats:
    """Counters describing the work one solve did."""

    rules: int = 0
    learned: int = 0
    decisions: int = 0
    conflicts: int = 0
    elapsed: float = 0.0


@dataclass
class Resolution:
    """Result of a solve.

    Attributes:
        status: Outcome of the solve.
        decisions: The decision set when ``status`` is SOLVED, else None.
        problems: Explanations when ``status`` is UNSATISFIABLE.
        stats: Work counters.
        solved: False when the decisions were taken from an up-to-date lock
            without running the solver.
    """

    status: ResolutionStatus
    decisions: DecisionSet | None = None
    problems: list[Problem] = field(default_factory=list)
    stats: SolverStats = field(default_factory=SolverStats)
    solved: bool = True

    @property
    def success(self) -> bool:
        return self.status is ResolutionStatus.SOLVED

    def unwrap(self) -> DecisionSet:
        """Return the decision set or raise the matching error.

        Raises:
            UnsatisfiableError: If no valid decision set exists.
            SolverTimeout: If the deadline expired first.
        """
        if self.status is ResolutionStatus.UNSATISFIABLE:
            raise UnsatisfiableError(self.problems)
        if self.status is ResolutionStatus.TIMEOUT:
            raise SolverTimeout(
                f"Resolution did not finish within its deadline "
                f"({self.stats.decisions} decisions, {self.stats.elapsed:.2f}s)"
            )
        assert self.decisions is not None
        return self.decisions

    def explain(self) -> str:
        """Render the problems the way Composer prints them."""
        if not self.problems:
            return ""
        return str(UnsatisfiableError(self.problems))
