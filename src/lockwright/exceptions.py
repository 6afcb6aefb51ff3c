"""Lockwright exception hierarchy.

All public exceptions inherit from LockwrightError, giving callers a single
base class to catch when they want to handle any lockwright-specific failure
without swallowing unrelated errors.

Unsatisfiable and timed-out solves are normally reported through
``Resolution.status`` rather than raised; ``Resolution.unwrap()`` converts
them into ``UnsatisfiableError`` and ``SolverTimeout`` for callers that prefer
exceptions.
"""

from __future__ import annotations

from typing import Any


class LockwrightError(Exception):
    """Base exception for all lockwright errors."""


class ParseError(LockwrightError):
    """Raised when version or constraint text cannot be parsed.

    Parse errors are never recovered locally: the offending text (and, when
    known, the package it came from) travels with the exception so the caller
    can render a precise message.
    """

    def __init__(self, text: Any, reason: str = "", package: str | None = None) -> None:
        self.text = text
        self.reason = reason
        self.package = package
        super().__init__(self._render())

    def _render(self) -> str:
        msg = f"{self.kind} {self.text!r}"
        if self.package:
            msg += f" in package {self.package!r}"
        if self.reason:
            msg += f": {self.reason}"
        return msg

    @property
    def kind(self) -> str:
        return "Invalid input"

    def for_package(self, package: str) -> ParseError:
        """Return a copy of this error annotated with the owning package."""
        return type(self)(self.text, self.reason, package)


class InvalidVersionFormat(ParseError):
    """Raised when a version string is malformed."""

    @property
    def kind(self) -> str:
        return "Invalid version string"


class InvalidConstraintFormat(ParseError):
    """Raised when a version constraint string is malformed."""

    @property
    def kind(self) -> str:
        return "Invalid version constraint"


class PoolError(LockwrightError):
    """Raised when a candidate pool cannot be built from repository data."""


class ProvideCycle(PoolError):
    """Raised when provide/replace links between package names form a cycle.

    Attributes:
        cycle: Package names along the cycle, first name repeated at the end
            (e.g. ``["a/a", "b/b", "a/a"]``).
    """

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = list(cycle)
        super().__init__(
            "Provide/replace cycle detected: " + " -> ".join(self.cycle)
        )


class RepositoryUnavailable(LockwrightError):
    """Raised when a repository collaborator fails to deliver candidates.

    Distinct from "package does not exist": a repository that cannot answer
    must raise this instead of returning an empty list.
    """

    def __init__(self, name: str, repository: str = "", reason: str = "") -> None:
        self.name = name
        self.repository = repository
        self.reason = reason
        where = f" from {repository}" if repository else ""
        why = f": {reason}" if reason else ""
        super().__init__(f"Could not fetch {name!r}{where}{why}")


class ResolutionError(LockwrightError):
    """Base class for solver outcomes surfaced as exceptions."""


class UnsatisfiableError(ResolutionError):
    """Raised by ``Resolution.unwrap()`` when no valid decision set exists.

    Attributes:
        problems: The rendered ``Problem`` objects explaining the failure.
    """

    def __init__(self, problems: list[Any]) -> None:
        self.problems = list(problems)
        lines = ["Your requirements could not be resolved to an installable set of packages."]
        for i, problem in enumerate(self.problems, start=1):
            lines.append(f"  Problem {i}")
            lines.extend(f"    - {line}" for line in problem.lines())
        super().__init__("\n".join(lines))


class SolverTimeout(ResolutionError):
    """Raised by ``Resolution.unwrap()`` when the solve exceeded its deadline."""


class LockfileError(LockwrightError):
    """Raised for malformed or unreadable lock documents."""


class ManifestError(LockwrightError):
    """Raised for unreadable or malformed composer.json documents."""
