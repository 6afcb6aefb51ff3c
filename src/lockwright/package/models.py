"""Package data types: links between packages and pool candidates.

A ``Candidate`` is one concrete (name, version) with its own requirement,
conflict, provide and replace links, as published by a repository. Candidates
are compared by identity: the pool owns them and the solver only ever refers
to them, never copies or mutates them.

Provide and replace links make a candidate answer requirements addressed to
another name (virtual packages such as ``psr/log-implementation``). A replace
additionally means the two cannot be installed together.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from lockwright.semver import Constraint, Stability, Version


# ---------------------------------------------------------------------------
# Platform packages
# ---------------------------------------------------------------------------

_PLATFORM_RE = re.compile(
    r"^(?:php(?:-64bit|-ipv6|-zts|-debug)?|hhvm|(?:ext|lib)-[a-z0-9](?:[_.+-]?[a-z0-9]+)*"
    r"|composer(?:-(?:plugin|runtime)-api)?)$",
    re.IGNORECASE,
)


def is_platform_package(name: str) -> bool:
    """True for interpreter/extension pseudo-packages (``php``, ``ext-json``...)."""
    return bool(_PLATFORM_RE.match(name))


# ---------------------------------------------------------------------------
# Link
# ---------------------------------------------------------------------------


class LinkKind(str, Enum):
    """Relationship carried by a ``Link``; values match manifest keys."""

    REQUIRES = "require"
    CONFLICTS = "conflict"
    PROVIDES = "provide"
    REPLACES = "replace"
    DEV_REQUIRES = "require-dev"

    @property
    def verb(self) -> str:
        return _LINK_VERBS[self]


_LINK_VERBS: dict[LinkKind, str] = {
    LinkKind.REQUIRES: "requires",
    LinkKind.CONFLICTS: "conflicts with",
    LinkKind.PROVIDES: "provides",
    LinkKind.REPLACES: "replaces",
    LinkKind.DEV_REQUIRES: "requires (for development)",
}


@dataclass(frozen=True)
class Link:
    """A directed relationship from one package to a name and constraint.

    Attributes:
        source: Name of the declaring package.
        target: Name the link points at, as authored.
        constraint: Versions of *target* the link applies to.
        kind: Requirement, conflict, provide, replace or dev requirement.
        pretty_constraint: Constraint text as authored (``self.version``
            stays verbatim here while ``constraint`` holds the resolved
            version).
    """

    source: str
    target: str
    constraint: Constraint
    kind: LinkKind = LinkKind.REQUIRES
    pretty_constraint: str = ""

    def __post_init__(self) -> None:
        if not self.pretty_constraint:
            object.__setattr__(self, "pretty_constraint", self.constraint.raw)

    @property
    def key(self) -> str:
        """Case-folded target name used for lookups."""
        return self.target.lower()

    def __str__(self) -> str:
        return f"{self.source} {self.kind.verb} {self.target} ({self.pretty_constraint})"


# ---------------------------------------------------------------------------
# Candidate
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Candidate:
    """One installable (name, version) known to the pool.

    Attributes:
        name: Package name as published (``vendor/package``).
        version: Parsed version.
        pretty_version: Version text as published, written back to locks.
        requires: Requirement links.
        conflicts: Conflict links.
        provides: Provide links (virtual names this candidate satisfies).
        replaces: Replace links (names this candidate stands in for).
        dev_requires: Development requirements, recorded for lock output only.
        metadata: Opaque distribution data (source, dist, type, license...),
            preserved in order for lock output.
        alias: Version a branch is published as through ``extra.branch-alias``
            (``dev-main`` as ``2.x-dev``); constraints may match either.
    """

    name: str
    version: Version
    pretty_version: str = ""
    requires: tuple[Link, ...] = ()
    conflicts: tuple[Link, ...] = ()
    provides: tuple[Link, ...] = ()
    replaces: tuple[Link, ...] = ()
    dev_requires: tuple[Link, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)
    alias: Version | None = None

    def __post_init__(self) -> None:
        if not self.pretty_version:
            object.__setattr__(self, "pretty_version", str(self.version))
        if not isinstance(self.metadata, MappingProxyType):
            object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def key(self) -> str:
        """Case-folded package name used for lookups."""
        return self.name.lower()

    @property
    def stability(self) -> Stability:
        return self.version.stability

    @property
    def is_platform(self) -> bool:
        return is_platform_package(self.name)

    def satisfies(self, constraint: Constraint, minimum_stability: Stability | None = None) -> bool:
        """True when the version, or the branch alias, satisfies *constraint*.

        With *minimum_stability* None only the version range is checked.
        """
        versions = (self.version,) if self.alias is None else (self.version, self.alias)
        if minimum_stability is None:
            return any(constraint.contains(v) for v in versions)
        return any(constraint.matches(v, minimum_stability) for v in versions)

    def names(self, include_provides: bool = True) -> list[str]:
        """Names this candidate answers to: its own, replaced, and provided.

        Args:
            include_provides: When False, only the own name and replaced
                names are returned (the names that exclude each other).
        """
        names = [self.key]
        links = self.replaces + self.provides if include_provides else self.replaces
        for link in links:
            if link.key not in names:
                names.append(link.key)
        return names

    def links(self) -> tuple[Link, ...]:
        return self.requires + self.conflicts + self.provides + self.replaces

    def __str__(self) -> str:
        return f"{self.name} {self.pretty_version}"

    def __repr__(self) -> str:
        return f"Candidate({self.name!r}, {self.pretty_version!r})"
