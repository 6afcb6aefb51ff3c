"""What the caller asks the solver for.

A ``Request`` is built once (``Request.create`` or ``Manifest.to_request``)
and never changes afterwards. It carries the root requirements in
declaration order, root conflicts, pinned candidates, the previously locked
candidates used as update preference, the partial-update allow-list and the
stability settings.
"""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Union

from lockwright.package import Candidate
from lockwright.semver import Constraint, Stability

ConstraintLike = Union[str, Constraint]


@dataclass(frozen=True)
class RequiredLink:
    """A root requirement (or root conflict): a name and a constraint.

    Attributes:
        name: Package name as written in the manifest.
        constraint: Parsed constraint.
        dev: True for ``require-dev`` entries.
    """

    name: str
    constraint: Constraint
    dev: bool = False

    @property
    def key(self) -> str:
        return self.name.lower()

    def __str__(self) -> str:
        return f"{self.name} {self.constraint.raw}"


def _links(items: Mapping[str, ConstraintLike] | Iterable[RequiredLink] | None, dev: bool) -> list[RequiredLink]:
    if not items:
        return []
    if isinstance(items, Mapping):
        out = []
        for name, constraint in items.items():
            if not isinstance(constraint, Constraint):
                constraint = Constraint.parse(constraint)
            out.append(RequiredLink(name, constraint, dev))
        return out
    return list(items)


@dataclass(frozen=True)
class Request:
    """Immutable solver input.

    Attributes:
        requires: Root requirements in declaration order (dev last).
        conflicts: Root conflicts; matching candidates are never installed.
        fixed: Candidates that must be installed as-is (platform packages).
        locked: Candidates of the previous lock, preferred on re-solve.
        update_allowlist: Name patterns a partial update may change. None
            means every package may move.
        minimum_stability: Default stability floor.
        stability_flags: Per-package floors overriding the default.
        prefer_stable: Prefer more stable candidates over newer ones.
        prefer_lowest: Prefer lower versions instead of higher ones.
    """

    requires: tuple[RequiredLink, ...] = ()
    conflicts: tuple[RequiredLink, ...] = ()
    fixed: tuple[Candidate, ...] = ()
    locked: tuple[Candidate, ...] = ()
    update_allowlist: frozenset[str] | None = None
    minimum_stability: Stability = Stability.STABLE
    stability_flags: Mapping[str, Stability] = field(default_factory=lambda: MappingProxyType({}))
    prefer_stable: bool = True
    prefer_lowest: bool = False

    @classmethod
    def create(
        cls,
        requires: Mapping[str, ConstraintLike] | Iterable[RequiredLink] | None = None,
        dev_requires: Mapping[str, ConstraintLike] | None = None,
        conflicts: Mapping[str, ConstraintLike] | None = None,
        fixed: Iterable[Candidate] = (),
        locked: Iterable[Candidate] = (),
        update: Iterable[str] | None = None,
        minimum_stability: Stability | str = Stability.STABLE,
        stability_flags: Mapping[str, Stability] | None = None,
        prefer_stable: bool = True,
        prefer_lowest: bool = False,
    ) -> Request:
        """Build a request from plain mappings of constraint text.

        Explicit ``@flag`` suffixes on root requirements become per-package
        stability flags unless *stability_flags* already names the package.

        Raises:
            InvalidConstraintFormat: If any constraint text is malformed.
        """
        if isinstance(minimum_stability, str):
            minimum_stability = Stability.parse(minimum_stability)
        links = _links(requires, dev=False) + _links(dev_requires, dev=True)
        flags = {name.lower(): s for name, s in (stability_flags or {}).items()}
        derived: dict[str, Stability] = {}
        for link in links:
            if link.constraint.stability is not None and link.key not in flags:
                current = derived.get(link.key)
                derived[link.key] = (
                    link.constraint.stability if current is None else min(current, link.constraint.stability)
                )
        flags.update(derived)
        return cls(
            requires=tuple(links),
            conflicts=tuple(_links(conflicts, dev=False)),
            fixed=tuple(fixed),
            locked=tuple(locked),
            update_allowlist=None if update is None else frozenset(n.lower() for n in update),
            minimum_stability=minimum_stability,
            stability_flags=MappingProxyType(flags),
            prefer_stable=prefer_stable,
            prefer_lowest=prefer_lowest,
        )

    def floor_for(self, name: str) -> Stability:
        """Stability floor that applies to candidates named *name*."""
        return self.stability_flags.get(name.lower(), self.minimum_stability)

    def may_update(self, name: str) -> bool:
        """True when a partial update is allowed to change *name*."""
        if self.update_allowlist is None:
            return True
        key = name.lower()
        return any(fnmatch.fnmatchcase(key, pattern) for pattern in self.update_allowlist)

    @property
    def root_names(self) -> list[str]:
        names: list[str] = []
        for link in self.requires:
            if link.key not in names:
                names.append(link.key)
        return names
