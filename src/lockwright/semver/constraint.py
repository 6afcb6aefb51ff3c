"""Version constraints: parsing requirement text into version predicates.

Supported syntax (combinable):

- Exact match: ``1.2.3``, ``=1.2.3``, ``==1.2.3``
- Comparators: ``>``, ``>=``, ``<``, ``<=``, ``!=`` (also ``<>``)
- Caret: ``^1.2`` == ``>=1.2.0 <2.0.0``; ``^0.2`` == ``>=0.2.0 <0.3.0``
  (the leftmost non-zero segment is pinned)
- Tilde: ``~1.2`` == ``>=1.2.0 <1.3.0``; ``~1`` == ``>=1.0.0 <2.0.0``
- Wildcard: ``1.2.*`` / ``1.2.x`` == ``>=1.2.0 <1.3.0``; ``*`` matches anything
- Hyphen range: ``1.0 - 2.0`` == ``>=1.0.0 <=2.0.0``
- Conjunction: atoms separated by whitespace or commas
- Disjunction: groups separated by ``||`` (or a single ``|``)
- Stability flag: ``^1.0@beta``; a bare ``@dev`` means ``*@dev``
- Branch: ``dev-main`` or ``2.x-dev`` matches that branch exactly

Every conjunction is normalized at parse time into an ``Interval`` (lower
bound, upper bound, excluded points), so ``matches`` is a handful of
comparisons. Exclusive upper bounds derived from caret, tilde, wildcard and
``<X`` sit at ``X-dev``, the lowest version of release X, so pre-releases of
the excluded release never leak into the range.

Stability gating: a version is admitted only if its stability tier reaches
the effective floor. An explicit ``@flag`` replaces the caller's floor for
that constraint; a pre-release version named in the constraint
(``>=1.0-beta``) can only lower it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from lockwright.exceptions import InvalidConstraintFormat, InvalidVersionFormat
from lockwright.semver.version import Stability, Version


# ---------------------------------------------------------------------------
# Interval: the normal form of one conjunction
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Interval:
    """A contiguous version range with optional excluded points.

    ``None`` bounds are unbounded. An empty ``Interval()`` admits every
    version.
    """

    lower: Version | None = None
    lower_inclusive: bool = True
    upper: Version | None = None
    upper_inclusive: bool = False
    excluded: frozenset[Version] = field(default_factory=frozenset)

    def contains(self, version: Version) -> bool:
        if self.lower is not None:
            if version < self.lower or (version == self.lower and not self.lower_inclusive):
                return False
        if self.upper is not None:
            if version > self.upper or (version == self.upper and not self.upper_inclusive):
                return False
        return version not in self.excluded

    def intersect(self, other: Interval) -> Interval:
        lower, lower_inc = self.lower, self.lower_inclusive
        if other.lower is not None:
            if lower is None or other.lower > lower:
                lower, lower_inc = other.lower, other.lower_inclusive
            elif other.lower == lower:
                lower_inc = lower_inc and other.lower_inclusive

        upper, upper_inc = self.upper, self.upper_inclusive
        if other.upper is not None:
            if upper is None or other.upper < upper:
                upper, upper_inc = other.upper, other.upper_inclusive
            elif other.upper == upper:
                upper_inc = upper_inc and other.upper_inclusive

        return Interval(lower, lower_inc, upper, upper_inc, self.excluded | other.excluded)

    def is_empty(self) -> bool:
        """True when no version can lie in this interval.

        Exclusions only count when the interval is a single point; wider
        intervals with excluded points are reported non-empty.
        """
        if self.lower is None or self.upper is None:
            return False
        if self.lower > self.upper:
            return True
        if self.lower == self.upper:
            if not (self.lower_inclusive and self.upper_inclusive):
                return True
            return self.lower in self.excluded
        return False

    def __str__(self) -> str:
        parts: list[str] = []
        if self.lower is not None and self.lower == self.upper:
            parts.append(f"=={self.lower}")
        else:
            if self.lower is not None:
                parts.append(f"{'>=' if self.lower_inclusive else '>'}{self.lower}")
            if self.upper is not None:
                parts.append(f"{'<=' if self.upper_inclusive else '<'}{self.upper}")
        parts.extend(f"!={v}" for v in sorted(self.excluded))
        return " ".join(parts) if parts else "*"


# ---------------------------------------------------------------------------
# Constraint
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Constraint:
    """An immutable version predicate parsed from requirement text.

    Attributes:
        raw: The constraint as authored (used in messages and lock files).
        groups: Alternatives; a version matches if any interval contains it.
        stability: Explicit ``@flag``, overriding the caller's floor.
        implied_stability: Lowest stability of pre-release versions named
            in the constraint text, or None.
    """

    raw: str
    groups: tuple[Interval, ...]
    stability: Stability | None = None
    implied_stability: Stability | None = None

    @classmethod
    def parse(cls, text: str) -> Constraint:
        """Parse constraint text. See the module docstring for the grammar.

        Raises:
            InvalidConstraintFormat: If *text* is malformed.
        """
        return _parse(text)

    @classmethod
    def any(cls) -> Constraint:
        return cls("*", (Interval(),))

    @classmethod
    def exact(cls, version: Version, raw: str | None = None) -> Constraint:
        implied = version.stability if version.is_prerelease else None
        return cls(
            raw if raw is not None else str(version),
            (Interval(version, True, version, True),),
            implied_stability=implied,
        )

    def effective_stability(self, minimum_stability: Stability = Stability.STABLE) -> Stability:
        """Return the stability floor this constraint applies to candidates."""
        if self.stability is not None:
            return self.stability
        if self.implied_stability is not None:
            return min(self.implied_stability, minimum_stability)
        return minimum_stability

    def matches(
        self, version: Version, minimum_stability: Stability = Stability.STABLE
    ) -> bool:
        """Check whether *version* satisfies this constraint.

        Args:
            version: The candidate version.
            minimum_stability: The request's stability floor. Ignored when
                the constraint carries an explicit ``@flag``.

        Returns:
            True if the version lies in some alternative and its stability
            reaches the effective floor.
        """
        if version.stability < self.effective_stability(minimum_stability):
            return False
        return any(group.contains(version) for group in self.groups)

    def contains(self, version: Version) -> bool:
        """Range check only, ignoring stability."""
        return any(group.contains(version) for group in self.groups)

    def intersects(self, other: Constraint) -> bool:
        """True when some version could satisfy both constraints' ranges."""
        return any(
            not a.intersect(b).is_empty() for a in self.groups for b in other.groups
        )

    @property
    def is_any(self) -> bool:
        return any(
            g.lower is None and g.upper is None and not g.excluded for g in self.groups
        )

    def __str__(self) -> str:
        return self.raw

    def __repr__(self) -> str:
        return f"Constraint({self.raw!r})"


def parse_constraint(text: str) -> Constraint:
    """Parse a version constraint string. See ``Constraint.parse``."""
    return Constraint.parse(text)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

_OR_SPLIT_RE = re.compile(r"\s*\|\|?\s*")
_AND_SPLIT_RE = re.compile(r"\s*,\s*|\s+")
_HYPHEN_RE = re.compile(r"^(?P<low>\S+)\s+-\s+(?P<high>\S+)$")
_OP_SPACE_RE = re.compile(r"(>=|<=|!=|<>|==|[<>=^~])\s+")
_ATOM_RE = re.compile(r"^(?P<op>\^|~|>=|<=|<>|!=|==|=|>|<)?(?P<ver>.+)$")
_NUMERIC_PREFIX_RE = re.compile(r"^v?(\d+(?:\.\d+)*)")
_WILDCARD_RE = re.compile(r"^v?(?P<base>(?:\d+\.)*)[*xX](?:\.[*xX])*$")


class _Flags:
    """Stability flags collected while parsing one constraint."""

    def __init__(self) -> None:
        self.explicit: Stability | None = None
        self.implied: Stability | None = None

    def note_explicit(self, stability: Stability) -> None:
        if self.explicit is None or stability < self.explicit:
            self.explicit = stability

    def note_version(self, version: Version) -> None:
        if version.is_prerelease and (self.implied is None or version.stability < self.implied):
            self.implied = version.stability


def _parse(text: str) -> Constraint:
    if not isinstance(text, str) or not text.strip():
        raise InvalidConstraintFormat(text, "empty constraint")
    raw = text.strip()
    flags = _Flags()
    groups: list[Interval] = []
    for alternative in _OR_SPLIT_RE.split(raw):
        if not alternative:
            raise InvalidConstraintFormat(text, "empty alternative")
        groups.append(_parse_conjunction(alternative, flags, text))
    return Constraint(raw, tuple(groups), flags.explicit, flags.implied)


def _parse_conjunction(text: str, flags: _Flags, original: str) -> Interval:
    m = _HYPHEN_RE.match(text)
    if m:
        low = _version(_strip_flag(m.group("low"), flags, original), original)
        high = _version(_strip_flag(m.group("high"), flags, original), original)
        flags.note_version(low)
        flags.note_version(high)
        return Interval(low, True, high, True)

    interval = Interval()
    for atom in _AND_SPLIT_RE.split(_OP_SPACE_RE.sub(r"\1", text)):
        if not atom:
            raise InvalidConstraintFormat(original, "empty term")
        interval = interval.intersect(_parse_atom(atom, flags, original))
    return interval


def _strip_flag(atom: str, flags: _Flags, original: str) -> str:
    if "@" not in atom:
        return atom
    body, _, flag = atom.partition("@")
    try:
        flags.note_explicit(Stability.parse(flag))
    except ValueError:
        raise InvalidConstraintFormat(original, f"unknown stability flag {flag!r}") from None
    return body or "*"


def _version(text: str, original: str) -> Version:
    try:
        return Version.parse(text)
    except InvalidVersionFormat:
        raise InvalidConstraintFormat(original, f"bad version {text!r}") from None


def _precision(text: str) -> int:
    m = _NUMERIC_PREFIX_RE.match(text)
    return len(m.group(1).split(".")) if m else 0


def _parse_atom(atom: str, flags: _Flags, original: str) -> Interval:
    atom = _strip_flag(atom, flags, original)
    m = _ATOM_RE.match(atom)
    if not m:
        raise InvalidConstraintFormat(original)
    op, ver = m.group("op"), m.group("ver")

    wildcard = _WILDCARD_RE.match(ver)
    if wildcard:
        if op not in (None, "=", "=="):
            raise InvalidConstraintFormat(original, f"operator {op!r} cannot take a wildcard")
        base = [int(s) for s in wildcard.group("base").split(".") if s]
        if not base:
            return Interval()
        lower = Version(tuple(base))
        return Interval(lower, True, lower.bump(len(base) - 1).lowest(), False)

    version = _version(ver, original)
    flags.note_version(version)
    if version.is_branch and op in ("^", "~"):
        raise InvalidConstraintFormat(original, f"operator {op!r} cannot take a branch")

    if op == "^":
        precision = min(_precision(ver), len(version.segments))
        index = next(
            (i for i in range(precision) if version.segments[i] != 0),
            precision - 1,
        )
        return Interval(version, True, version.bump(index).lowest(), False)
    if op == "~":
        # ~1 and ~1.2 pin their last segment; longer forms pin the one before last
        precision = _precision(ver)
        index = max(precision - 1 if precision <= 2 else precision - 2, 0)
        return Interval(version, True, version.bump(index).lowest(), False)
    if op == ">=":
        return Interval(lower=version, lower_inclusive=True)
    if op == ">":
        return Interval(lower=version, lower_inclusive=False)
    if op == "<=":
        return Interval(upper=version, upper_inclusive=True)
    if op == "<":
        bound = version if version.label is not None else version.lowest()
        return Interval(upper=bound, upper_inclusive=False)
    if op in ("!=", "<>"):
        return Interval(excluded=frozenset({version}))
    return Interval(version, True, version, True)
