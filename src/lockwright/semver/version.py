"""Version values: parsing, total ordering, and stability classification.

A ``Version`` is an immutable value made of dotted numeric segments, an
optional pre-release label with its own identifiers, and optional build
metadata. Ordering follows the PHP ecosystem's conventions:

- numeric segments compare left to right, missing segments count as zero
  (``1.2 == 1.2.0 == 1.2.0.0``);
- within one release, ``dev < alpha < beta < RC < (release) < patch``;
- pre-release identifiers compare numerically when numeric, lexically
  otherwise, numeric identifiers sorting below alphanumeric ones;
- build metadata (``+build.5``) never affects ordering or equality;
- branch versions (``dev-main``) are dev-stability versions that sort below
  every numeric version, ordered by branch name among themselves.

Stability labels are normalized: ``a`` -> ``alpha``, ``b`` -> ``beta``,
``rc`` -> ``RC``, ``pl``/``p`` -> ``patch``. Numbered branches are
normalized the way Composer does it: ``2.x-dev`` is
``2.9999999.9999999.9999999-dev`` and ``2.1.x-dev`` is
``2.1.9999999.9999999-dev``. ``str(version)`` always re-parses to an equal
version.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import IntEnum
from functools import total_ordering

from lockwright.exceptions import InvalidVersionFormat


# ---------------------------------------------------------------------------
# Stability tiers
# ---------------------------------------------------------------------------


class Stability(IntEnum):
    """Ordered stability tiers; a higher value is more stable."""

    DEV = 0
    ALPHA = 1
    BETA = 2
    RC = 3
    STABLE = 4

    @classmethod
    def parse(cls, text: str) -> Stability:
        """Parse a stability name (``dev``, ``alpha``, ``beta``, ``RC``, ``stable``).

        Raises:
            ValueError: If *text* names no known stability.
        """
        try:
            return _STABILITY_BY_NAME[text.strip().lower()]
        except KeyError:
            raise ValueError(f"Unknown stability: {text!r}") from None

    @property
    def label(self) -> str:
        """Canonical label as written in manifests and lock files."""
        return _STABILITY_LABELS[self]

    @property
    def lock_flag(self) -> int:
        """Integer code used by the lock file's ``stability-flags`` map."""
        return _LOCK_FLAGS[self]

    @classmethod
    def from_lock_flag(cls, flag: int) -> Stability:
        for stability, code in _LOCK_FLAGS.items():
            if code == flag:
                return stability
        raise ValueError(f"Unknown stability flag: {flag!r}")


_STABILITY_BY_NAME: dict[str, Stability] = {
    "dev": Stability.DEV,
    "alpha": Stability.ALPHA,
    "a": Stability.ALPHA,
    "beta": Stability.BETA,
    "b": Stability.BETA,
    "rc": Stability.RC,
    "stable": Stability.STABLE,
}

_STABILITY_LABELS: dict[Stability, str] = {
    Stability.DEV: "dev",
    Stability.ALPHA: "alpha",
    Stability.BETA: "beta",
    Stability.RC: "RC",
    Stability.STABLE: "stable",
}

_LOCK_FLAGS: dict[Stability, int] = {
    Stability.STABLE: 0,
    Stability.RC: 5,
    Stability.BETA: 10,
    Stability.ALPHA: 15,
    Stability.DEV: 20,
}


# ---------------------------------------------------------------------------
# Pre-release labels
# ---------------------------------------------------------------------------

# Rank of each normalized label within one release; None is the release itself.
_LABEL_RANK: dict[str | None, int] = {
    "dev": 0,
    "alpha": 1,
    "beta": 2,
    "RC": 3,
    None: 4,
    "patch": 5,
}

_LABEL_ALIASES: dict[str, str] = {
    "dev": "dev",
    "alpha": "alpha",
    "a": "alpha",
    "beta": "beta",
    "b": "beta",
    "rc": "RC",
    "patch": "patch",
    "pl": "patch",
    "p": "patch",
}

_LABEL_STABILITY: dict[str | None, Stability] = {
    "dev": Stability.DEV,
    "alpha": Stability.ALPHA,
    "beta": Stability.BETA,
    "RC": Stability.RC,
    None: Stability.STABLE,
    "patch": Stability.STABLE,
}

_VERSION_RE = re.compile(
    r"^v?(?P<segments>\d+(?:\.\d+)*)"
    r"(?:[.-]?(?P<label>dev|alpha|beta|rc|patch|pl|a|b|p)"
    r"(?P<parts>\d*(?:[.-][0-9a-z]+)*))?"
    r"(?:\+(?P<build>[0-9a-z]+(?:[.-][0-9a-z]+)*))?$",
    re.IGNORECASE,
)

_PART_SPLIT_RE = re.compile(r"[.-]")

_BRANCH_RE = re.compile(r"^dev-(?P<branch>\S+)$", re.IGNORECASE)
_NUMBERED_BRANCH_RE = re.compile(
    r"^v?(?P<segments>\d+(?:\.\d+){0,2})(?:\.[xX*])+-dev$", re.IGNORECASE
)

# Segment value Composer substitutes for ``x`` in numbered branches.
BRANCH_SEGMENT = 9999999


def _part_key(part: int | str) -> tuple[int, int | str]:
    if isinstance(part, int):
        return (0, part)
    return (1, part)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------


@total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """An immutable, totally ordered package version.

    Attributes:
        segments: Numeric release segments, at least three
            (major, minor, patch, then any extra segments).
        label: Normalized pre-release label (``dev``, ``alpha``, ``beta``,
            ``RC``, ``patch``) or None for a plain release.
        parts: Identifiers following the label, e.g. ``(2,)`` for ``beta2``.
        build: Build metadata, kept for display only.
        branch: Branch name for ``dev-<branch>`` versions, else None.
    """

    segments: tuple[int, ...]
    label: str | None = None
    parts: tuple[int | str, ...] = ()
    build: str | None = field(default=None, compare=False)
    branch: str | None = None

    def __post_init__(self) -> None:
        if len(self.segments) < 3:
            padded = tuple(self.segments) + (0,) * (3 - len(self.segments))
            object.__setattr__(self, "segments", padded)

    # -- Construction -------------------------------------------------------

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse *text* into a ``Version``.

        Raises:
            InvalidVersionFormat: If *text* is not a version string.
        """
        if not isinstance(text, str):
            raise InvalidVersionFormat(text, "expected a string")
        stripped = text.strip()
        m = _BRANCH_RE.match(stripped)
        if m:
            return cls((), "dev", branch=m.group("branch"))
        m = _NUMBERED_BRANCH_RE.match(stripped)
        if m:
            segments = tuple(int(s) for s in m.group("segments").split("."))
            return cls(segments + (BRANCH_SEGMENT,) * (4 - len(segments)), "dev")

        m = _VERSION_RE.match(stripped)
        if not m:
            raise InvalidVersionFormat(text)

        segments = tuple(int(s) for s in m.group("segments").split("."))
        label = None
        parts: tuple[int | str, ...] = ()
        if m.group("label") is not None:
            label = _LABEL_ALIASES[m.group("label").lower()]
            raw_parts = m.group("parts")
            parts = tuple(
                int(p) if p.isdigit() else p.lower()
                for p in _PART_SPLIT_RE.split(raw_parts)
                if p
            )
        return cls(segments, label, parts, m.group("build"))

    def lowest(self) -> Version:
        """Return the lowest possible version of this release (``X.Y.Z-dev``)."""
        return Version(self.segments, "dev")

    def release(self) -> Version:
        """Return this version stripped of pre-release label and build."""
        return Version(self.segments)

    def bump(self, index: int) -> Version:
        """Increment segment *index* and zero every segment after it."""
        segs = list(self.segments)
        segs[index] += 1
        for i in range(index + 1, len(segs)):
            segs[i] = 0
        return Version(tuple(segs))

    # -- Classification -----------------------------------------------------

    @property
    def major(self) -> int:
        return self.segments[0]

    @property
    def minor(self) -> int:
        return self.segments[1]

    @property
    def patch(self) -> int:
        return self.segments[2]

    @property
    def stability(self) -> Stability:
        """Stability tier implied by the pre-release label."""
        return _LABEL_STABILITY[self.label]

    @property
    def is_prerelease(self) -> bool:
        return self.stability is not Stability.STABLE

    @property
    def is_branch(self) -> bool:
        return self.branch is not None

    # -- Ordering -----------------------------------------------------------

    def _key(self) -> tuple:
        if self.branch is not None:
            return (0, self.branch)
        segs = list(self.segments)
        while segs and segs[-1] == 0:
            segs.pop()
        return (
            1,
            tuple(segs),
            _LABEL_RANK[self.label],
            tuple(_part_key(p) for p in self.parts),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    # -- Rendering ----------------------------------------------------------

    def __str__(self) -> str:
        if self.branch is not None:
            return f"dev-{self.branch}"
        text = ".".join(str(s) for s in self.segments)
        if self.label is not None:
            text += f"-{self.label}"
            if self.parts:
                text += "." + ".".join(str(p) for p in self.parts)
        if self.build:
            text += f"+{self.build}"
        return text

    def __repr__(self) -> str:
        return f"Version({str(self)!r})"


def parse_version(text: str) -> Version:
    """Parse a version string. See ``Version.parse``."""
    return Version.parse(text)


def compare(a: Version, b: Version) -> int:
    """Three-way comparison: -1 if a < b, 0 if equal, 1 if a > b."""
    if a < b:
        return -1
    if a == b:
        return 0
    return 1
