"""Version and constraint algebra.

Re-exports the public names of ``lockwright.semver.version`` and
``lockwright.semver.constraint`` so callers can write
``from lockwright.semver import Version, Constraint``.
"""

from lockwright.semver.constraint import (
    Constraint,
    Interval,
    parse_constraint,
)
from lockwright.semver.version import (
    Stability,
    Version,
    compare,
    parse_version,
)

__all__ = [
    "Constraint",
    "Interval",
    "Stability",
    "Version",
    "compare",
    "parse_constraint",
    "parse_version",
]
