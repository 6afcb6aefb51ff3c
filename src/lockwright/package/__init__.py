"""Package model: links, candidates, and composer-style (de)serialization."""

from lockwright.package.loader import dump_candidate, load_candidate
from lockwright.package.models import (
    Candidate,
    Link,
    LinkKind,
    is_platform_package,
)

__all__ = [
    "Candidate",
    "Link",
    "LinkKind",
    "dump_candidate",
    "is_platform_package",
    "load_candidate",
]
