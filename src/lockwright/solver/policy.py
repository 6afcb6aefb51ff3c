"""Preference among candidates that could satisfy the same rule.

Order of precedence, highest first:

1. fixed (pinned) candidates;
2. the previously locked version of the name (update mode);
3. candidates carrying the required name over providers and replacers;
4. higher stability tier, when ``prefer_stable`` is set;
5. higher version (lower with ``prefer_lowest``);
6. lower pool id (insertion order).

``locked_before_stability=False`` swaps 2 and 4.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import TYPE_CHECKING, Collection, Mapping, Sequence

from lockwright.semver import Version

if TYPE_CHECKING:
    from lockwright.pool import Pool
    from lockwright.solver.request import Request


@dataclass(frozen=True)
class Policy:
    """Candidate preference settings for one solve.

    Attributes:
        prefer_stable: Rank more stable candidates above newer ones.
        prefer_lowest: Rank lower versions first.
        locked_before_stability: Rank the locked version above the
            stability tier (the default) or below it.
    """

    prefer_stable: bool = True
    prefer_lowest: bool = False
    locked_before_stability: bool = True

    @classmethod
    def from_request(cls, request: Request, **overrides: bool) -> Policy:
        settings = {
            "prefer_stable": request.prefer_stable,
            "prefer_lowest": request.prefer_lowest,
        }
        settings.update(overrides)
        return cls(**settings)

    def sort(
        self,
        pool: Pool,
        candidate_ids: Sequence[int],
        required: str | None = None,
        preferred: Mapping[str, Version] | None = None,
        fixed: Collection[int] = (),
    ) -> list[int]:
        """Return *candidate_ids* best first.

        Args:
            pool: The pool the ids belong to.
            candidate_ids: Ids to rank.
            required: Name the rule asks for, if known.
            preferred: Locked versions by name (update mode).
            fixed: Ids of pinned candidates.
        """
        preferred = preferred or {}

        def key(candidate_id: int) -> tuple:
            candidate = pool.candidate(candidate_id)
            locked = preferred.get(candidate.key)
            is_locked = locked is not None and locked == candidate.version
            stability = -int(candidate.stability) if self.prefer_stable else 0
            original = required is None or candidate.key == required.lower()
            if self.locked_before_stability:
                head = (not is_locked, not original, stability)
            else:
                head = (stability, not is_locked, not original)
            return (candidate_id not in fixed,) + head

        def compare(a: int, b: int) -> int:
            ka, kb = key(a), key(b)
            if ka != kb:
                return -1 if ka < kb else 1
            va, vb = pool.candidate(a).version, pool.candidate(b).version
            if va != vb:
                higher_first = -1 if va > vb else 1
                return -higher_first if self.prefer_lowest else higher_first
            return -1 if a < b else (1 if a > b else 0)

        return sorted(candidate_ids, key=functools.cmp_to_key(compare))

    def select(
        self,
        pool: Pool,
        candidate_ids: Sequence[int],
        required: str | None = None,
        preferred: Mapping[str, Version] | None = None,
        fixed: Collection[int] = (),
    ) -> int:
        """Return the single most preferred id."""
        return self.sort(pool, candidate_ids, required, preferred, fixed)[0]
