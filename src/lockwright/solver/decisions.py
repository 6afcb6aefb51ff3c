"""The decision trail: which candidates are installed, at what level, and why.

Every assignment records its decision level and its reason. A reason is the
rule that forced the assignment together with the concrete clause it acted
as (for at-most-one rules this is the binary clause between the two members
involved). Decisions made by choice have no reason.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, Optional, Tuple

if TYPE_CHECKING:
    from lockwright.solver.rules import Rule

Reason = Optional[Tuple["Rule", Tuple[int, ...]]]

UNDECIDED, TRUE, FALSE = 0, 1, -1


class Decisions:
    """Assignment of every candidate id plus the trail that produced it.

    Args:
        size: Number of candidate ids (ids run from 1 to *size*).
    """

    def __init__(self, size: int) -> None:
        self._value = [UNDECIDED] * (size + 1)
        self._level = [-1] * (size + 1)
        self._reason: list[Reason] = [None] * (size + 1)
        self.trail: list[int] = []
        self._level_starts: list[int] = []

    @property
    def level(self) -> int:
        """Current decision level (0 before any choice was made)."""
        return len(self._level_starts)

    def new_level(self) -> None:
        self._level_starts.append(len(self.trail))

    def assign(self, literal: int, reason: Reason = None) -> None:
        var = abs(literal)
        if self._value[var] != UNDECIDED:
            raise ValueError(f"candidate {var} is already decided")
        self._value[var] = TRUE if literal > 0 else FALSE
        self._level[var] = self.level
        self._reason[var] = reason
        self.trail.append(literal)

    def value(self, literal: int) -> int:
        """TRUE, FALSE or UNDECIDED for *literal* (sign-aware)."""
        value = self._value[abs(literal)]
        return value if literal > 0 else -value

    def satisfied(self, literal: int) -> bool:
        return self.value(literal) == TRUE

    def falsified(self, literal: int) -> bool:
        return self.value(literal) == FALSE

    def undecided(self, literal: int) -> bool:
        return self._value[abs(literal)] == UNDECIDED

    def level_of(self, var: int) -> int:
        return self._level[var]

    def reason_of(self, var: int) -> Reason:
        return self._reason[var]

    def revert_to(self, level: int) -> None:
        """Undo every assignment made above *level*."""
        while len(self._level_starts) > level:
            start = self._level_starts.pop()
            for literal in self.trail[start:]:
                var = abs(literal)
                self._value[var] = UNDECIDED
                self._level[var] = -1
                self._reason[var] = None
            del self.trail[start:]

    def installed(self) -> Iterator[int]:
        """Ids of installed candidates, in id order."""
        return (var for var in range(1, len(self._value)) if self._value[var] == TRUE)

    def undecided_ids(self) -> Iterator[int]:
        return (var for var in range(1, len(self._value)) if self._value[var] == UNDECIDED)

    def __len__(self) -> int:
        return len(self.trail)
