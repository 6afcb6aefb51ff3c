"""Human-readable explanations of unsatisfiable requests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from lockwright.solver.rules import Rule, RuleType

if TYPE_CHECKING:
    from lockwright.pool import Pool


class Problem:
    """The set of original rules that together rule out every solution.

    Learned rules never appear here; they are expanded back into the rules
    they were derived from before a ``Problem`` is built.
    """

    def __init__(self, rules: Iterable[Rule], pool: Pool) -> None:
        unique: dict[int, Rule] = {}
        for rule in rules:
            if rule.type is RuleType.LEARNED:
                raise ValueError("learned rules must be expanded before reporting")
            unique.setdefault(rule.id, rule)
        self.rules: tuple[Rule, ...] = tuple(unique[i] for i in sorted(unique))
        self._pool = pool

    def lines(self) -> list[str]:
        """One sentence per rule, in rule order, without repeats."""
        out: list[str] = []
        for rule in self.rules:
            text = rule.describe(self._pool)
            if text not in out:
                out.append(text)
        return out

    def mentions(self, name: str) -> bool:
        """True if any rule of this problem involves package *name*."""
        key = name.lower()
        for rule in self.rules:
            if rule.link is not None and getattr(rule.link, "key", None) == key:
                return True
            if any(self._pool.candidate(abs(lit)).key == key for lit in rule.literals):
                return True
        return False

    def __str__(self) -> str:
        return "\n".join(f"- {line}" for line in self.lines())

    def __repr__(self) -> str:
        return f"Problem({len(self.rules)} rules)"
