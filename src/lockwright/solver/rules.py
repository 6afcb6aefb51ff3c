"""Rules: the clauses the solver reasons over.

Literals are candidate ids from the pool: ``+id`` means "install this
candidate", ``-id`` means "do not install it". A rule of any type except
``SAME_NAME`` is a disjunction of its literals. A ``SAME_NAME`` rule holds
the negated ids of every candidate answering to one name and means "at most
one of these is installed".
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Union

from lockwright.package import Candidate, Link

if TYPE_CHECKING:
    from lockwright.pool import Pool
    from lockwright.solver.request import RequiredLink


class RuleType(str, Enum):
    """Where a rule came from; decides how it is explained."""

    ROOT_REQUIRE = "root-require"
    ROOT_CONFLICT = "root-conflict"
    FIXED = "fixed"
    LOCKED = "locked"
    PACKAGE_REQUIRES = "package-requires"
    PACKAGE_CONFLICT = "package-conflict"
    SAME_NAME = "same-name"
    LEARNED = "learned"


@dataclass(eq=False)
class Rule:
    """One clause, or one at-most-one group for ``SAME_NAME``.

    Attributes:
        literals: Signed candidate ids.
        type: Origin of the rule.
        source: Candidate whose link produced the rule, if any.
        link: The package ``Link`` or root ``RequiredLink`` involved.
        derived_from: For learned rules, the rules resolved together to
            produce this one.
        id: Position in the rule set, assigned on insertion.
    """

    literals: tuple[int, ...]
    type: RuleType
    source: Candidate | None = None
    link: Union[Link, "RequiredLink", None] = None
    derived_from: tuple[Rule, ...] = ()
    id: int = -1

    @property
    def is_at_most_one(self) -> bool:
        return self.type is RuleType.SAME_NAME

    @property
    def is_assertion(self) -> bool:
        return len(self.literals) == 1 and not self.is_at_most_one

    def describe(self, pool: Pool) -> str:
        """Render this rule as one sentence of a problem explanation."""
        kind = self.type
        if kind is RuleType.ROOT_REQUIRE:
            return self._describe_requirement(pool, "Root composer.json", self.literals)
        if kind is RuleType.PACKAGE_REQUIRES:
            return self._describe_requirement(pool, str(self.source), self.literals[1:])
        if kind is RuleType.PACKAGE_CONFLICT:
            a, b = (pool.candidate(abs(lit)) for lit in self.literals)
            if self.source is b:
                a, b = b, a
            return f"{a} conflicts with {b}."
        if kind is RuleType.ROOT_CONFLICT:
            return f"Root composer.json conflicts with {pool.candidate(abs(self.literals[0]))}."
        if kind is RuleType.FIXED:
            candidate = pool.candidate(self.literals[0])
            if candidate.is_platform:
                return f"{candidate.name} {candidate.pretty_version} is the platform version and cannot be changed."
            return f"{candidate} is fixed and cannot be changed."
        if kind is RuleType.LOCKED:
            candidate = pool.candidate(self.literals[0])
            return (
                f"{candidate.name} is locked to version {candidate.pretty_version} "
                "and an update of this package was not requested."
            )
        if kind is RuleType.SAME_NAME:
            members = [pool.candidate(abs(lit)) for lit in self.literals]
            return f"Only one of these can be installed: {format_candidates(members)}."
        return f"Conclusion: {self._literal_text(pool)}."

    def _describe_requirement(self, pool: Pool, who: str, positives: tuple[int, ...]) -> str:
        link = self.link
        if link is None:
            return f"{who} has an unresolvable requirement."
        target = getattr(link, "target", None) or link.name
        constraint = getattr(link, "pretty_constraint", None) or link.constraint.raw
        if positives:
            candidates = [pool.candidate(lit) for lit in positives]
            return f"{who} requires {target} {constraint} -> satisfiable by {format_candidates(candidates)}."
        known = list(pool.lookup(target)) + list(pool.providers(target))
        if not known:
            if self.type is RuleType.ROOT_REQUIRE:
                return f"No package found for {target}."
            return f"{who} requires {target} {constraint} -> no matching package found."
        return (
            f"{who} requires {target} {constraint} -> found {format_candidates(known)} "
            "but it does not match the constraint."
        )

    def _literal_text(self, pool: Pool) -> str:
        parts = []
        for lit in self.literals:
            verb = "install" if lit > 0 else "don't install"
            parts.append(f"{verb} {pool.candidate(abs(lit))}")
        return " | ".join(parts)

    def __repr__(self) -> str:
        return f"Rule(#{self.id} {self.type.value} {list(self.literals)})"


def format_candidates(candidates: list[Candidate]) -> str:
    """Format candidates as ``a/b[1.0.0, 1.5.0], c/d[2.0.0]``.

    Names keep first-appearance order; versions are listed ascending.
    """
    groups: OrderedDict[str, list[Candidate]] = OrderedDict()
    for candidate in candidates:
        group = groups.setdefault(candidate.name, [])
        if candidate not in group:
            group.append(candidate)
    parts = []
    for name, group in groups.items():
        versions = ", ".join(c.pretty_version for c in sorted(group, key=lambda c: c.version))
        parts.append(f"{name}[{versions}]")
    return ", ".join(parts)


class RuleSet:
    """Ordered, de-duplicated collection of rules."""

    def __init__(self) -> None:
        self._rules: list[Rule] = []
        self._seen: set[tuple] = set()

    def add(self, rule: Rule) -> Rule | None:
        """Append *rule* unless an equivalent one exists.

        Returns:
            The stored rule, or None if it was a duplicate.
        """
        if rule.type is not RuleType.LEARNED:
            kind = "amo" if rule.is_at_most_one else "clause"
            signature = (kind, tuple(sorted(set(rule.literals))))
            if signature in self._seen:
                return None
            self._seen.add(signature)
        rule.id = len(self._rules)
        self._rules.append(rule)
        return rule

    def of_type(self, *types: RuleType) -> list[Rule]:
        return [r for r in self._rules if r.type in types]

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __getitem__(self, index: int) -> Rule:
        return self._rules[index]
