"""Conflict-driven dependency solver.

Resolution is encoded as satisfiability over candidate ids and searched with
a CDCL loop specialised for "at most one version per name":

- unit propagation with two watched literals per clause, and direct
  propagation for at-most-one (same name) rules;
- decisions driven by rules: the first requirement rule that is triggered
  but not yet satisfied picks its most preferred undecided candidate;
- first-UIP conflict analysis producing a learned rule, followed by a
  non-chronological backjump;
- unsatisfiability when a conflict occurs at level 0, explained by expanding
  learned rules back into the original rules that derived them.

The solver owns all of its search state for the duration of one call. The
pool and the request are only read, so one pool can serve many solves.

References:
    Marques-Silva & Sakallah, "GRASP: A Search Algorithm for Propositional
    Satisfiability", IEEE Trans. Computers 48(5), 1999.
    Moskewicz et al., "Chaff: Engineering an Efficient SAT Solver", DAC 2001.
"""

from __future__ import annotations

import logging
import time
from typing import Mapping

from lockwright.pool import Pool
from lockwright.semver import Version
from lockwright.solver.decisions import Decisions, Reason
from lockwright.solver.generator import RuleGenerator
from lockwright.solver.policy import Policy
from lockwright.solver.problems import Problem
from lockwright.solver.request import Request
from lockwright.solver.resolution import (
    DecisionSet,
    Deadline,
    Resolution,
    ResolutionStatus,
    SolverStats,
)
from lockwright.solver.rules import Rule, RuleSet, RuleType

logger = logging.getLogger(__name__)

Conflict = tuple[Rule, tuple[int, ...]]


class Solver:
    """Reusable solver bound to one pool.

    Args:
        pool: The candidate pool.
        policy: Candidate preference. Derived from each request when None.
    """

    def __init__(self, pool: Pool, policy: Policy | None = None) -> None:
        self.pool = pool
        self.policy = policy

    def solve(
        self,
        request: Request,
        prior_decisions: DecisionSet | None = None,
        deadline: Deadline | None = None,
    ) -> Resolution:
        """Compute a decision set for *request*.

        Args:
            request: What to install.
            prior_decisions: A previous result; its versions become the
                first preference (update mode).
            deadline: Optional cancellation budget, checked before every
                new decision level.

        Returns:
            A ``Resolution``. Unsatisfiable requests and expired deadlines
            are reported through ``Resolution.status``, not raised.
        """
        policy = self.policy or Policy.from_request(request)
        # packages a partial update may move get no locked preference
        preferred: dict[str, Version] = {
            c.key: c.version
            for c in request.locked
            if request.update_allowlist is None or not request.may_update(c.name)
        }
        if prior_decisions is not None:
            preferred.update(prior_decisions.versions())
        search = _Search(self.pool, request, policy, preferred, deadline)
        return search.run()


def solve(
    pool: Pool,
    request: Request,
    prior_decisions: DecisionSet | None = None,
    deadline: Deadline | None = None,
    policy: Policy | None = None,
) -> Resolution:
    """Solve *request* against *pool*. See ``Solver.solve``."""
    return Solver(pool, policy).solve(request, prior_decisions, deadline)


# ---------------------------------------------------------------------------
# Search state (one per solve)
# ---------------------------------------------------------------------------


class _Search:
    def __init__(
        self,
        pool: Pool,
        request: Request,
        policy: Policy,
        preferred: Mapping[str, Version],
        deadline: Deadline | None,
    ) -> None:
        self.pool = pool
        self.request = request
        self.policy = policy
        self.preferred = preferred
        self.deadline = deadline
        self.decisions = Decisions(len(pool))
        self.watches: dict[int, list[Rule]] = {}
        self.watched: dict[Rule, list[int]] = {}
        self.at_most_one: dict[int, list[Rule]] = {}
        self.decision_rules: list[Rule] = []
        self.learned: list[Rule] = []
        self.propagate_index = 0
        self.decision_count = 0
        self.conflict_count = 0
        self.rules = RuleSet()
        self.fixed_ids: set[int] = set()
        self.reachable: list = []
        self._started = time.monotonic()

    # -- Driver -------------------------------------------------------------

    def run(self) -> Resolution:
        generator = RuleGenerator(self.pool, self.request)
        self.rules = generator.generate()
        self.fixed_ids = generator.fixed_ids
        self.reachable = generator.reachable

        conflict = self._install_rules()
        if conflict is not None:
            return self._unsatisfiable(conflict)

        while True:
            conflict = self._propagate()
            if conflict is not None:
                if self.decisions.level == 0:
                    return self._unsatisfiable(conflict)
                self._learn(conflict)
                continue

            choice = self._select_next()
            if choice is None:
                break
            if self.deadline is not None and self.deadline.expired(self.decision_count):
                logger.info("Deadline expired after %d decision(s)", self.decision_count)
                return Resolution(ResolutionStatus.TIMEOUT, stats=self._stats())
            self.decisions.new_level()
            self.decisions.assign(choice)
            self.decision_count += 1

        # Every rule is satisfied or has an undecided negative literal, so
        # leaving the rest uninstalled cannot violate anything.
        for var in list(self.decisions.undecided_ids()):
            self.decisions.assign(-var)
        return self._solved()

    def _install_rules(self) -> Conflict | None:
        """Index rules for propagation and apply the unit ones at level 0."""
        for rule in self.rules:
            conflict = self._index(rule)
            if conflict is not None:
                return conflict
        return None

    def _index(self, rule: Rule) -> Conflict | None:
        literals = rule.literals
        if rule.is_at_most_one:
            for lit in literals:
                self.at_most_one.setdefault(-lit, []).append(rule)
            return None
        if rule.type in (RuleType.ROOT_REQUIRE, RuleType.PACKAGE_REQUIRES, RuleType.LEARNED):
            self.decision_rules.append(rule)
        if not literals:
            return rule, ()
        if len(literals) == 1:
            lit = literals[0]
            if self.decisions.falsified(lit):
                return rule, literals
            if self.decisions.undecided(lit):
                self.decisions.assign(lit, (rule, literals))
            return None
        watched = list(literals)
        self.watched[rule] = watched
        self.watches.setdefault(watched[0], []).append(rule)
        self.watches.setdefault(watched[1], []).append(rule)
        return None

    # -- Propagation --------------------------------------------------------

    def _propagate(self) -> Conflict | None:
        decisions = self.decisions
        while self.propagate_index < len(decisions.trail):
            lit = decisions.trail[self.propagate_index]
            self.propagate_index += 1

            if lit > 0:
                for rule in self.at_most_one.get(lit, ()):
                    for member in rule.literals:
                        other = -member
                        if other == lit:
                            continue
                        value = decisions.value(other)
                        if value > 0:
                            return rule, (-lit, -other)
                        if value == 0:
                            decisions.assign(-other, (rule, (-other, -lit)))

            false_lit = -lit
            watchers = self.watches.get(false_lit)
            if not watchers:
                continue
            kept: list[Rule] = []
            for index, rule in enumerate(watchers):
                watched = self.watched[rule]
                if watched[0] == false_lit:
                    watched[0], watched[1] = watched[1], watched[0]
                if decisions.satisfied(watched[0]):
                    kept.append(rule)
                    continue
                for k in range(2, len(watched)):
                    if not decisions.falsified(watched[k]):
                        watched[1], watched[k] = watched[k], watched[1]
                        self.watches.setdefault(watched[1], []).append(rule)
                        break
                else:
                    kept.append(rule)
                    if decisions.falsified(watched[0]):
                        kept.extend(watchers[index + 1:])
                        self.watches[false_lit] = kept
                        return rule, tuple(watched)
                    decisions.assign(watched[0], (rule, tuple(watched)))
            self.watches[false_lit] = kept
        return None

    # -- Conflict analysis --------------------------------------------------

    def _learn(self, conflict: Conflict) -> None:
        rule, clause = conflict
        decisions = self.decisions
        current = decisions.level
        seen: set[int] = set()
        learned: list[int] = []
        derived: list[Rule] = [rule]
        pending = 0
        uip = 0
        index = len(decisions.trail) - 1

        while True:
            for q in clause:
                if q == uip:
                    continue
                var = abs(q)
                if var in seen or decisions.level_of(var) == 0:
                    continue
                seen.add(var)
                if decisions.level_of(var) == current:
                    pending += 1
                else:
                    learned.append(q)
            while abs(decisions.trail[index]) not in seen:
                index -= 1
            uip = decisions.trail[index]
            index -= 1
            pending -= 1
            if pending <= 0:
                break
            reason = decisions.reason_of(abs(uip))
            assert reason is not None
            rule, clause = reason
            derived.append(rule)

        literals = [-uip] + learned
        backjump = 0
        if learned:
            # the literal with the highest level is watched second
            best = max(range(1, len(literals)), key=lambda i: decisions.level_of(abs(literals[i])))
            literals[1], literals[best] = literals[best], literals[1]
            backjump = decisions.level_of(abs(literals[1]))

        learned_rule = self.rules.add(Rule(tuple(literals), RuleType.LEARNED, derived_from=tuple(derived)))
        assert learned_rule is not None
        self.learned.append(learned_rule)
        self.conflict_count += 1
        logger.debug(
            "Conflict %d at level %d: learned %r, backjump to %d",
            self.conflict_count, current, learned_rule, backjump,
        )

        decisions.revert_to(backjump)
        self.propagate_index = len(decisions.trail)
        self.decision_rules.append(learned_rule)
        if len(literals) > 1:
            watched = list(literals)
            self.watched[learned_rule] = watched
            self.watches.setdefault(watched[0], []).append(learned_rule)
            self.watches.setdefault(watched[1], []).append(learned_rule)
        reason: Reason = (learned_rule, tuple(literals))
        decisions.assign(literals[0], reason)

    # -- Decisions ----------------------------------------------------------

    def _select_next(self) -> int | None:
        decisions = self.decisions
        for rule in self.decision_rules:
            candidates: list[int] = []
            blocked = False
            for lit in rule.literals:
                value = decisions.value(lit)
                if value > 0 or (lit < 0 and value == 0):
                    blocked = True
                    break
                if lit > 0 and value == 0:
                    candidates.append(lit)
            if blocked or not candidates:
                continue
            required = getattr(rule.link, "key", None)
            return self.policy.select(self.pool, candidates, required, self.preferred, self.fixed_ids)
        return None

    # -- Results ------------------------------------------------------------

    def _stats(self) -> SolverStats:
        return SolverStats(
            rules=len(self.rules),
            learned=len(self.learned),
            decisions=self.decision_count,
            conflicts=self.conflict_count,
            elapsed=time.monotonic() - self._started,
        )

    def _solved(self) -> Resolution:
        installed = [self.pool.candidate(var) for var in self.decisions.installed()]
        installed_names = {c.key for c in installed}
        absent = {c.key for c in self.reachable if c.key not in installed_names}
        stats = self._stats()
        logger.info(
            "Solved: %d package(s), %d decision(s), %d conflict(s) in %.3fs",
            len(installed), stats.decisions, stats.conflicts, stats.elapsed,
        )
        return Resolution(
            ResolutionStatus.SOLVED,
            decisions=DecisionSet(installed, absent=absent),
            stats=stats,
        )

    def _unsatisfiable(self, conflict: Conflict) -> Resolution:
        problem = Problem(self._explain(*conflict), self.pool)
        stats = self._stats()
        logger.info("Unsatisfiable after %d decision(s), %d conflict(s)", stats.decisions, stats.conflicts)
        return Resolution(ResolutionStatus.UNSATISFIABLE, problems=[problem], stats=stats)

    def _explain(self, rule: Rule, clause: tuple[int, ...]) -> list[Rule]:
        """Original rules behind a level-0 conflict.

        Walks the implication graph backwards from the conflicting clause
        through the reasons of level-0 assignments, replacing learned rules
        by the rules they were derived from.
        """
        decisions = self.decisions
        found: list[Rule] = []
        visited_rules: set[int] = set()
        visited_vars: set[int] = set()
        stack: list[tuple[Rule, tuple[int, ...]]] = [(rule, clause)]
        while stack:
            current, literals = stack.pop()
            if current.id not in visited_rules:
                visited_rules.add(current.id)
                if current.type is RuleType.LEARNED:
                    stack.extend((sub, sub.literals) for sub in current.derived_from)
                else:
                    found.append(current)
            for lit in literals:
                var = abs(lit)
                if var in visited_vars or not decisions.falsified(lit):
                    continue
                visited_vars.add(var)
                if decisions.level_of(var) != 0:
                    continue
                reason = decisions.reason_of(var)
                if reason is not None:
                    stack.append(reason)
        return found
