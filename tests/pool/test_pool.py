"""Tests for the immutable candidate pool and its builder.

Verifies:
    - Ids follow input order; lookups are highest-first and stable on ties.
    - satisfiers() yields direct matches, then providers and replacers.
    - Provide/replace cycles fail pool construction with ProvideCycle.
    - PoolBuilder follows requirements transitively, honouring repository
      priority, and surfaces RepositoryUnavailable.
"""

from __future__ import annotations

import pytest

from lockwright.exceptions import ProvideCycle, RepositoryUnavailable
from lockwright.package import Candidate, load_candidate
from lockwright.pool import Pool, PoolBuilder, find_provide_cycle
from lockwright.repository import ArrayRepository
from lockwright.semver import Constraint, Stability
from tests.solver.helpers import make_candidate, make_pool


# ---------------------------------------------------------------------------
# Pool
# ---------------------------------------------------------------------------


class TestPoolIndex:
    """Tests for ids and lookups."""

    def test_ids_follow_input_order(self) -> None:
        a = make_candidate("a/a", "1.0.0")
        b = make_candidate("b/b", "1.0.0")
        pool = make_pool(a, b)
        assert pool.id_of(a) == 1
        assert pool.id_of(b) == 2
        assert pool.candidate(2) is b
        assert len(pool) == 2
        assert list(pool) == [a, b]

    def test_candidate_id_zero_rejected(self) -> None:
        pool = make_pool(make_candidate("a/a", "1.0.0"))
        with pytest.raises(KeyError):
            pool.candidate(0)

    def test_lookup_highest_first(self) -> None:
        low = make_candidate("a/a", "1.0.0")
        high = make_candidate("a/a", "2.0.0")
        mid = make_candidate("a/a", "1.5.0")
        pool = make_pool(low, high, mid)
        assert pool.lookup("a/a") == (high, mid, low)

    def test_lookup_stable_on_ties(self) -> None:
        first = make_candidate("a/a", "1.0")
        second = make_candidate("a/a", "1.0.0")
        pool = make_pool(first, second)
        assert pool.lookup("A/A") == (first, second)

    def test_lookup_unknown(self) -> None:
        assert make_pool().lookup("nobody/knows") == ()

    def test_duplicate_candidate_rejected(self) -> None:
        a = make_candidate("a/a", "1.0.0")
        with pytest.raises(ValueError):
            Pool([a, a])

    def test_membership_and_names(self) -> None:
        a = make_candidate("a/a", "1.0.0")
        pool = make_pool(a, make_candidate("b/b", "1.0.0"))
        assert a in pool
        assert make_candidate("a/a", "1.0.0") not in pool
        assert pool.names == ("a/a", "b/b")


class TestSatisfiers:
    """Tests for requirement matching against the pool."""

    def test_direct_matches_highest_first(self) -> None:
        pool = make_pool(
            make_candidate("a/a", "1.0.0"),
            make_candidate("a/a", "1.5.0"),
            make_candidate("a/a", "2.0.0"),
        )
        found = list(pool.satisfiers("a/a", Constraint.parse("^1.0")))
        assert [c.pretty_version for c in found] == ["1.5.0", "1.0.0"]

    def test_stability_floor(self) -> None:
        pool = make_pool(make_candidate("a/a", "1.0.0"), make_candidate("a/a", "1.1.0-beta1"))
        stable = list(pool.satisfiers("a/a", Constraint.parse("^1.0")))
        beta = list(pool.satisfiers("a/a", Constraint.parse("^1.0"), Stability.BETA))
        assert [c.pretty_version for c in stable] == ["1.0.0"]
        assert [c.pretty_version for c in beta] == ["1.1.0-beta1", "1.0.0"]

    def test_per_package_flags(self) -> None:
        pool = make_pool(make_candidate("a/a", "1.1.0-alpha1"))
        flags = {"a/a": Stability.ALPHA}
        assert list(pool.satisfiers("a/a", Constraint.parse("^1.0"), stability_flags=flags))
        assert not list(pool.satisfiers("a/a", Constraint.parse("^1.0")))

    def test_providers_follow_direct_matches(self) -> None:
        direct = make_candidate("psr/log-implementation", "1.0.0")
        impl = make_candidate("acme/logger", "2.0.0", provide={"psr/log-implementation": "1.0.0"})
        pool = make_pool(impl, direct)
        found = list(pool.satisfiers("psr/log-implementation", Constraint.parse("^1.0")))
        assert found == [direct, impl]

    def test_provider_constraint_must_overlap(self) -> None:
        impl = make_candidate("acme/logger", "2.0.0", provide={"psr/log-implementation": "1.0.0"})
        pool = make_pool(impl)
        assert not list(pool.satisfiers("psr/log-implementation", Constraint.parse("^2.0")))

    def test_replacer_satisfies(self) -> None:
        fork = make_candidate("acme/fork", "3.0.0", replace={"acme/orig": "self.version"})
        pool = make_pool(fork)
        assert list(pool.satisfiers("acme/orig", Constraint.parse("^3.0"))) == [fork]
        assert pool.replacers("acme/orig") == (fork,)
        assert pool.providers("acme/orig") == (fork,)

    def test_lazy(self) -> None:
        pool = make_pool(make_candidate("a/a", "1.0.0"))
        gen = pool.satisfiers("a/a", Constraint.any())
        assert next(gen).pretty_version == "1.0.0"

    def test_branch_alias_satisfies_numeric_range(self) -> None:
        branch = load_candidate({
            "name": "a/a",
            "version": "dev-main",
            "extra": {"branch-alias": {"dev-main": "2.x-dev"}},
        })
        pool = make_pool(make_candidate("a/a", "1.0.0"), branch)
        assert list(pool.satisfiers("a/a", Constraint.parse("^2.0@dev"))) == [branch]
        assert list(pool.satisfiers("a/a", Constraint.parse("dev-main"))) == [branch]
        assert not list(pool.satisfiers("a/a", Constraint.parse("^2.0")))


class TestProvideCycles:
    """Tests for provide/replace cycle detection."""

    def test_two_name_cycle(self) -> None:
        a = make_candidate("a/a", "1.0.0", provide={"b/b": "1.0.0"})
        b = make_candidate("b/b", "1.0.0", replace={"a/a": "1.0.0"})
        with pytest.raises(ProvideCycle) as excinfo:
            Pool.build([a, b])
        assert excinfo.value.cycle == ["a/a", "b/b", "a/a"]
        assert "a/a -> b/b -> a/a" in str(excinfo.value)

    def test_three_name_cycle(self) -> None:
        candidates = [
            make_candidate("a/a", "1.0.0", replace={"b/b": "*"}),
            make_candidate("b/b", "1.0.0", replace={"c/c": "*"}),
            make_candidate("c/c", "1.0.0", provide={"a/a": "*"}),
        ]
        assert find_provide_cycle(candidates) == ["a/a", "b/b", "c/c", "a/a"]

    def test_self_link_ignored(self) -> None:
        a = make_candidate("a/a", "1.0.0", replace={"a/a": "self.version"})
        assert find_provide_cycle([a]) == []
        assert len(Pool.build([a])) == 1

    def test_chain_is_not_a_cycle(self) -> None:
        candidates = [
            make_candidate("a/a", "1.0.0", replace={"b/b": "*"}),
            make_candidate("b/b", "1.0.0", replace={"c/c": "*"}),
        ]
        assert find_provide_cycle(candidates) == []

    def test_deep_chain_does_not_recurse(self) -> None:
        candidates = [
            make_candidate(f"v/p{i}", "1.0.0", provide={f"v/p{i + 1}": "*"})
            for i in range(3000)
        ]
        assert find_provide_cycle(candidates) == []


# ---------------------------------------------------------------------------
# PoolBuilder
# ---------------------------------------------------------------------------


class _FailingRepository:
    name = "broken"

    def fetch_candidates(self, name: str) -> list[Candidate]:
        raise RepositoryUnavailable(name, self.name, "connection refused")


class TestPoolBuilder:
    """Tests for transitive pool construction."""

    def test_follows_requirements(self) -> None:
        repo = ArrayRepository([
            make_candidate("a/a", "1.0.0", require={"b/b": "^1.0"}),
            make_candidate("b/b", "1.0.0", require={"c/c": "*"}),
            make_candidate("c/c", "1.0.0"),
            make_candidate("d/d", "1.0.0"),
        ])
        pool = PoolBuilder([repo]).build(["a/a"])
        assert set(pool.names) == {"a/a", "b/b", "c/c"}

    def test_first_repository_wins(self) -> None:
        preferred = make_candidate("a/a", "1.0.0")
        fallback = make_candidate("a/a", "2.0.0")
        pool = PoolBuilder([ArrayRepository([preferred]), ArrayRepository([fallback])]).build(["a/a"])
        assert pool.lookup("a/a") == (preferred,)

    def test_merge_collects_all(self) -> None:
        one = make_candidate("a/a", "1.0.0")
        two = make_candidate("a/a", "2.0.0")
        builder = PoolBuilder([ArrayRepository([one]), ArrayRepository([two])], merge=True)
        assert builder.build(["a/a"]).lookup("a/a") == (two, one)

    def test_providers_collected(self) -> None:
        impl = make_candidate("acme/logger", "1.0.0", provide={"psr/log-implementation": "1.0.0"})
        pool = PoolBuilder([ArrayRepository([impl])]).build(["psr/log-implementation"])
        assert impl in pool

    def test_extra_candidates_first(self) -> None:
        locked = make_candidate("a/a", "0.9.0")
        repo = ArrayRepository([make_candidate("a/a", "1.0.0")])
        pool = PoolBuilder([repo]).build(["a/a"], extra=[locked])
        assert pool.id_of(locked) == 1
        assert len(pool.lookup("a/a")) == 2

    def test_unavailable_propagates(self) -> None:
        with pytest.raises(RepositoryUnavailable, match="connection refused"):
            PoolBuilder([_FailingRepository()]).build(["a/a"])

    def test_cycle_rejected(self) -> None:
        repo = ArrayRepository([
            make_candidate("a/a", "1.0.0", provide={"b/b": "*"}, require={"b/b": "*"}),
            make_candidate("b/b", "1.0.0", provide={"a/a": "*"}),
        ])
        with pytest.raises(ProvideCycle):
            PoolBuilder([repo]).build(["a/a"])
