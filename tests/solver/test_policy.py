"""Tests for candidate preference ordering."""

from __future__ import annotations

from lockwright.semver import Version
from lockwright.solver import Policy, Request
from tests.solver.helpers import make_candidate, make_pool


def _pool():
    return make_pool(
        make_candidate("vendor/a", "1.0.0"),          # 1
        make_candidate("vendor/a", "2.0.0"),          # 2
        make_candidate("vendor/a", "2.1.0-beta1"),    # 3
        make_candidate("vendor/fork", "3.0.0", replace={"vendor/a": "2.0.0"}),  # 4
    )


class TestPolicySort:
    """Tests for Policy.sort precedence."""

    def test_stable_then_highest(self) -> None:
        assert Policy().sort(_pool(), [1, 2, 3]) == [2, 1, 3]

    def test_highest_when_stability_ignored(self) -> None:
        assert Policy(prefer_stable=False).sort(_pool(), [1, 2, 3]) == [3, 2, 1]

    def test_prefer_lowest(self) -> None:
        assert Policy(prefer_lowest=True).sort(_pool(), [1, 2, 3]) == [1, 2, 3]

    def test_fixed_first(self) -> None:
        assert Policy().sort(_pool(), [1, 2], fixed={1}) == [1, 2]

    def test_locked_version_first(self) -> None:
        preferred = {"vendor/a": Version.parse("1.0.0")}
        assert Policy().sort(_pool(), [1, 2], preferred=preferred) == [1, 2]

    def test_locked_prerelease_beats_stability_by_default(self) -> None:
        preferred = {"vendor/a": Version.parse("2.1.0-beta1")}
        assert Policy().select(_pool(), [1, 2, 3], preferred=preferred) == 3

    def test_stability_beats_locked_when_switched(self) -> None:
        preferred = {"vendor/a": Version.parse("2.1.0-beta1")}
        policy = Policy(locked_before_stability=False)
        assert policy.select(_pool(), [1, 2, 3], preferred=preferred) == 2

    def test_original_name_before_replacer(self) -> None:
        assert Policy().sort(_pool(), [4, 1], required="vendor/a") == [1, 4]

    def test_replacer_competes_on_version_without_required_name(self) -> None:
        assert Policy().sort(_pool(), [1, 4]) == [4, 1]

    def test_pool_order_breaks_ties(self) -> None:
        pool = make_pool(make_candidate("vendor/a", "1.0"), make_candidate("vendor/a", "1.0.0"))
        assert Policy().sort(pool, [2, 1]) == [1, 2]


class TestFromRequest:
    """Tests for deriving a policy from a request."""

    def test_defaults(self) -> None:
        policy = Policy.from_request(Request.create())
        assert policy == Policy(prefer_stable=True, prefer_lowest=False)

    def test_request_settings(self) -> None:
        policy = Policy.from_request(Request.create(prefer_stable=False, prefer_lowest=True))
        assert not policy.prefer_stable
        assert policy.prefer_lowest

    def test_overrides(self) -> None:
        policy = Policy.from_request(Request.create(), locked_before_stability=False)
        assert not policy.locked_before_stability
