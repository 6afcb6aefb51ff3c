"""Tests for constraint parsing and matching.

Verifies:
    - Exact, comparator, caret, tilde, wildcard and hyphen forms.
    - Branch versions as exact constraints.
    - AND (whitespace/comma) and OR (``||``) composition.
    - Stability gating: default floor, explicit ``@flag``, implied floor.
    - Malformed constraints raise InvalidConstraintFormat.
"""

from __future__ import annotations

import pytest

from lockwright.exceptions import InvalidConstraintFormat
from lockwright.semver import Constraint, Stability, Version, parse_constraint


def v(text: str) -> Version:
    return Version.parse(text)


def matches(constraint: str, version: str, floor: Stability = Stability.STABLE) -> bool:
    return parse_constraint(constraint).matches(v(version), floor)


# ---------------------------------------------------------------------------
# Single-atom forms
# ---------------------------------------------------------------------------


class TestExactAndComparators:
    """Tests for exact versions and comparison operators."""

    @pytest.mark.parametrize("text", ["1.2.3", "=1.2.3", "==1.2.3", "v1.2.3"])
    def test_exact(self, text: str) -> None:
        assert matches(text, "1.2.3")
        assert not matches(text, "1.2.4")

    def test_greater_equal(self) -> None:
        assert matches(">=1.2", "1.2.0")
        assert matches(">=1.2", "5.0.0")
        assert not matches(">=1.2", "1.1.9")

    def test_strict_greater(self) -> None:
        assert not matches(">1.2", "1.2.0")
        assert matches(">1.2", "1.2.1")

    def test_less_excludes_prereleases_of_bound(self) -> None:
        assert matches("<2.0", "1.9.9")
        assert not matches("<2.0", "2.0.0")
        assert not matches("<2.0", "2.0.0-beta1", Stability.DEV)

    def test_less_than_prerelease_bound(self) -> None:
        assert matches("<2.0-beta", "2.0.0-alpha1", Stability.DEV)
        assert not matches("<2.0-beta", "2.0.0-beta", Stability.DEV)

    def test_less_equal(self) -> None:
        assert matches("<=2.0", "2.0.0")
        assert not matches("<=2.0", "2.0.1")

    @pytest.mark.parametrize("op", ["!=", "<>"])
    def test_not_equal(self, op: str) -> None:
        assert not matches(f"{op}1.5.0", "1.5.0")
        assert matches(f"{op}1.5.0", "1.5.1")

    def test_operator_followed_by_space(self) -> None:
        assert matches(">= 1.0 < 2.0", "1.5.0")
        assert not matches(">= 1.0 < 2.0", "2.0.0")


class TestCaret:
    """Tests for ``^`` ranges (leftmost non-zero segment pinned)."""

    def test_major(self) -> None:
        assert matches("^1.2", "1.2.0")
        assert matches("^1.2", "1.99.0")
        assert not matches("^1.2", "1.1.9")
        assert not matches("^1.2", "2.0.0")

    def test_zero_major_pins_minor(self) -> None:
        assert matches("^0.2", "0.2.0")
        assert matches("^0.2", "0.2.9")
        assert not matches("^0.2", "0.3.0")

    def test_zero_minor_pins_patch(self) -> None:
        assert matches("^0.0.3", "0.0.3")
        assert not matches("^0.0.3", "0.0.4")

    def test_single_segment(self) -> None:
        assert matches("^1", "1.9.9")
        assert not matches("^1", "2.0.0")

    def test_upper_bound_excludes_next_major_prereleases(self) -> None:
        c = parse_constraint("^1.0")
        assert not c.contains(v("2.0.0-dev"))
        assert not c.contains(v("2.0.0-beta1"))

    def test_normal_form(self) -> None:
        assert str(parse_constraint("^1.2").groups[0]) == ">=1.2.0 <2.0.0-dev"


class TestTilde:
    """Tests for ``~`` ranges (compatible within the given precision)."""

    def test_two_segments(self) -> None:
        assert matches("~1.2", "1.2.0")
        assert matches("~1.2", "1.2.9")
        assert not matches("~1.2", "1.3.0")

    def test_three_segments(self) -> None:
        assert matches("~1.2.3", "1.2.5")
        assert not matches("~1.2.3", "1.2.2")
        assert not matches("~1.2.3", "1.3.0")

    def test_one_segment(self) -> None:
        assert matches("~1", "1.5.0")
        assert not matches("~1", "2.0.0")

    def test_four_segments_pin_third(self) -> None:
        assert matches("~1.2.3.4", "1.2.3.4")
        assert matches("~1.2.3.4", "1.2.3.9")
        assert not matches("~1.2.3.4", "1.2.3.3")
        assert not matches("~1.2.3.4", "1.2.4")
        assert not matches("~1.2.3.4", "1.2.9")


class TestWildcardAndHyphen:
    """Tests for ``*``/``x`` wildcards and hyphen ranges."""

    @pytest.mark.parametrize("text", ["1.2.*", "1.2.x", "1.2.X"])
    def test_wildcard_minor(self, text: str) -> None:
        assert matches(text, "1.2.0")
        assert matches(text, "1.2.99")
        assert not matches(text, "1.3.0")
        assert not matches(text, "1.1.9")

    def test_star_matches_everything_stable(self) -> None:
        c = parse_constraint("*")
        assert c.is_any
        assert c.matches(v("0.0.1"))
        assert c.matches(v("99.0.0"))
        assert not c.matches(v("1.0.0-beta"))

    def test_any_constructor(self) -> None:
        assert Constraint.any().is_any
        assert str(Constraint.any()) == "*"

    def test_hyphen_inclusive(self) -> None:
        assert matches("1.0 - 2.0", "1.0.0")
        assert matches("1.0 - 2.0", "2.0.0")
        assert not matches("1.0 - 2.0", "2.0.1")
        assert not matches("1.0 - 2.0", "0.9.9")


class TestBranchConstraints:
    """Tests for constraints naming a branch."""

    def test_named_branch_exact(self) -> None:
        c = parse_constraint("dev-main")
        assert c.implied_stability is Stability.DEV
        assert c.matches(v("dev-main"))
        assert not c.matches(v("dev-develop"))
        assert not c.matches(v("1.0.0"))

    def test_numbered_branch_exact(self) -> None:
        assert matches("2.x-dev", "2.x-dev")
        assert not matches("2.x-dev", "2.1.0")

    def test_lower_bound_excludes_branches(self) -> None:
        assert not matches(">=1.0", "dev-main", Stability.DEV)
        assert matches("*@dev", "dev-main")

    @pytest.mark.parametrize("text", ["^dev-main", "~dev-main"])
    def test_caret_and_tilde_reject_branches(self, text: str) -> None:
        with pytest.raises(InvalidConstraintFormat):
            parse_constraint(text)


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


class TestComposition:
    """Tests for AND and OR groups."""

    @pytest.mark.parametrize("text", [">=1.0 <2.0", ">=1.0, <2.0", ">=1.0,<2.0"])
    def test_conjunction(self, text: str) -> None:
        assert matches(text, "1.5.0")
        assert not matches(text, "2.0.0")
        assert not matches(text, "0.9.0")

    @pytest.mark.parametrize("text", ["^1.0 || ^3.0", "^1.0 | ^3.0", "^1.0||^3.0"])
    def test_disjunction(self, text: str) -> None:
        assert matches(text, "1.5.0")
        assert not matches(text, "2.0.0")
        assert matches(text, "3.1.0")
        assert len(parse_constraint(text).groups) == 2

    def test_exclusion_inside_range(self) -> None:
        assert not matches(">=1.0 !=1.5.0", "1.5.0")
        assert matches(">=1.0 !=1.5.0", "1.5.1")

    def test_intersects(self) -> None:
        assert parse_constraint("^1.0").intersects(parse_constraint("^1.5"))
        assert not parse_constraint("^1.0").intersects(parse_constraint("^2.0"))
        assert parse_constraint("^1.0 || ^2.0").intersects(parse_constraint("^2.1"))

    def test_raw_preserved(self) -> None:
        c = parse_constraint("  ^1.0 || ^2.0 ")
        assert str(c) == "^1.0 || ^2.0"
        assert repr(c) == "Constraint('^1.0 || ^2.0')"


# ---------------------------------------------------------------------------
# Stability gating
# ---------------------------------------------------------------------------


class TestStabilityGating:
    """Tests for the stability floor applied by ``matches``."""

    def test_default_floor_is_stable(self) -> None:
        assert not matches("^1.0", "1.1.0-beta1")

    def test_caller_floor_lowers_bar(self) -> None:
        assert matches("^1.0", "1.1.0-beta1", Stability.BETA)
        assert not matches("^1.0", "1.1.0-alpha1", Stability.BETA)

    def test_explicit_flag_overrides_floor(self) -> None:
        c = parse_constraint("^1.0@beta")
        assert c.stability is Stability.BETA
        assert c.matches(v("1.1.0-beta1"))
        assert not c.matches(v("1.1.0-alpha1"))

    def test_explicit_stable_flag_raises_floor(self) -> None:
        assert not matches("^1.0@stable", "1.1.0-beta1", Stability.DEV)

    def test_bare_dev_flag(self) -> None:
        c = parse_constraint("@dev")
        assert c.is_any
        assert c.matches(v("1.0.0-dev"))

    def test_implied_floor_from_prerelease_bound(self) -> None:
        c = parse_constraint(">=1.0-beta")
        assert c.implied_stability is Stability.BETA
        assert c.stability is None
        assert c.matches(v("1.1.0-beta2"))
        assert not c.matches(v("1.1.0-alpha1"))

    def test_implied_floor_never_raises_bar(self) -> None:
        c = parse_constraint(">=1.0-RC1")
        assert c.effective_stability(Stability.DEV) is Stability.DEV

    def test_contains_ignores_stability(self) -> None:
        assert parse_constraint("^1.0").contains(v("1.1.0-beta1"))

    def test_exact_prerelease_constraint(self) -> None:
        c = Constraint.exact(v("1.0.0-beta2"))
        assert c.matches(v("1.0.0-beta2"))
        assert c.implied_stability is Stability.BETA


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestErrors:
    """Tests for malformed constraint text."""

    @pytest.mark.parametrize(
        "text",
        [
            "", "   ", ">>1.0", "^1.0 ||", "1.0@bogus", ">1.*", "foo", "|| ^1.0",
            ",", ",,", "^1.0,", ">=1.0 , , <2.0",
        ],
    )
    def test_malformed_raises(self, text: str) -> None:
        with pytest.raises(InvalidConstraintFormat):
            parse_constraint(text)

    def test_error_names_text_and_reason(self) -> None:
        with pytest.raises(InvalidConstraintFormat) as excinfo:
            parse_constraint("1.0@bogus")
        assert excinfo.value.text == "1.0@bogus"
        assert "bogus" in excinfo.value.reason

    def test_error_annotated_with_package(self) -> None:
        err = InvalidConstraintFormat(">>1").for_package("acme/app")
        assert isinstance(err, InvalidConstraintFormat)
        assert "Invalid version constraint '>>1' in package 'acme/app'" == str(err)
