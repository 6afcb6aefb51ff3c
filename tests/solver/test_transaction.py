"""Tests for the operations between two decision sets."""

from __future__ import annotations

from lockwright.solver import DecisionSet, OperationKind, Transaction
from tests.solver.helpers import make_candidate


class TestTransaction:
    """Tests for Transaction.from_decisions."""

    def test_fresh_install(self) -> None:
        after = DecisionSet([make_candidate("b/b", "1.0.0"), make_candidate("a/a", "2.0.0")])
        transaction = Transaction.from_decisions(None, after)
        assert [str(op) for op in transaction] == [
            "Installing a/a (2.0.0)",
            "Installing b/b (1.0.0)",
        ]
        assert len(transaction.installs) == 2

    def test_upgrade_downgrade_remove(self) -> None:
        before = DecisionSet([
            make_candidate("a/a", "1.0.0"),
            make_candidate("b/b", "2.0.0"),
            make_candidate("c/c", "1.0.0"),
        ])
        after = DecisionSet([
            make_candidate("a/a", "1.5.0"),
            make_candidate("b/b", "1.9.0"),
            make_candidate("d/d", "0.1.0"),
        ])
        transaction = Transaction.from_decisions(before, after)
        assert [str(op) for op in transaction] == [
            "Upgrading a/a (1.0.0 => 1.5.0)",
            "Downgrading b/b (2.0.0 => 1.9.0)",
            "Removing c/c (1.0.0)",
            "Installing d/d (0.1.0)",
        ]
        assert [op.direction for op in transaction.updates] == ["upgrade", "downgrade"]
        assert transaction.uninstalls[0].name == "c/c"

    def test_unchanged_is_empty(self) -> None:
        decisions = DecisionSet([make_candidate("a/a", "1.0.0")])
        same = DecisionSet([make_candidate("a/a", "1.0.0")])
        transaction = Transaction.from_decisions(decisions, same)
        assert not transaction
        assert len(transaction) == 0

    def test_equal_versions_with_different_text_are_unchanged(self) -> None:
        before = DecisionSet([make_candidate("a/a", "1.0")])
        after = DecisionSet([make_candidate("a/a", "1.0.0")])
        assert not Transaction.from_decisions(before, after)

    def test_direction_only_for_updates(self) -> None:
        after = DecisionSet([make_candidate("a/a", "1.0.0")])
        op = Transaction.from_decisions(None, after).operations[0]
        assert op.kind is OperationKind.INSTALL
        assert op.direction is None
