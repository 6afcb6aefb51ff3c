"""Operations that turn one decision set into another.

Used to report what a re-solve changes: which packages get installed,
updated (upgraded or downgraded) or removed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from lockwright.package import Candidate
from lockwright.solver.resolution import DecisionSet


class OperationKind(str, Enum):
    INSTALL = "install"
    UPDATE = "update"
    UNINSTALL = "uninstall"


@dataclass(frozen=True)
class Operation:
    """One change to one package.

    Attributes:
        kind: Install, update or uninstall.
        name: Package name.
        before: Candidate installed before (None for installs).
        after: Candidate installed after (None for uninstalls).
    """

    kind: OperationKind
    name: str
    before: Candidate | None = None
    after: Candidate | None = None

    @property
    def direction(self) -> str | None:
        """``"upgrade"`` or ``"downgrade"`` for updates, else None."""
        if self.kind is not OperationKind.UPDATE or self.before is None or self.after is None:
            return None
        return "upgrade" if self.after.version > self.before.version else "downgrade"

    def __str__(self) -> str:
        if self.kind is OperationKind.INSTALL:
            return f"Installing {self.name} ({self.after.pretty_version})"
        if self.kind is OperationKind.UNINSTALL:
            return f"Removing {self.name} ({self.before.pretty_version})"
        verb = "Upgrading" if self.direction == "upgrade" else "Downgrading"
        return f"{verb} {self.name} ({self.before.pretty_version} => {self.after.pretty_version})"


class Transaction:
    """Ordered list of operations, sorted by package name."""

    def __init__(self, operations: list[Operation]) -> None:
        self.operations: tuple[Operation, ...] = tuple(operations)

    @classmethod
    def from_decisions(cls, before: DecisionSet | None, after: DecisionSet) -> Transaction:
        """Compute the operations leading from *before* to *after*.

        Args:
            before: The previous decision set, or None for a fresh install.
            after: The new decision set.
        """
        old = {c.key: c for c in before} if before is not None else {}
        new = {c.key: c for c in after}
        operations: list[Operation] = []
        for key in sorted(set(old) | set(new)):
            was, now = old.get(key), new.get(key)
            if was is None and now is not None:
                operations.append(Operation(OperationKind.INSTALL, now.name, after=now))
            elif now is None and was is not None:
                operations.append(Operation(OperationKind.UNINSTALL, was.name, before=was))
            elif was is not None and now is not None and was.version != now.version:
                operations.append(Operation(OperationKind.UPDATE, now.name, before=was, after=now))
        return cls(operations)

    def of_kind(self, kind: OperationKind) -> list[Operation]:
        return [op for op in self.operations if op.kind is kind]

    @property
    def installs(self) -> list[Operation]:
        return self.of_kind(OperationKind.INSTALL)

    @property
    def updates(self) -> list[Operation]:
        return self.of_kind(OperationKind.UPDATE)

    @property
    def uninstalls(self) -> list[Operation]:
        return self.of_kind(OperationKind.UNINSTALL)

    def __iter__(self) -> Iterator[Operation]:
        return iter(self.operations)

    def __len__(self) -> int:
        return len(self.operations)

    def __bool__(self) -> bool:
        return bool(self.operations)
