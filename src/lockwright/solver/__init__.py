"""Dependency solver: rules, CDCL search, results and transactions."""

from lockwright.solver.policy import Policy
from lockwright.solver.problems import Problem
from lockwright.solver.request import RequiredLink, Request
from lockwright.solver.resolution import (
    DecisionSet,
    Deadline,
    Resolution,
    ResolutionStatus,
    SolverStats,
)
from lockwright.solver.rules import Rule, RuleSet, RuleType
from lockwright.solver.solver import Solver, solve
from lockwright.solver.transaction import Operation, OperationKind, Transaction

__all__ = [
    "DecisionSet",
    "Deadline",
    "Operation",
    "OperationKind",
    "Policy",
    "Problem",
    "RequiredLink",
    "Request",
    "Resolution",
    "ResolutionStatus",
    "Rule",
    "RuleSet",
    "RuleType",
    "Solver",
    "SolverStats",
    "Transaction",
    "solve",
]
