"""Shared factories for pool, solver and lock tests.

Candidates are built through ``load_candidate`` so the tests exercise the
same path repository data takes.
"""

from __future__ import annotations

from typing import Any

from lockwright.package import Candidate, load_candidate
from lockwright.pool import Pool
from lockwright.solver import DecisionSet, Request, solve


def make_candidate(
    name: str,
    version: str,
    require: dict[str, str] | None = None,
    conflict: dict[str, str] | None = None,
    provide: dict[str, str] | None = None,
    replace: dict[str, str] | None = None,
    **metadata: Any,
) -> Candidate:
    """Build a candidate from keyword sections (``require={"b/b": "^1.0"}``)."""
    data: dict[str, Any] = {"name": name, "version": version}
    for key, section in (
        ("require", require),
        ("conflict", conflict),
        ("provide", provide),
        ("replace", replace),
    ):
        if section:
            data[key] = section
    data.update(metadata)
    return load_candidate(data)


def make_pool(*candidates: Candidate) -> Pool:
    return Pool.build(candidates)


def solve_versions(pool: Pool, requires: dict[str, str], **kwargs: Any) -> dict[str, str]:
    """Solve and return ``name -> pretty version``; fails the test if unsolved."""
    prior = kwargs.pop("prior_decisions", None)
    policy = kwargs.pop("policy", None)
    request = Request.create(requires=requires, **kwargs)
    resolution = solve(pool, request, prior_decisions=prior, policy=policy)
    assert resolution.success, resolution.explain()
    return resolution.unwrap().as_dict()


def decision_set(*candidates: Candidate) -> DecisionSet:
    return DecisionSet(candidates)
