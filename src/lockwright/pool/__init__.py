"""Candidate pool: immutable index of package versions shared by solves."""

from lockwright.pool.builder import PoolBuilder
from lockwright.pool.pool import Pool, find_provide_cycle

__all__ = [
    "Pool",
    "PoolBuilder",
    "find_provide_cycle",
]
