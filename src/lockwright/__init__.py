"""Lockwright: dependency resolution and composer.lock management.

Parses version constraints, builds an immutable candidate pool from
repositories, solves requirements with a conflict-driven SAT solver and
keeps composer.lock files reproducible and in sync with their manifest.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
