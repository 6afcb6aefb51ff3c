"""Lockwright CLI package."""

from lockwright.cli.main import cli

__all__ = ["cli"]
