"""Repository loaded from a ``packages.json``-shaped document.

Two layouts are accepted, matching what static package repositories publish::

    {"packages": {"vendor/a": {"1.0.0": {...}, "1.1.0": {...}}}}
    {"packages": [{"name": "vendor/a", "version": "1.0.0", ...}]}

Reading happens once, at construction. A document that cannot be read or
parsed raises ``RepositoryUnavailable`` so the caller can retry or report it;
a malformed package inside a readable document raises the parse error of the
offending package.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from lockwright.exceptions import RepositoryUnavailable
from lockwright.package import load_candidate
from lockwright.repository.base import ArrayRepository

logger = logging.getLogger(__name__)


class JsonRepository(ArrayRepository):
    """In-memory repository populated from a packages.json document."""

    @classmethod
    def from_path(cls, path: Path) -> JsonRepository:
        """Read a packages.json file.

        Raises:
            RepositoryUnavailable: If the file is missing or not valid JSON.
        """
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise RepositoryUnavailable("*", str(path), str(exc)) from exc
        return cls.from_dict(data, name=str(path))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], name: str = "json") -> JsonRepository:
        repo = cls(name=name)
        packages = data.get("packages", {})
        if isinstance(packages, Mapping):
            for package_name, versions in packages.items():
                entries = versions.values() if isinstance(versions, Mapping) else versions
                for entry in entries:
                    entry = dict(entry)
                    entry.setdefault("name", package_name)
                    repo.add(load_candidate(entry))
        elif isinstance(packages, list):
            for entry in packages:
                repo.add(load_candidate(entry))
        else:
            raise RepositoryUnavailable("*", name, "'packages' must be an object or a list")
        logger.info("Loaded %d package version(s) from %s", len(repo), name)
        return repo
