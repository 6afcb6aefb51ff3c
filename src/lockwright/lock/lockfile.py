"""The ``LockFile`` class: package access and byte-exact serialization.

A ``LockFile`` models a composer.lock document. Writing follows Composer's
encoder exactly: four-space indentation, ``": "`` separators, unescaped
slashes and unicode, a trailing newline and Composer's key order. Reading a
lock written by Composer and writing it back gives the same bytes.

Deserialization, validation and diffing live in ``operations``; building a
lock from a solver result lives in ``factory``. Both are attached to the
class in the package ``__init__``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping

from lockwright.lock.models import DEFAULT_README, PLUGIN_API_VERSION
from lockwright.package import Candidate, dump_candidate
from lockwright.solver import DecisionSet


class LockFile:
    """A composer.lock document.

    Example::

        lock = LockFile.from_decisions(resolution.unwrap(), manifest, request)
        lock.write(Path("composer.lock"))

    A lock resolved without ``require-dev`` has ``dev_included`` False and
    writes ``"packages-dev": null``, as Composer does for ``--no-dev``.
    """

    def __init__(
        self,
        content_hash: str = "",
        packages: Iterable[Candidate] = (),
        packages_dev: Iterable[Candidate] = (),
        dev_included: bool = True,
        aliases: list[Any] | None = None,
        minimum_stability: str = "stable",
        stability_flags: Mapping[str, int] | None = None,
        prefer_stable: bool = False,
        prefer_lowest: bool = False,
        platform: Mapping[str, str] | None = None,
        platform_dev: Mapping[str, str] | None = None,
        platform_overrides: Mapping[str, Any] | None = None,
        plugin_api_version: str | None = PLUGIN_API_VERSION,
        readme: Iterable[str] = DEFAULT_README,
    ) -> None:
        self.readme = list(readme)
        self.content_hash = content_hash
        self.packages: list[Candidate] = list(packages)
        self.packages_dev: list[Candidate] = list(packages_dev)
        self.dev_included = dev_included
        self.aliases = list(aliases or [])
        self.minimum_stability = minimum_stability
        self.stability_flags: dict[str, int] = dict(stability_flags or {})
        self.prefer_stable = prefer_stable
        self.prefer_lowest = prefer_lowest
        self.platform: dict[str, str] = dict(platform or {})
        self.platform_dev: dict[str, str] = dict(platform_dev or {})
        self.platform_overrides: dict[str, Any] | None = (
            dict(platform_overrides) if platform_overrides else None
        )
        self.plugin_api_version = plugin_api_version
        # keys read as ``[]`` are written back the same way when still empty
        self._list_shaped: set[str] = set()
        # unknown top-level keys, written after the known ones
        self.extra: dict[str, Any] = {}

    # -- Package access -----------------------------------------------------

    @property
    def all_packages(self) -> list[Candidate]:
        return self.packages + self.packages_dev

    def find_package(self, name: str) -> Candidate | None:
        """Return the locked candidate named *name* (case-insensitive)."""
        key = name.lower()
        for candidate in self.all_packages:
            if candidate.key == key:
                return candidate
        return None

    def is_dev_package(self, name: str) -> bool:
        key = name.lower()
        return any(c.key == key for c in self.packages_dev)

    @property
    def package_names(self) -> list[str]:
        return sorted(c.name for c in self.all_packages)

    def decisions(self, dev: bool = True) -> DecisionSet:
        """The locked packages as a decision set.

        Args:
            dev: Include ``packages-dev``.
        """
        return DecisionSet(self.all_packages if dev else self.packages)

    # -- Serialization ------------------------------------------------------

    def _map(self, key: str, value: dict[str, Any]) -> Any:
        if not value and key in self._list_shaped:
            return []
        return value

    def to_dict(self) -> dict[str, Any]:
        """Serialize into a dict in composer.lock key order."""
        data: dict[str, Any] = {
            "_readme": list(self.readme),
            "content-hash": self.content_hash,
            "packages": [dump_candidate(c) for c in self.packages],
            "packages-dev": (
                [dump_candidate(c) for c in self.packages_dev] if self.dev_included else None
            ),
            "aliases": list(self.aliases),
            "minimum-stability": self.minimum_stability,
            "stability-flags": self._map("stability-flags", self.stability_flags),
            "prefer-stable": self.prefer_stable,
            "prefer-lowest": self.prefer_lowest,
            "platform": self._map("platform", self.platform),
            "platform-dev": self._map("platform-dev", self.platform_dev),
        }
        if self.platform_overrides:
            data["platform-overrides"] = dict(self.platform_overrides)
        if self.plugin_api_version is not None:
            data["plugin-api-version"] = self.plugin_api_version
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    def to_json(self) -> str:
        """Serialize to composer.lock text (trailing newline included)."""
        return json.dumps(self.to_dict(), indent=4, ensure_ascii=False) + "\n"

    def write(self, path: Path) -> None:
        """Write the lock to *path*, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json(), encoding="utf-8")

    def __repr__(self) -> str:
        return (
            f"LockFile({len(self.packages)} packages, {len(self.packages_dev)} dev, "
            f"hash={self.content_hash!r})"
        )
