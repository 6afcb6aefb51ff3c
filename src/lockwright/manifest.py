"""Root manifest (composer.json) model.

Only the parts that affect resolution and locking are modelled; the raw
document is kept for the content hash, which covers keys this model does
not interpret (``repositories``, ``extra``...).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

from lockwright.exceptions import ManifestError, ParseError
from lockwright.lock.hashing import content_hash
from lockwright.package import Candidate, is_platform_package
from lockwright.semver import Constraint, Stability
from lockwright.solver.request import Request

logger = logging.getLogger(__name__)


def _string_map(data: Mapping[str, Any], key: str) -> dict[str, str]:
    value = data.get(key, {})
    if value in ([], None):
        return {}
    if not isinstance(value, Mapping):
        raise ManifestError(f"{key!r} must be an object of package names to constraints")
    return {str(name): str(text) for name, text in value.items()}


@dataclass
class Manifest:
    """A parsed composer.json.

    Attributes:
        name: Root package name, if declared.
        require: Runtime requirements, name to constraint text.
        require_dev: Development requirements.
        conflict: Root conflicts.
        provide: Names the root package provides.
        replace: Names the root package replaces.
        minimum_stability: Default stability floor (``stable``).
        prefer_stable: Composer's ``prefer-stable`` setting.
        platform: ``config.platform`` overrides, name to version text.
        data: The raw document, used for the content hash.
    """

    name: str | None = None
    require: dict[str, str] = field(default_factory=dict)
    require_dev: dict[str, str] = field(default_factory=dict)
    conflict: dict[str, str] = field(default_factory=dict)
    provide: dict[str, str] = field(default_factory=dict)
    replace: dict[str, str] = field(default_factory=dict)
    minimum_stability: str = "stable"
    prefer_stable: bool = False
    platform: dict[str, Any] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Manifest:
        """Build a manifest from a decoded composer.json document.

        Raises:
            ManifestError: If a section has the wrong shape.
            InvalidConstraintFormat: If a requirement or conflict constraint
                is malformed.
        """
        if not isinstance(data, Mapping):
            raise ManifestError("composer.json must contain a JSON object")
        config = data.get("config") or {}
        platform = config.get("platform") or {} if isinstance(config, Mapping) else {}
        minimum_stability = str(data.get("minimum-stability", "stable"))
        try:
            Stability.parse(minimum_stability)
        except ValueError as exc:
            raise ManifestError(f"Invalid minimum-stability {minimum_stability!r}") from exc
        manifest = cls(
            name=data.get("name"),
            require=_string_map(data, "require"),
            require_dev=_string_map(data, "require-dev"),
            conflict=_string_map(data, "conflict"),
            provide=_string_map(data, "provide"),
            replace=_string_map(data, "replace"),
            minimum_stability=minimum_stability,
            prefer_stable=bool(data.get("prefer-stable", False)),
            platform=dict(platform),
            data=dict(data),
        )
        sections = (manifest.require, manifest.require_dev, manifest.conflict)
        for package, text in (item for section in sections for item in section.items()):
            try:
                Constraint.parse(text)
            except ParseError as exc:
                raise exc.for_package(package) from None
        return manifest

    @classmethod
    def read(cls, path: Path) -> Manifest:
        """Read composer.json from *path*.

        Raises:
            ManifestError: If the file is missing or not valid JSON.
        """
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ManifestError(f"Cannot read {path}: {exc}") from exc
        return cls.from_dict(data)

    def with_requirement(self, name: str, constraint: str) -> Manifest:
        """Return a copy that requires *name* at *constraint* at runtime.

        An existing requirement on *name* in either require section is
        replaced.

        Raises:
            InvalidConstraintFormat: If *constraint* is malformed.
        """
        key = name.lower()
        data = dict(self.data)
        data["require"] = {n: t for n, t in self.require.items() if n.lower() != key}
        data["require"][name] = constraint
        if self.require_dev:
            data["require-dev"] = {n: t for n, t in self.require_dev.items() if n.lower() != key}
        return type(self).from_dict(data)

    def content_hash(self) -> str:
        return content_hash(self.data)

    @property
    def stability(self) -> Stability:
        return Stability.parse(self.minimum_stability)

    def stability_flags(self) -> dict[str, int]:
        """Per-package stability flags as written to composer.lock.

        An explicit ``@flag`` is always recorded. A pre-release version named
        in a constraint (``1.0.0-beta2``) records its stability only when it
        is below ``minimum-stability``. When a package appears in both
        require sections, the least stable flag wins.
        """
        floor = self.stability
        flags: dict[str, Stability] = {}
        for name, text in list(self.require.items()) + list(self.require_dev.items()):
            constraint = Constraint.parse(text)
            if constraint.stability is not None:
                stability = constraint.stability
            elif constraint.implied_stability is not None and constraint.implied_stability < floor:
                stability = constraint.implied_stability
            else:
                continue
            key = name.lower()
            if key not in flags or stability < flags[key]:
                flags[key] = stability
        return {name: stability.lock_flag for name, stability in flags.items()}

    def platform_requirements(self, dev: bool = False) -> dict[str, str]:
        """Requirements on platform packages (``php``, ``ext-*``...)."""
        source = self.require_dev if dev else self.require
        return {name: text for name, text in source.items() if is_platform_package(name)}

    def to_request(
        self,
        locked: Iterable[Candidate] = (),
        update: Iterable[str] | None = None,
        dev: bool = True,
        fixed: Iterable[Candidate] = (),
        prefer_lowest: bool = False,
        ignore_platform: bool = False,
    ) -> Request:
        """Turn the manifest into a solver request.

        Args:
            locked: Candidates of the current lock, used as preference.
            update: Allow-list for a partial update; None updates everything.
            dev: Include ``require-dev``.
            fixed: Pinned candidates, normally the platform repository.
            prefer_lowest: Prefer the lowest matching versions.
            ignore_platform: Drop requirements on platform packages.
        """
        def keep(name: str) -> bool:
            return not (ignore_platform and is_platform_package(name))

        requires = {n: t for n, t in self.require.items() if keep(n)}
        dev_requires = {n: t for n, t in self.require_dev.items() if keep(n)} if dev else {}
        flags = {
            name: Stability.from_lock_flag(flag) for name, flag in self.stability_flags().items()
        }
        return Request.create(
            requires=requires,
            dev_requires=dev_requires,
            conflicts=self.conflict,
            fixed=fixed,
            locked=locked,
            update=update,
            minimum_stability=self.stability,
            stability_flags=flags,
            prefer_stable=self.prefer_stable,
            prefer_lowest=prefer_lowest,
        )
