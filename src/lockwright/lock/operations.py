"""Lock operations: deserialization, validation and diffing.

These functions are attached to ``LockFile`` in the package ``__init__`` as
``from_dict``, ``from_json``, ``read`` (classmethods), ``validate`` and
``diff`` so callers see one class.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from lockwright.exceptions import LockfileError, ParseError
from lockwright.lock.models import CONTENT_HASH_RE, DEFAULT_README, MAP_KEYS, TOP_LEVEL_KEYS
from lockwright.package import Candidate, is_platform_package, load_candidate


def _packages(data: Mapping[str, Any], key: str) -> list[Candidate]:
    entries = data.get(key)
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise LockfileError(f"{key!r} must be a list of packages")
    out: list[Candidate] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            raise LockfileError(f"{key!r} contains a non-object entry")
        try:
            out.append(load_candidate(entry))
        except ParseError as exc:
            raise LockfileError(f"Invalid package in {key!r}: {exc}") from exc
    return out


def _string_map(data: Mapping[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key, {})
    if isinstance(value, list):
        if value:
            raise LockfileError(f"{key!r} must be an object")
        return {}
    if not isinstance(value, Mapping):
        raise LockfileError(f"{key!r} must be an object")
    return dict(value)


def _from_dict(cls: type, data: Mapping[str, Any]) -> Any:
    """Build a ``LockFile`` from a decoded composer.lock document.

    Missing keys take their defaults, so locks written by older Composer
    versions load too. ``"packages-dev": null`` marks a lock resolved
    without dev requirements. Unknown top-level keys are kept and written back.

    Raises:
        LockfileError: If the document has the wrong shape or contains an
            unparseable package.
    """
    if not isinstance(data, Mapping):
        raise LockfileError("composer.lock must contain a JSON object")
    content_hash = data.get("content-hash", data.get("hash", ""))
    if not isinstance(content_hash, str):
        raise LockfileError("'content-hash' must be a string")

    lock = cls(
        content_hash=content_hash,
        packages=_packages(data, "packages"),
        packages_dev=_packages(data, "packages-dev"),
        dev_included=data.get("packages-dev", []) is not None,
        aliases=list(data.get("aliases") or []),
        minimum_stability=str(data.get("minimum-stability", "stable")),
        stability_flags=_string_map(data, "stability-flags"),
        prefer_stable=bool(data.get("prefer-stable", False)),
        prefer_lowest=bool(data.get("prefer-lowest", False)),
        platform=_string_map(data, "platform"),
        platform_dev=_string_map(data, "platform-dev"),
        platform_overrides=_string_map(data, "platform-overrides") or None,
        plugin_api_version=data.get("plugin-api-version"),
        readme=data.get("_readme", DEFAULT_README),
    )
    lock._list_shaped = {key for key in MAP_KEYS if isinstance(data.get(key), list)}
    lock.extra = {key: value for key, value in data.items() if key not in TOP_LEVEL_KEYS}
    return lock


def _from_json(cls: type, text: str) -> Any:
    """Parse composer.lock text.

    Raises:
        LockfileError: If *text* is not valid JSON or not a lock document.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LockfileError(f"composer.lock is not valid JSON: {exc}") from exc
    return cls.from_dict(data)


def _read(cls: type, path: Path) -> Any:
    """Read a lock from disk.

    Raises:
        LockfileError: If the file cannot be read or parsed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LockfileError(f"Cannot read {path}: {exc}") from exc
    return cls.from_json(text)


def _validate(self: Any) -> list[str]:
    """Check the lock for internal consistency.

    Checks performed:

    1. **Content hash format:** 32 lowercase hex characters.
    2. **Unique names:** no package is locked twice.
    3. **No platform packages:** ``php``, ``ext-*`` and friends belong in
       ``platform``, never in the package lists.
    4. **Requirements present:** every non-platform requirement of a locked
       package is locked too (directly or through provide/replace).
    5. **Requirements satisfied:** the locked version of each requirement
       matches the requiring package's constraint.

    Returns:
        Error messages; empty when the lock is valid.
    """
    errors: list[str] = []

    if not CONTENT_HASH_RE.match(self.content_hash or ""):
        errors.append(f"Invalid content-hash {self.content_hash!r}")

    seen: set[str] = set()
    for candidate in self.all_packages:
        if candidate.key in seen:
            errors.append(f"Package {candidate.name!r} is locked more than once")
        seen.add(candidate.key)
        if candidate.is_platform:
            errors.append(f"Platform package {candidate.name!r} must not appear in the package list")

    answers: dict[str, list[Candidate]] = {}
    for candidate in self.all_packages:
        for name in candidate.names():
            answers.setdefault(name, []).append(candidate)

    for candidate in self.all_packages:
        for link in candidate.requires:
            if is_platform_package(link.target):
                continue
            providers = answers.get(link.key)
            if not providers:
                errors.append(
                    f"{candidate} requires {link.target} {link.pretty_constraint} "
                    "which is not in the lock file"
                )
                continue
            direct = [c for c in providers if c.key == link.key]
            if direct and not any(c.satisfies(link.constraint) for c in direct):
                errors.append(
                    f"{candidate} requires {link.target} {link.pretty_constraint} "
                    f"but {direct[0]} is locked"
                )

    return errors


def _diff(self: Any, other: Any) -> dict[str, Any]:
    """Compare this lock with *other* (typically the newer one).

    Returns:
        Dict with ``added`` and ``removed`` package names, and ``changed``
        entries (``name``, ``field``, ``old``, ``new``) for version and
        dev/non-dev moves.
    """
    old = {c.key: c for c in self.all_packages}
    new = {c.key: c for c in other.all_packages}

    added = sorted(new[k].name for k in set(new) - set(old))
    removed = sorted(old[k].name for k in set(old) - set(new))

    changes: list[dict[str, Any]] = []
    for key in sorted(set(old) & set(new)):
        before, after = old[key], new[key]
        if before.pretty_version != after.pretty_version:
            changes.append({
                "name": after.name,
                "field": "version",
                "old": before.pretty_version,
                "new": after.pretty_version,
            })
        if self.is_dev_package(key) != other.is_dev_package(key):
            changes.append({
                "name": after.name,
                "field": "dev",
                "old": self.is_dev_package(key),
                "new": other.is_dev_package(key),
            })
        if before.metadata.get("source") != after.metadata.get("source"):
            changes.append({
                "name": after.name,
                "field": "source",
                "old": before.metadata.get("source"),
                "new": after.metadata.get("source"),
            })

    return {
        "added": added,
        "removed": removed,
        "changed": changes,
    }
