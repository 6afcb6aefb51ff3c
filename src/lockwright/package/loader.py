"""Conversion between composer-style package dicts and ``Candidate`` objects.

``load_candidate`` reads the package shape used by repository metadata and
lock files (``name``, ``version``, ``require``, ``conflict``, ``provide``,
``replace``, ``require-dev`` plus arbitrary distribution keys).
``dump_candidate`` writes it back in the key order of composer.lock so that
a lock read and rewritten is byte-identical.

Branch versions pick up their ``extra.branch-alias`` entry as the candidate's
alias; an alias that is not a dev version is ignored, as Composer does.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from lockwright.exceptions import InvalidVersionFormat, LockfileError, ParseError
from lockwright.package.models import Candidate, Link, LinkKind
from lockwright.semver import Constraint, Version

logger = logging.getLogger(__name__)

# Link sections in the order composer.lock writes them.
LINK_SECTIONS: tuple[LinkKind, ...] = (
    LinkKind.REQUIRES,
    LinkKind.CONFLICTS,
    LinkKind.PROVIDES,
    LinkKind.REPLACES,
    LinkKind.DEV_REQUIRES,
)

# Metadata keys in lock order; unknown keys follow, then ``time``.
_METADATA_ORDER: tuple[str, ...] = (
    "source",
    "dist",
    # link sections are emitted here
    "suggest",
    "bin",
    "type",
    "extra",
    "autoload",
    "autoload-dev",
    "notification-url",
    "include-path",
    "php-ext",
    "archive",
    "scripts",
    "license",
    "authors",
    "description",
    "homepage",
    "keywords",
    "repositories",
    "support",
    "funding",
    "abandoned",
    "default-branch",
)

_SKIPPED_KEYS = frozenset({"name", "version", "version_normalized", "installation-source"})
_LINK_KEYS = frozenset(kind.value for kind in LINK_SECTIONS)

SELF_VERSION = "self.version"


def load_candidate(data: Mapping[str, Any]) -> Candidate:
    """Build a ``Candidate`` from a composer-style package dict.

    ``self.version`` link constraints resolve to the package's own version;
    the authored text is kept as the link's pretty constraint.

    Raises:
        LockfileError: If ``name`` or ``version`` is missing.
        InvalidVersionFormat: If the version is malformed.
        InvalidConstraintFormat: If a link constraint is malformed. Both
            parse errors carry the package name.
    """
    name = data.get("name")
    pretty_version = data.get("version")
    if not isinstance(name, str) or not name:
        raise LockfileError(f"Package entry without a name: {dict(data)!r}")
    if not isinstance(pretty_version, str) or not pretty_version:
        raise LockfileError(f"Package {name!r} has no version")

    try:
        version = Version.parse(pretty_version)
    except InvalidVersionFormat as exc:
        raise exc.for_package(name) from None

    links: dict[LinkKind, tuple[Link, ...]] = {}
    for kind in LINK_SECTIONS:
        section = data.get(kind.value) or {}
        if not isinstance(section, Mapping):
            # composer writes empty link maps as []
            section = {}
        links[kind] = tuple(
            _load_link(name, version, target, text, kind)
            for target, text in section.items()
        )

    metadata = {k: v for k, v in data.items() if k not in _SKIPPED_KEYS and k not in _LINK_KEYS}
    return Candidate(
        name=name,
        version=version,
        pretty_version=pretty_version,
        requires=links[LinkKind.REQUIRES],
        conflicts=links[LinkKind.CONFLICTS],
        provides=links[LinkKind.PROVIDES],
        replaces=links[LinkKind.REPLACES],
        dev_requires=links[LinkKind.DEV_REQUIRES],
        metadata=metadata,
        alias=_branch_alias(name, version, pretty_version, metadata),
    )


def _branch_alias(
    name: str, version: Version, pretty_version: str, metadata: Mapping[str, Any]
) -> Version | None:
    if version.label != "dev":
        return None
    extra = metadata.get("extra")
    aliases = extra.get("branch-alias") if isinstance(extra, Mapping) else None
    if not isinstance(aliases, Mapping) or not isinstance(aliases.get(pretty_version), str):
        return None
    text = aliases[pretty_version]
    try:
        alias = Version.parse(text)
    except InvalidVersionFormat:
        alias = None
    if alias is None or alias.label != "dev" or alias.is_branch:
        logger.debug("Ignoring branch alias %r of %s %s", text, name, pretty_version)
        return None
    return alias


def _load_link(source: str, version: Version, target: str, text: Any, kind: LinkKind) -> Link:
    if text == SELF_VERSION:
        constraint = Constraint.exact(version, raw=SELF_VERSION)
    else:
        try:
            constraint = Constraint.parse(text)
        except ParseError as exc:
            raise exc.for_package(source) from None
    return Link(source, target, constraint, kind, text)


def dump_candidate(candidate: Candidate) -> dict[str, Any]:
    """Serialize a candidate into a composer.lock package entry (ordered)."""
    out: dict[str, Any] = {"name": candidate.name, "version": candidate.pretty_version}
    metadata = dict(candidate.metadata)

    for key in ("source", "dist"):
        if key in metadata:
            out[key] = metadata.pop(key)

    sections = {
        LinkKind.REQUIRES: candidate.requires,
        LinkKind.CONFLICTS: candidate.conflicts,
        LinkKind.PROVIDES: candidate.provides,
        LinkKind.REPLACES: candidate.replaces,
        LinkKind.DEV_REQUIRES: candidate.dev_requires,
    }
    for kind in LINK_SECTIONS:
        if sections[kind]:
            out[kind.value] = {link.target: link.pretty_constraint for link in sections[kind]}

    time = metadata.pop("time", None)
    for key in _METADATA_ORDER:
        if key in metadata:
            out[key] = metadata.pop(key)
    out.update(metadata)
    if time is not None:
        out["time"] = time
    return out
