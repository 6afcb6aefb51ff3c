"""composer.lock constants shared by the lock modules."""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Document layout
# ---------------------------------------------------------------------------

DEFAULT_README: tuple[str, ...] = (
    "This file locks the dependencies of your project to a known state",
    "Read more about it at https://getcomposer.org/doc/01-basic-usage.md#installing-dependencies",
    "This file is @generated automatically",
)

PLUGIN_API_VERSION = "2.6.0"

# Top-level keys in the order composer.lock writes them.
TOP_LEVEL_KEYS: tuple[str, ...] = (
    "_readme",
    "content-hash",
    "packages",
    "packages-dev",
    "aliases",
    "minimum-stability",
    "stability-flags",
    "prefer-stable",
    "prefer-lowest",
    "platform",
    "platform-dev",
    "platform-overrides",
    "plugin-api-version",
)

# Keys whose empty value older Composer versions write as ``[]``.
MAP_KEYS: tuple[str, ...] = ("stability-flags", "platform", "platform-dev")

CONTENT_HASH_RE = re.compile(r"^[0-9a-f]{32}$")

LOCK_FILENAME = "composer.lock"
MANIFEST_FILENAME = "composer.json"
