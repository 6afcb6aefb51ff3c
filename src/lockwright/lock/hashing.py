"""Manifest fingerprint stored in composer.lock as ``content-hash``.

The hash must match what Composer computes, otherwise every lock written by
one tool looks stale to the other. Composer takes the relevant manifest
keys, sorts them (top level only), encodes them with PHP's default
``json_encode`` flags and hashes the result with MD5. PHP's defaults escape
``/`` as ``\\/`` and non-ASCII characters as ``\\uXXXX``, and an empty JSON
object decoded into a PHP array re-encodes as ``[]``.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Mapping

RELEVANT_KEYS: tuple[str, ...] = (
    "name",
    "version",
    "require",
    "require-dev",
    "conflict",
    "replace",
    "provide",
    "minimum-stability",
    "prefer-stable",
    "repositories",
    "extra",
)


def _php_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        if not value:
            return []
        return {key: _php_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_php_value(item) for item in value]
    return value


def php_json_encode(value: Any) -> str:
    """Encode *value* the way PHP's ``json_encode($value, 0)`` does."""
    text = json.dumps(_php_value(value), separators=(",", ":"), ensure_ascii=True)
    return text.replace("/", "\\/")


def content_hash(manifest_data: Mapping[str, Any]) -> str:
    """Compute the Composer-compatible content hash of a manifest.

    Args:
        manifest_data: The decoded composer.json document.

    Returns:
        32 lowercase hex characters.
    """
    relevant: dict[str, Any] = {
        key: manifest_data[key] for key in RELEVANT_KEYS if key in manifest_data
    }
    config = manifest_data.get("config")
    if isinstance(config, Mapping) and config.get("platform"):
        relevant["config"] = {"platform": config["platform"]}
    ordered = {key: relevant[key] for key in sorted(relevant)}
    return hashlib.md5(php_json_encode(ordered).encode("utf-8")).hexdigest()
