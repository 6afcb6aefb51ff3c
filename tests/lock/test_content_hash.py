"""Tests for the Composer-compatible manifest fingerprint."""

from __future__ import annotations

from lockwright.lock import content_hash
from lockwright.lock.hashing import php_json_encode


class TestPhpJsonEncode:
    """Tests for PHP json_encode emulation."""

    def test_slashes_escaped(self) -> None:
        assert php_json_encode({"name": "vendor/pkg"}) == '{"name":"vendor\\/pkg"}'

    def test_non_ascii_escaped(self) -> None:
        assert php_json_encode({"description": "café"}) == '{"description":"caf\\u00e9"}'

    def test_empty_object_is_list(self) -> None:
        assert php_json_encode({"require": {}}) == '{"require":[]}'

    def test_nested_order_kept(self) -> None:
        assert php_json_encode({"require": {"z/z": "*", "a/a": "*"}}) == (
            '{"require":{"z\\/z":"*","a\\/a":"*"}}'
        )


class TestContentHash:
    """Tests for content_hash."""

    def test_reference_value(self) -> None:
        data = {"name": "vendor/test", "require": {"symfony/console": "*"}}
        assert content_hash(data) == "952f760ba9cfb2ca4a799c52d42099d4"

    def test_top_level_key_order_irrelevant(self) -> None:
        a = {"require": {"symfony/console": "*"}, "name": "vendor/test"}
        b = {"name": "vendor/test", "require": {"symfony/console": "*"}}
        assert content_hash(a) == content_hash(b)

    def test_irrelevant_keys_ignored(self) -> None:
        base = {"name": "vendor/test", "require": {"symfony/console": "*"}}
        noisy = dict(base, description="A test", autoload={"psr-4": {"App\\": "src/"}})
        assert content_hash(noisy) == content_hash(base)

    def test_relevant_keys_change_hash(self) -> None:
        base = {"name": "vendor/test", "require": {"symfony/console": "*"}}
        assert content_hash(dict(base, **{"minimum-stability": "dev"})) != content_hash(base)
        assert content_hash(dict(base, extra={"branch-alias": {}})) != content_hash(base)

    def test_config_platform_included(self) -> None:
        base = {"name": "vendor/test"}
        with_platform = dict(base, config={"platform": {"php": "8.1.0"}})
        assert content_hash(with_platform) != content_hash(base)

    def test_other_config_ignored(self) -> None:
        base = {"name": "vendor/test"}
        with_config = dict(base, config={"sort-packages": True})
        assert content_hash(with_config) == content_hash(base)

    def test_hex_shape(self) -> None:
        digest = content_hash({})
        assert len(digest) == 32
        assert digest == digest.lower()
