"""Tests for the repository collaborators.

Verifies:
    - ArrayRepository answers case-insensitively, in insertion order.
    - JsonRepository accepts both packages.json layouts.
    - Unreadable documents raise RepositoryUnavailable, never an empty list.
    - PlatformRepository exposes platform packages with their versions.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from lockwright.exceptions import InvalidVersionFormat, RepositoryUnavailable
from lockwright.repository import (
    ArrayRepository,
    JsonRepository,
    PlatformRepository,
    Repository,
)
from tests.solver.helpers import make_candidate


class TestArrayRepository:
    """Tests for the in-memory repository."""

    def test_fetch_in_insertion_order(self) -> None:
        a1 = make_candidate("acme/a", "1.0.0")
        a2 = make_candidate("acme/a", "2.0.0")
        repo = ArrayRepository([a1, a2])
        assert repo.fetch_candidates("acme/a") == [a1, a2]

    def test_fetch_case_insensitive(self) -> None:
        a = make_candidate("Acme/A", "1.0.0")
        repo = ArrayRepository([a])
        assert repo.fetch_candidates("ACME/a") == [a]

    def test_unknown_name_is_empty(self) -> None:
        assert ArrayRepository().fetch_candidates("nobody/knows") == []

    def test_providers_of(self) -> None:
        impl = make_candidate("acme/logger", "1.0.0", provide={"psr/log-implementation": "1.0.0"})
        fork = make_candidate("acme/fork", "1.0.0", replace={"acme/a": "1.0.0"})
        repo = ArrayRepository([impl, fork, make_candidate("acme/a", "1.0.0")])
        assert repo.providers_of("psr/log-implementation") == [impl]
        assert repo.providers_of("acme/a") == [fork]

    def test_len_and_candidates(self) -> None:
        repo = ArrayRepository([make_candidate("a/a", "1.0.0"), make_candidate("b/b", "1.0.0")])
        assert len(repo) == 2
        assert [c.name for c in repo.candidates()] == ["a/a", "b/b"]

    def test_satisfies_protocol(self) -> None:
        assert isinstance(ArrayRepository(), Repository)


class TestJsonRepository:
    """Tests for packages.json documents."""

    def test_mapping_layout(self) -> None:
        repo = JsonRepository.from_dict({
            "packages": {
                "acme/a": {
                    "1.0.0": {"version": "1.0.0"},
                    "1.1.0": {"version": "1.1.0", "require": {"acme/b": "^1.0"}},
                },
            },
        })
        found = repo.fetch_candidates("acme/a")
        assert [c.pretty_version for c in found] == ["1.0.0", "1.1.0"]
        assert found[1].requires[0].target == "acme/b"

    def test_list_layout(self) -> None:
        repo = JsonRepository.from_dict({
            "packages": [
                {"name": "acme/a", "version": "1.0.0"},
                {"name": "acme/b", "version": "2.0.0"},
            ],
        })
        assert len(repo) == 2
        assert repo.fetch_candidates("acme/b")[0].pretty_version == "2.0.0"

    def test_list_per_name_layout(self) -> None:
        repo = JsonRepository.from_dict({
            "packages": {"acme/a": [{"version": "1.0.0"}, {"version": "2.0.0"}]},
        })
        assert [c.name for c in repo.fetch_candidates("acme/a")] == ["acme/a", "acme/a"]

    def test_from_path(self, tmp_path: Path) -> None:
        path = tmp_path / "packages.json"
        path.write_text(json.dumps({"packages": [{"name": "acme/a", "version": "1.0.0"}]}))
        repo = JsonRepository.from_path(path)
        assert repo.name == str(path)
        assert len(repo.fetch_candidates("acme/a")) == 1

    def test_missing_file_unavailable(self, tmp_path: Path) -> None:
        with pytest.raises(RepositoryUnavailable) as excinfo:
            JsonRepository.from_path(tmp_path / "missing.json")
        assert str(tmp_path / "missing.json") in str(excinfo.value)

    def test_invalid_json_unavailable(self, tmp_path: Path) -> None:
        path = tmp_path / "packages.json"
        path.write_text("{not json")
        with pytest.raises(RepositoryUnavailable):
            JsonRepository.from_path(path)

    def test_bad_packages_shape_unavailable(self) -> None:
        with pytest.raises(RepositoryUnavailable):
            JsonRepository.from_dict({"packages": "nope"})

    def test_bad_version_propagates(self) -> None:
        with pytest.raises(InvalidVersionFormat):
            JsonRepository.from_dict({"packages": [{"name": "acme/a", "version": "one"}]})


class TestPlatformRepository:
    """Tests for platform pseudo-packages."""

    def test_candidates(self) -> None:
        repo = PlatformRepository({"php": "8.2.0", "ext-json": "8.2.0"})
        php = repo.fetch_candidates("php")[0]
        assert php.pretty_version == "8.2.0"
        assert php.is_platform
        assert len(repo) == 2

    def test_false_hides_package(self) -> None:
        repo = PlatformRepository({"php": "8.2.0", "ext-xdebug": False})  # type: ignore[dict-item]
        assert repo.fetch_candidates("ext-xdebug") == []

    def test_non_platform_name_rejected(self) -> None:
        with pytest.raises(ValueError, match="acme/a"):
            PlatformRepository({"acme/a": "1.0.0"})

    def test_bad_version_names_package(self) -> None:
        with pytest.raises(InvalidVersionFormat) as excinfo:
            PlatformRepository({"php": "eight"})
        assert excinfo.value.package == "php"

    def test_empty(self) -> None:
        assert len(PlatformRepository()) == 0
