"""Project and repository builders for CLI tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

PACKAGES: list[dict[str, Any]] = [
    {"name": "vendor/a", "version": "1.0.0", "require": {"vendor/b": "^1.0"}},
    {"name": "vendor/a", "version": "1.1.0", "require": {"vendor/b": "^1.0"}},
    {"name": "vendor/b", "version": "1.0.0"},
    {"name": "vendor/b", "version": "1.2.0"},
    {"name": "vendor/tool", "version": "2.0.0"},
]


def write_json(path: Path, data: Any) -> Path:
    path.write_text(json.dumps(data, indent=4))
    return path


def write_manifest(project_dir: Path, **sections: Any) -> Path:
    """Write composer.json; keyword names use underscores for dashes."""
    data = {"name": "acme/app"}
    data.update({key.replace("_", "-"): value for key, value in sections.items()})
    return write_json(project_dir / "composer.json", data)
