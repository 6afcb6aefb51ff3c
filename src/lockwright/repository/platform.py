"""Platform repository: the interpreter and its extensions as packages.

Platform pseudo-packages (``php``, ``ext-json``, ``lib-icu``...) take part in
resolution like any other package, but their versions come from the target
environment rather than from a package index. The environment is described
by a plain ``name -> version`` mapping (the manifest's ``config.platform``
section, or CLI overrides); detecting it is an external concern.
"""

from __future__ import annotations

import logging
from typing import Mapping

from lockwright.exceptions import InvalidVersionFormat
from lockwright.package import Candidate, is_platform_package
from lockwright.repository.base import ArrayRepository
from lockwright.semver import Version

logger = logging.getLogger(__name__)


class PlatformRepository(ArrayRepository):
    """Repository holding one candidate per declared platform package."""

    def __init__(self, platform: Mapping[str, str] | None = None) -> None:
        super().__init__(name="platform")
        for name, version_text in (platform or {}).items():
            if not is_platform_package(name):
                raise ValueError(f"{name!r} is not a platform package name")
            if version_text is False:
                # config.platform uses false to hide a package
                continue
            try:
                version = Version.parse(version_text)
            except InvalidVersionFormat as exc:
                raise exc.for_package(name) from None
            self.add(Candidate(name=name, version=version, pretty_version=version_text))
        logger.debug("Platform repository with %d package(s)", len(self))
