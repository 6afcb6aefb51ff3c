"""Repository collaborators supplying candidates to the pool builder."""

from lockwright.repository.base import ArrayRepository, Repository
from lockwright.repository.json_repository import JsonRepository
from lockwright.repository.platform import PlatformRepository

__all__ = [
    "ArrayRepository",
    "JsonRepository",
    "PlatformRepository",
    "Repository",
]
