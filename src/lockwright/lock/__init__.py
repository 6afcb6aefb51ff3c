"""composer.lock support: model, fingerprint, staleness and reconciliation.

The package is split into focused submodules:

- ``models``: document constants (key order, readme, hash format).
- ``hashing``: the Composer-compatible ``content_hash``.
- ``lockfile``: the ``LockFile`` class with package access and
  serialization.
- ``operations``: deserialization (``from_dict``, ``from_json``, ``read``),
  validation and diffing.
- ``factory``: ``from_decisions`` for building a lock from a solve.
- ``reconcile``: ``is_stale`` and ``reconcile``.

All public names are re-exported here, so ``from lockwright.lock import
LockFile`` is the only import callers need.
"""

from lockwright.lock.hashing import content_hash
from lockwright.lock.lockfile import LockFile
from lockwright.lock.models import DEFAULT_README, LOCK_FILENAME, MANIFEST_FILENAME

from lockwright.lock import factory as _factory
from lockwright.lock import operations as _ops
from lockwright.lock.reconcile import is_stale, reconcile

LockFile.from_dict = classmethod(_ops._from_dict)
LockFile.from_json = classmethod(_ops._from_json)
LockFile.read = classmethod(_ops._read)
LockFile.validate = _ops._validate
LockFile.diff = _ops._diff
LockFile.from_decisions = classmethod(_factory._from_decisions)

__all__ = [
    "DEFAULT_README",
    "LOCK_FILENAME",
    "LockFile",
    "MANIFEST_FILENAME",
    "content_hash",
    "is_stale",
    "reconcile",
]
