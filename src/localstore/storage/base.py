"""
Storage contract shared by every backend.

The cache only ever calls ``get`` and ``set``. Backends report their own
failures as StorageError subclasses; a missing key is not a failure and
returns None.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Synchronous string key-value store."""

    def get(self, key: str) -> str | None:
        """Return the value stored under key, or None if absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...
