"""
Key-value storage backends for localstore.

A backend is anything with synchronous ``get(key)`` and ``set(key, value)``
methods over string keys and string values, the same contract as browser
local storage. Each logical table lives under one key as a JSON array.

Backends:
    - MemoryStorage: dict-backed, for tests and embedded use
    - SQLiteStorage: single-file SQLite database, for the CLI and scripts
"""

from localstore.storage.base import KeyValueStore
from localstore.storage.memory import MemoryStorage
from localstore.storage.sqlite import SQLiteStorage

__all__ = [
    "KeyValueStore",
    "MemoryStorage",
    "SQLiteStorage",
]
