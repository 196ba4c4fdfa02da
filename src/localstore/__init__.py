"""
localstore - Key-value storage connector for object-relational model layers.

localstore persists each logical table as a JSON array under one key of a
synchronous key-value store (browser-style local storage, an in-memory dict,
or a SQLite file) and answers queries against it in memory.
It provides:
- Lazy, write-through table mirrors with auto-increment identifiers
- A declarative scope language ($and, $or, $in, $between, $lt, ...)
- Ordering and skip/limit pagination
- An async connector API for model layers

Example usage:
    $ localstore create-table users
    $ localstore insert users '{"name": "foo", "age": 18}'
    $ localstore query users --where '{"$gt": {"age": 17}}' --order age:desc
"""

from localstore.connector import LocalStorageConnector
from localstore.errors import LocalStoreError
from localstore.log import configure_library_defaults
from localstore.model import Model, model_for
from localstore.schema import ConnectorConfig
from localstore.storage import MemoryStorage, SQLiteStorage

__version__ = "0.1.0"
__author__ = "localstore Contributors"

configure_library_defaults()

__all__ = [
    "ConnectorConfig",
    "LocalStorageConnector",
    "LocalStoreError",
    "MemoryStorage",
    "Model",
    "SQLiteStorage",
    "__author__",
    "__version__",
    "model_for",
]
