"""
Local storage connector for localstore.

The connector is the object a model layer talks to. It offers the read
pipeline (all/first/last/count) and the persistence protocol
(create_table/save/delete) over a StorageCache.

Read pipeline:
    1. Load the table mirror (reads storage only the first time)
    2. Filter by the model's default scope
    3. Order by the model's default order, or by identifier ascending
    4. Apply the skip/limit window

Every public operation is a coroutine. Nothing here awaits real I/O, since
the store is local and synchronous, but callers get the same awaitable
interface a networked backend would offer.
"""

from typing import Any

import structlog

from localstore.cache import StorageCache
from localstore.errors import RecordNotPersistedError
from localstore.model import StoredModel
from localstore.query import QueryEvaluator, order_records, paginate
from localstore.schema import ConnectorConfig, Order, Record, SortDirection
from localstore.storage.base import KeyValueStore

logger = structlog.get_logger()


def resolve_order(model: type[StoredModel]) -> Order:
    """
    The order a model's reads are sorted by.

    None means nothing was configured and falls back to the identifier
    ascending; an explicit empty mapping means no sorting at all.
    """
    if model.default_order is None:
        return {model.identifier: SortDirection.ASC.value}
    return model.default_order


class LocalStorageConnector:
    """
    Async CRUD and query adapter over a key-value store.

    Usage:
        connector = LocalStorageConnector(MemoryStorage(), ConnectorConfig(prefix="app."))
        await connector.create_table(User)
        await connector.save(User(name="foo"))
        rows = await connector.all(User.scope({"name": "foo"}))

    Attributes:
        cache: The table mirrors and mutation primitives
    """

    def __init__(self, storage: KeyValueStore, config: ConnectorConfig | None = None) -> None:
        self.cache = StorageCache(storage, config)

    @property
    def config(self) -> ConnectorConfig:
        return self.cache.config

    def storage_key(self, model: type[StoredModel]) -> str:
        return self.cache.storage_key(model.table_name)

    # =========================================================================
    # Read Operations
    # =========================================================================

    def _query(self, model: type[StoredModel]) -> list[Record]:
        entry = self.cache.load(model.table_name, model.identifier)
        result = QueryEvaluator(model.identifier).filter(entry.records, model.default_scope)
        result = order_records(result, resolve_order(model))
        result = paginate(result, model.skip_count, model.limit_count)
        return [dict(record) for record in result]

    async def all(self, model: type[StoredModel]) -> list[Record]:
        """
        Get every record of a model's table that its scope and window select.

        Args:
            model: Model class providing table, scope, order and window

        Returns:
            Copies of the matching records, ordered and paginated
        """
        return self._query(model)

    async def first(self, model: type[StoredModel]) -> Record | None:
        """Get the first record of ``all``, or None."""
        result = self._query(model)
        return result[0] if result else None

    async def last(self, model: type[StoredModel]) -> Record | None:
        """Get the last record of ``all``, or None."""
        result = self._query(model)
        return result[-1] if result else None

    async def count(self, model: type[StoredModel]) -> int:
        """Count the records ``all`` would return."""
        return len(self._query(model))

    async def find(self, model: type[StoredModel], value: Any) -> Record | None:
        """Get the stored record with the given identifier, ignoring scopes."""
        record = self.cache.find(model.table_name, model.identifier, value)
        return dict(record) if record is not None else None

    # =========================================================================
    # Write Operations
    # =========================================================================

    async def create_table(self, model: type[StoredModel]) -> None:
        """Reset the model's table to empty, discarding existing records."""
        self.cache.create_table(model.table_name)

    async def save(self, record: StoredModel) -> StoredModel:
        """Insert a new record or update a persisted one."""
        if record.is_new:
            return await self.insert(record)
        return await self.update(record)

    async def insert(self, record: StoredModel) -> StoredModel:
        """
        Store a new record.

        The assigned identifier is written onto the record itself.

        Returns:
            The same record, now carrying its identifier
        """
        model = type(record)
        new_id = self.cache.insert(model.table_name, model.identifier, record.database_attributes)
        setattr(record, model.identifier, new_id)
        return record

    async def update(self, record: StoredModel) -> StoredModel:
        """
        Replace the stored copy of a persisted record.

        Raises:
            RecordNotPersistedError: If the record has no identifier
            RecordNotFoundError: If the identifier is not stored
        """
        model = type(record)
        value = getattr(record, model.identifier, None)
        if value is None:
            raise RecordNotPersistedError(table=model.table_name, identifier=model.identifier)

        attributes = record.database_attributes
        attributes[model.identifier] = value
        self.cache.update(model.table_name, model.identifier, attributes)
        return record

    async def delete(self, record: StoredModel) -> StoredModel | None:
        """
        Remove a record from its table.

        Returns:
            The record, or None if it was never persisted
        """
        model = type(record)
        if record.is_new:
            logger.debug("delete of unsaved record ignored", table=model.table_name)
            return None

        value = getattr(record, model.identifier)
        self.cache.remove(model.table_name, model.identifier, value)
        return record
