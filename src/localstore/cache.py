"""
Storage cache for localstore.

The cache keeps an in-memory mirror of every table it has touched. A table
is read from the key-value store the first time it is needed and never again
(until evicted or recreated); every mutation is applied to the mirror and
written straight back, so the store and the mirror never disagree for a
single cache.

Two caches pointed at the same store are not coordinated: each keeps its own
mirror and the last one to persist wins.
"""

import json
from dataclasses import dataclass, field
from typing import Any

import structlog

from localstore.errors import (
    RecordAlreadyPersistedError,
    RecordNotFoundError,
    RecordNotPersistedError,
    StorageCorruptError,
)
from localstore.schema import ConnectorConfig, Record
from localstore.storage.base import KeyValueStore

logger = structlog.get_logger()


@dataclass
class TableEntry:
    """
    In-memory mirror of one table.

    Attributes:
        records: Stored records in insertion order
        next_id: Next identifier to assign; greater than any stored identifier
    """

    records: list[Record] = field(default_factory=list)
    next_id: int = 1


def next_identifier(records: list[Record], identifier: str) -> int:
    """Return one more than the largest integer identifier, or 1."""
    ids = [
        record[identifier]
        for record in records
        if isinstance(record.get(identifier), int) and not isinstance(record.get(identifier), bool)
    ]
    return max(ids) + 1 if ids else 1


class StorageCache:
    """
    Lazily loaded, write-through mirror of tables in a key-value store.

    Usage:
        cache = StorageCache(MemoryStorage(), ConnectorConfig(prefix="app."))
        new_id = cache.insert("users", "id", {"name": "foo"})
        cache.load("users", "id").records

    Attributes:
        storage: The backing key-value store
        config: Key namespace configuration
        _entries: Mirrors keyed by storage key
    """

    def __init__(self, storage: KeyValueStore, config: ConnectorConfig | None = None) -> None:
        self.storage = storage
        self.config = config or ConnectorConfig()
        self._entries: dict[str, TableEntry] = {}

    def storage_key(self, table: str) -> str:
        """Compute the storage key of a table."""
        return f"{self.config.prefix}{table}{self.config.postfix}"

    def is_loaded(self, table: str) -> bool:
        """Whether the table is currently mirrored in memory."""
        return self.storage_key(table) in self._entries

    # =========================================================================
    # Loading and Persisting
    # =========================================================================

    def load(self, table: str, identifier: str) -> TableEntry:
        """
        Return the mirror of a table, reading it from storage on first use.

        Args:
            table: Logical table name
            identifier: Name of the identifier field, used to seed next_id

        Returns:
            The table's TableEntry

        Raises:
            StorageCorruptError: If the stored value is not a JSON array of objects
        """
        key = self.storage_key(table)
        entry = self._entries.get(key)
        if entry is not None:
            return entry

        raw = self.storage.get(key)
        records = self._parse(key, raw) if raw else []
        entry = TableEntry(records=records, next_id=next_identifier(records, identifier))
        self._entries[key] = entry
        logger.debug(
            "table loaded",
            key=key,
            records=len(records),
            next_id=entry.next_id,
        )
        return entry

    def _parse(self, key: str, raw: str) -> list[Record]:
        """Decode a stored table value."""
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageCorruptError(
                key=key,
                operation="load",
                underlying_error=str(e),
            ) from e

        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise StorageCorruptError(
                key=key,
                operation="load",
                underlying_error="expected a JSON array of objects",
            )
        return data

    def persist(self, table: str) -> None:
        """
        Write the mirror of a table back to storage; next_id is not stored.

        A table that was never loaded has no mirror, and storage already
        holds its records, so nothing is written.
        """
        key = self.storage_key(table)
        entry = self._entries.get(key)
        if entry is None:
            return
        self.storage.set(key, json.dumps(entry.records))
        logger.debug("table persisted", key=key, records=len(entry.records))

    def create_table(self, table: str) -> None:
        """Reset a table to empty, discarding whatever was stored before."""
        key = self.storage_key(table)
        self.storage.set(key, "[]")
        self._entries[key] = TableEntry()
        logger.debug("table created", key=key)

    def evict(self, table: str) -> None:
        """Forget the mirror so the next load rereads storage."""
        self._entries.pop(self.storage_key(table), None)

    # =========================================================================
    # Mutations
    # =========================================================================

    def insert(self, table: str, identifier: str, attributes: Record) -> int:
        """
        Assign the next identifier to a new record, store it and persist.

        Args:
            table: Logical table name
            identifier: Name of the identifier field
            attributes: Record attributes without an identifier

        Returns:
            The assigned identifier
        """
        if attributes.get(identifier) is not None:
            raise RecordAlreadyPersistedError(
                table=table,
                identifier=identifier,
                value=attributes[identifier],
            )

        entry = self.load(table, identifier)
        new_id = entry.next_id
        entry.next_id += 1
        entry.records.append({**attributes, identifier: new_id})
        self.persist(table)
        logger.debug("record inserted", table=table, id=new_id)
        return new_id

    def update(self, table: str, identifier: str, attributes: Record) -> None:
        """
        Replace the stored record with the same identifier and persist.

        Raises:
            RecordNotPersistedError: If attributes carry no identifier
            RecordNotFoundError: If no stored record has that identifier
        """
        value = attributes.get(identifier)
        if value is None:
            raise RecordNotPersistedError(table=table, identifier=identifier)

        entry = self.load(table, identifier)
        index = self._index_of(entry, identifier, value)
        if index is None:
            raise RecordNotFoundError(table=table, identifier=identifier, value=value)

        entry.records[index] = dict(attributes)
        self.persist(table)
        logger.debug("record updated", table=table, id=value)

    def remove(self, table: str, identifier: str, value: Any) -> int:
        """
        Remove every record whose identifier equals value and persist.

        Returns:
            Number of records removed
        """
        entry = self.load(table, identifier)
        before = len(entry.records)
        entry.records[:] = [r for r in entry.records if r.get(identifier) != value]
        removed = before - len(entry.records)
        self.persist(table)
        logger.debug("record removed", table=table, id=value, removed=removed)
        return removed

    def find(self, table: str, identifier: str, value: Any) -> Record | None:
        """Return the stored record with the given identifier, or None."""
        entry = self.load(table, identifier)
        index = self._index_of(entry, identifier, value)
        return entry.records[index] if index is not None else None

    @staticmethod
    def _index_of(entry: TableEntry, identifier: str, value: Any) -> int | None:
        for index, record in enumerate(entry.records):
            if record.get(identifier) == value:
                return index
        return None
