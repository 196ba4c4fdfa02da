"""In-memory key-value storage."""

from typing import Iterator


class MemoryStorage:
    """
    Dict-backed key-value store.

    Behaves like browser local storage for the lifetime of the object.
    Useful in tests, where the raw serialized values can be inspected
    directly through ``items``.
    """

    def __init__(self, items: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(items or {})

    def get(self, key: str) -> str | None:
        return self.items.get(key)

    def set(self, key: str, value: str) -> None:
        self.items[key] = value

    def keys(self) -> list[str]:
        return sorted(self.items)

    def __contains__(self, key: object) -> bool:
        return key in self.items

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.items)
