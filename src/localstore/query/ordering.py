"""Ordering and pagination of filtered records."""

from typing import Any, Sequence

from localstore.errors import InvalidScopeError
from localstore.schema import Order, Record, SortDirection


def _sort_key(value: Any) -> tuple[bool, int, str, Any]:
    # Missing values sort after present ones (before them when descending).
    # Present values group as numbers, strings, then other types by name;
    # only values of one group are compared with each other.
    if value is None:
        return (True, 0, "", 0)
    if isinstance(value, (int, float)):
        return (False, 0, "", value)
    if isinstance(value, str):
        return (False, 1, "", value)
    return (False, 2, type(value).__name__, repr(value))


def order_records(records: Sequence[Record], order: Order | None) -> list[Record]:
    """
    Sort records by an order specification.

    The sort is stable and applies keys right to left, so the first key of
    ``order`` is the primary one. An empty or None order keeps input order.

    Args:
        records: Records to sort
        order: Mapping of field name to "asc" or "desc"

    Returns:
        A new, sorted list
    """
    result = list(records)
    if not order:
        return result

    for name, direction in reversed(list(order.items())):
        try:
            descending = SortDirection(str(direction).lower()) is SortDirection.DESC
        except ValueError as e:
            raise InvalidScopeError(
                operator="order",
                reason=f"direction for {name!r} must be 'asc' or 'desc', got {direction!r}",
            ) from e
        result.sort(key=lambda record: _sort_key(record.get(name)), reverse=descending)
    return result


def paginate(records: Sequence[Record], skip: int = 0, limit: int | None = None) -> list[Record]:
    """Drop the first ``skip`` records and keep at most ``limit`` of the rest."""
    start = max(skip or 0, 0)
    if limit is None:
        return list(records[start:])
    return list(records[start:start + max(limit, 0)])
