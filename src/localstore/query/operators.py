"""
Scope operators and the value predicates behind them.

Every special key a scope may contain is a member of Operator. Lookup goes
through Operator.parse, so an unrecognized key fails with
UnknownOperatorError before anything is evaluated.
"""

import operator
from enum import Enum
from typing import Any, Callable, Mapping

from localstore.errors import UnknownOperatorError

# Keys with this prefix are operators; all others are field constraints
SPECIAL_PREFIX = "$"


class Operator(str, Enum):
    """Closed set of scope operators."""

    AND = "$and"
    OR = "$or"
    NOT = "$not"
    NULL = "$null"
    NOT_NULL = "$notNull"
    IN = "$in"
    NOT_IN = "$notIn"
    BETWEEN = "$between"
    NOT_BETWEEN = "$notBetween"
    EQ = "$eq"
    LT = "$lt"
    LTE = "$lte"
    GT = "$gt"
    GTE = "$gte"
    FILTER = "$filter"

    @classmethod
    def parse(cls, key: str) -> "Operator":
        """
        Resolve a special key to its operator.

        Raises:
            UnknownOperatorError: If key is not one of the operators
        """
        try:
            return cls(key)
        except ValueError as e:
            raise UnknownOperatorError(operator=key) from e


def is_special(key: Any) -> bool:
    """Whether a scope key is an operator key."""
    return isinstance(key, str) and key.startswith(SPECIAL_PREFIX)


def matches(value: Any, expected: Any) -> bool:
    """
    Field-equality match used for simple scope keys.

    Mappings match partially: every expected key must match, extra keys in
    value are ignored. A missing field matches only None.
    """
    if isinstance(expected, Mapping):
        if not isinstance(value, Mapping):
            return False
        return all(matches(value.get(k), v) for k, v in expected.items())
    return value == expected


def _ordered(compare: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    """Wrap a comparison so None or incomparable operands never satisfy it."""

    def predicate(value: Any, operand: Any) -> bool:
        if value is None or operand is None:
            return False
        try:
            return bool(compare(value, operand))
        except TypeError:
            return False

    return predicate


less_than = _ordered(operator.lt)
less_or_equal = _ordered(operator.le)
greater_than = _ordered(operator.gt)
greater_or_equal = _ordered(operator.ge)


def in_range(value: Any, start: Any, end: Any) -> bool:
    """
    Half-open range check ``start <= value < end``.

    Bounds given in descending order are swapped first.
    """
    if value is None or start is None or end is None:
        return False
    try:
        if start > end:
            start, end = end, start
        return bool(start <= value < end)
    except TypeError:
        return False
