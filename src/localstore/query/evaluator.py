"""
Query evaluator for localstore.

Evaluates a scope expression against an in-memory list of records.

How it works:
    1. A scope that is not a mapping leaves the records untouched
    2. Every `$` key is resolved to an Operator (unknown keys fail here)
    3. Simple keys are matched first, all of them ANDed
    4. Operators narrow the result one after another, in expression order

Multi-part operators ($and, $or, $in, $lt, ...) evaluate each part against
the same candidates and combine the parts by identifier. Combination always
walks the candidate list, so a result is a subsequence of its input in the
same order, whatever the operator.
"""

from typing import Any, Callable, Iterable, Mapping, Sequence

from localstore.errors import InvalidScopeError
from localstore.query.operators import (
    Operator,
    greater_or_equal,
    greater_than,
    in_range,
    is_special,
    less_or_equal,
    less_than,
    matches,
)
from localstore.schema import Record

Handler = Callable[[list[Record], Any], list[Record]]
FieldPredicate = Callable[[Any, Any], bool]


class QueryEvaluator:
    """
    Filters records of one table by scope expressions.

    Usage:
        evaluator = QueryEvaluator("id")
        evaluator.filter(records, {"name": "foo", "$gt": {"age": 20}})

    Attributes:
        identifier: Name of the field records are joined on
    """

    def __init__(self, identifier: str = "id") -> None:
        self.identifier = identifier
        self._handlers: dict[Operator, Handler] = {
            Operator.AND: self._and,
            Operator.OR: self._or,
            Operator.NOT: self._not,
            Operator.NULL: self._null,
            Operator.NOT_NULL: self._not_null,
            Operator.IN: self._in,
            Operator.NOT_IN: self._not_in,
            Operator.BETWEEN: self._between,
            Operator.NOT_BETWEEN: self._not_between,
            Operator.EQ: self._eq,
            Operator.LT: self._comparison(Operator.LT, less_than),
            Operator.LTE: self._comparison(Operator.LTE, less_or_equal),
            Operator.GT: self._comparison(Operator.GT, greater_than),
            Operator.GTE: self._comparison(Operator.GTE, greater_or_equal),
            Operator.FILTER: self._filter,
        }

    def filter(self, records: Iterable[Record], scope: Any) -> list[Record]:
        """
        Return the records satisfying scope, in their original order.

        Args:
            records: Candidate records
            scope: Scope expression; anything but a mapping matches everything

        Returns:
            Matching records

        Raises:
            UnknownOperatorError: If scope contains an unrecognized `$` key
            InvalidScopeError: If an operator value has the wrong shape
        """
        result = list(records)
        if not isinstance(scope, Mapping):
            return result

        operators = [(Operator.parse(key), value) for key, value in scope.items() if is_special(key)]
        simple = {key: value for key, value in scope.items() if not is_special(key)}

        if simple:
            result = [record for record in result if matches(record, simple)]
        for op, value in operators:
            result = self._handlers[op](result, value)
        return result

    # =========================================================================
    # Identifier-based combination
    # =========================================================================

    def _ids(self, records: Iterable[Record]) -> set[Any]:
        return {record.get(self.identifier) for record in records}

    def _intersect(self, records: list[Record], parts: Sequence[list[Record]]) -> list[Record]:
        """Records present (by identifier) in every part; no parts keeps all."""
        keep = [self._ids(part) for part in parts]
        return [r for r in records if all(r.get(self.identifier) in ids for ids in keep)]

    def _union(self, records: list[Record], parts: Sequence[list[Record]]) -> list[Record]:
        """Records present (by identifier) in any part."""
        keep = set().union(*(self._ids(part) for part in parts))
        return [r for r in records if r.get(self.identifier) in keep]

    # =========================================================================
    # Combinators
    # =========================================================================

    def _scopes(self, op: Operator, value: Any) -> list[Any]:
        if not isinstance(value, (list, tuple)):
            raise InvalidScopeError(operator=op.value, reason="expected a list of scopes")
        return list(value)

    def _and(self, records: list[Record], value: Any) -> list[Record]:
        parts = [self.filter(records, scope) for scope in self._scopes(Operator.AND, value)]
        return self._intersect(records, parts)

    def _or(self, records: list[Record], value: Any) -> list[Record]:
        parts = [self.filter(records, scope) for scope in self._scopes(Operator.OR, value)]
        return self._union(records, parts)

    def _not(self, records: list[Record], value: Any) -> list[Record]:
        excluded = self._ids(self.filter(records, value))
        return [r for r in records if r.get(self.identifier) not in excluded]

    # =========================================================================
    # Per-field operators
    # =========================================================================

    def _field_name(self, op: Operator, value: Any) -> str:
        if not isinstance(value, str):
            raise InvalidScopeError(operator=op.value, reason="expected a field name")
        return value

    def _null(self, records: list[Record], value: Any) -> list[Record]:
        name = self._field_name(Operator.NULL, value)
        return [r for r in records if r.get(name) is None]

    def _not_null(self, records: list[Record], value: Any) -> list[Record]:
        name = self._field_name(Operator.NOT_NULL, value)
        return [r for r in records if r.get(name) is not None]

    def _fields(self, op: Operator, value: Any) -> Mapping[str, Any]:
        if not isinstance(value, Mapping):
            raise InvalidScopeError(operator=op.value, reason="expected a mapping of field to operand")
        return value

    def _apply_fields(
        self,
        op: Operator,
        records: list[Record],
        value: Any,
        predicate: FieldPredicate,
    ) -> list[Record]:
        parts = [
            [r for r in records if predicate(r.get(name), operand)]
            for name, operand in self._fields(op, value).items()
        ]
        return self._intersect(records, parts)

    def _comparison(self, op: Operator, predicate: FieldPredicate) -> Handler:
        def handler(records: list[Record], value: Any) -> list[Record]:
            return self._apply_fields(op, records, value, predicate)

        return handler

    def _members(self, op: Operator, value: Any) -> Mapping[str, Any]:
        fields = self._fields(op, value)
        for name, operand in fields.items():
            if not isinstance(operand, (list, tuple, set, frozenset)):
                raise InvalidScopeError(operator=op.value, reason=f"expected a list of values for {name!r}")
        return fields

    def _in(self, records: list[Record], value: Any) -> list[Record]:
        fields = self._members(Operator.IN, value)
        return self._apply_fields(Operator.IN, records, fields, lambda v, values: v in values)

    def _not_in(self, records: list[Record], value: Any) -> list[Record]:
        fields = self._members(Operator.NOT_IN, value)
        return self._apply_fields(Operator.NOT_IN, records, fields, lambda v, values: v not in values)

    def _bounds(self, op: Operator, value: Any) -> Mapping[str, Any]:
        fields = self._fields(op, value)
        for name, operand in fields.items():
            if not isinstance(operand, (list, tuple)) or len(operand) != 2:
                raise InvalidScopeError(operator=op.value, reason=f"expected [low, high] for {name!r}")
        return fields

    def _between(self, records: list[Record], value: Any) -> list[Record]:
        fields = self._bounds(Operator.BETWEEN, value)
        return self._apply_fields(
            Operator.BETWEEN, records, fields, lambda v, bounds: in_range(v, bounds[0], bounds[1])
        )

    def _not_between(self, records: list[Record], value: Any) -> list[Record]:
        fields = self._bounds(Operator.NOT_BETWEEN, value)
        return self._apply_fields(
            Operator.NOT_BETWEEN, records, fields, lambda v, bounds: not in_range(v, bounds[0], bounds[1])
        )

    def _eq(self, records: list[Record], value: Any) -> list[Record]:
        return self.filter(records, self._fields(Operator.EQ, value))

    def _filter(self, records: list[Record], value: Any) -> list[Record]:
        if not callable(value):
            raise InvalidScopeError(operator=Operator.FILTER.value, reason="expected a callable")
        return [r for r in records if value(r)]


def filter_records(records: Iterable[Record], scope: Any, identifier: str = "id") -> list[Record]:
    """Convenience wrapper: filter records with a one-off evaluator."""
    return QueryEvaluator(identifier).filter(records, scope)
