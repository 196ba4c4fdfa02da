"""
Query module for localstore.

This module implements the declarative filter language used by default
scopes, plus the ordering and pagination steps of the read pipeline.

Key concepts:
    - Scope: a mapping of field constraints and `$` operator keys
    - Operator: the closed set of `$` keys ($and, $or, $in, $lt, ...)
    - QueryEvaluator: applies a scope to a record list, joining by identifier
"""

from localstore.query.evaluator import QueryEvaluator, filter_records
from localstore.query.operators import SPECIAL_PREFIX, Operator
from localstore.query.ordering import order_records, paginate

__all__ = [
    "Operator",
    "QueryEvaluator",
    "SPECIAL_PREFIX",
    "filter_records",
    "order_records",
    "paginate",
]
