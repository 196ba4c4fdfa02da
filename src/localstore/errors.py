"""
Exception hierarchy for localstore.

All localstore exceptions inherit from LocalStoreError, allowing callers to
catch every library-specific failure with a single except clause.

Exception Categories:
    - QueryError: Scope expression could not be evaluated
    - RecordError: Persistence protocol violated (insert/update of wrong state)
    - StorageError: Key-value store or serialized table failure

Design Principles:
    - All errors have error codes for programmatic handling
    - All errors include context (table, operator, identifier where applicable)
    - Errors are designed to be both human-readable and machine-parseable
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Query errors: 1xxx
ERROR_QUERY_UNKNOWN_OPERATOR = 1001
ERROR_QUERY_INVALID_SCOPE = 1002

# Record errors: 2xxx
ERROR_RECORD_NOT_FOUND = 2001
ERROR_RECORD_ALREADY_PERSISTED = 2002
ERROR_RECORD_NOT_PERSISTED = 2003

# Storage errors: 3xxx
ERROR_STORAGE_CONNECTION = 3001
ERROR_STORAGE_WRITE = 3002
ERROR_STORAGE_READ = 3003
ERROR_STORAGE_CORRUPT = 3004


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class LocalStoreError(Exception):
    """
    Base exception for all localstore errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Query Errors
# =============================================================================


@dataclass
class QueryError(LocalStoreError):
    """
    Base class for scope evaluation errors.

    Attributes:
        operator: The special key being evaluated, if any
    """

    operator: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["operator"] = self.operator


@dataclass
class UnknownOperatorError(QueryError):
    """Raised when a scope contains a special key that is not an operator."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Unknown operator `{self.operator}`"
        if self.code == 0:
            self.code = ERROR_QUERY_UNKNOWN_OPERATOR
        if not self.suggestion:
            self.suggestion = (
                "Use one of $and, $or, $not, $null, $notNull, $in, $notIn, "
                "$between, $notBetween, $eq, $lt, $lte, $gt, $gte, $filter"
            )
        super().__post_init__()


@dataclass
class InvalidScopeError(QueryError):
    """Raised when an operator receives a value of the wrong shape."""

    reason: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid value for `{self.operator}`: {self.reason}"
        if self.code == 0:
            self.code = ERROR_QUERY_INVALID_SCOPE
        super().__post_init__()
        self.context["reason"] = self.reason


# =============================================================================
# Record Errors
# =============================================================================


@dataclass
class RecordError(LocalStoreError):
    """
    Base class for persistence protocol errors.

    Attributes:
        table: Logical table name
        identifier: Name of the identifier field
        value: Identifier value involved, if any
    """

    table: str = ""
    identifier: str = ""
    value: Any = None

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context.update({
            "table": self.table,
            "identifier": self.identifier,
            "value": self.value,
        })


@dataclass
class RecordNotFoundError(RecordError):
    """Raised when updating or deleting a record whose identifier is not stored."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"No record in {self.table} with {self.identifier}={self.value!r}"
        if self.code == 0:
            self.code = ERROR_RECORD_NOT_FOUND
        if not self.suggestion:
            self.suggestion = "The record may have been deleted; save it as a new record instead"
        super().__post_init__()


@dataclass
class RecordAlreadyPersistedError(RecordError):
    """Raised when inserting a record that already carries an identifier."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = (
                f"Cannot insert into {self.table}: "
                f"record already has {self.identifier}={self.value!r}"
            )
        if self.code == 0:
            self.code = ERROR_RECORD_ALREADY_PERSISTED
        super().__post_init__()


@dataclass
class RecordNotPersistedError(RecordError):
    """Raised when updating a record that has no identifier yet."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Cannot update {self.table}: record has no {self.identifier}"
        if self.code == 0:
            self.code = ERROR_RECORD_NOT_PERSISTED
        super().__post_init__()


# =============================================================================
# Storage Errors
# =============================================================================


@dataclass
class StorageError(LocalStoreError):
    """
    Base class for key-value storage errors.

    Attributes:
        operation: The operation that failed (e.g., "get", "set")
    """

    operation: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["operation"] = self.operation


@dataclass
class StorageConnectionError(StorageError):
    """Raised when the storage backend cannot be opened."""

    db_path: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to open storage: {self.db_path}"
        if self.code == 0:
            self.code = ERROR_STORAGE_CONNECTION
        if not self.suggestion:
            self.suggestion = "Check that the database path is valid and writable"
        super().__post_init__()
        self.context["db_path"] = self.db_path


@dataclass
class StorageWriteError(StorageError):
    """Raised when a write operation fails."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Storage write failed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_STORAGE_WRITE
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


@dataclass
class StorageReadError(StorageError):
    """Raised when a read operation fails."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Storage read failed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_STORAGE_READ
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


@dataclass
class StorageCorruptError(StorageError):
    """Raised when a stored table is not a JSON array of objects."""

    key: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Stored table at {self.key!r} is malformed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_STORAGE_CORRUPT
        if not self.suggestion:
            self.suggestion = "Recreate the table or restore the key from a backup"
        super().__post_init__()
        self.context.update({
            "key": self.key,
            "underlying_error": self.underlying_error,
        })
