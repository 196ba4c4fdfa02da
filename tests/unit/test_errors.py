"""
Unit tests for error hierarchy.

Tests cover:
- Base LocalStoreError behavior
- Query errors naming the operator
- Record errors with table context
- Storage errors
- Error serialization
"""

import pytest

from localstore.errors import (
    ERROR_QUERY_INVALID_SCOPE,
    ERROR_QUERY_UNKNOWN_OPERATOR,
    ERROR_RECORD_ALREADY_PERSISTED,
    ERROR_RECORD_NOT_FOUND,
    ERROR_RECORD_NOT_PERSISTED,
    ERROR_STORAGE_CONNECTION,
    ERROR_STORAGE_CORRUPT,
    InvalidScopeError,
    LocalStoreError,
    QueryError,
    RecordAlreadyPersistedError,
    RecordError,
    RecordNotFoundError,
    RecordNotPersistedError,
    StorageConnectionError,
    StorageCorruptError,
    StorageError,
    StorageWriteError,
    UnknownOperatorError,
)


class TestLocalStoreError:
    """Tests for base LocalStoreError."""

    def test_basic_error(self) -> None:
        """Create a basic error with message."""
        err = LocalStoreError(message="Something went wrong", code=9999)
        assert err.message == "Something went wrong"
        assert err.code == 9999
        assert err.suggestion is None
        assert err.context == {}

    def test_str_includes_code_and_suggestion(self) -> None:
        """String form shows the code, message and suggestion."""
        err = LocalStoreError(message="Failed", code=1, suggestion="Try again")
        assert str(err) == "[E1] Failed\nSuggestion: Try again"

    def test_can_be_raised_and_caught(self) -> None:
        """Errors behave as exceptions."""
        with pytest.raises(LocalStoreError):
            raise LocalStoreError(message="boom")

    def test_to_dict(self) -> None:
        """Serialization includes type, code and context."""
        data = UnknownOperatorError(operator="$bogus").to_dict()
        assert data["error_type"] == "UnknownOperatorError"
        assert data["code"] == ERROR_QUERY_UNKNOWN_OPERATOR
        assert data["context"]["operator"] == "$bogus"


class TestQueryErrors:
    """Tests for scope evaluation errors."""

    def test_unknown_operator_names_key(self) -> None:
        """The message names the offending key."""
        err = UnknownOperatorError(operator="$bogus")
        assert "$bogus" in err.message
        assert err.code == ERROR_QUERY_UNKNOWN_OPERATOR
        assert err.suggestion is not None
        assert isinstance(err, QueryError)

    def test_invalid_scope(self) -> None:
        """Invalid scope carries operator and reason."""
        err = InvalidScopeError(operator="$filter", reason="expected a callable")
        assert err.code == ERROR_QUERY_INVALID_SCOPE
        assert "$filter" in err.message
        assert err.context["reason"] == "expected a callable"


class TestRecordErrors:
    """Tests for persistence protocol errors."""

    def test_not_found(self) -> None:
        """Not-found names table and identifier."""
        err = RecordNotFoundError(table="users", identifier="id", value=7)
        assert err.code == ERROR_RECORD_NOT_FOUND
        assert "users" in err.message
        assert "id=7" in err.message
        assert err.context == {"table": "users", "identifier": "id", "value": 7}
        assert isinstance(err, RecordError)

    def test_already_persisted(self) -> None:
        """Insert of an identified record."""
        err = RecordAlreadyPersistedError(table="users", identifier="id", value=1)
        assert err.code == ERROR_RECORD_ALREADY_PERSISTED

    def test_not_persisted(self) -> None:
        """Update of an unidentified record."""
        err = RecordNotPersistedError(table="users", identifier="id")
        assert err.code == ERROR_RECORD_NOT_PERSISTED
        assert "no id" in err.message


class TestStorageErrors:
    """Tests for storage errors."""

    def test_connection_error(self) -> None:
        """Connection error has a suggestion and the path."""
        err = StorageConnectionError(db_path="/nope/x.db", operation="connect")
        assert err.code == ERROR_STORAGE_CONNECTION
        assert err.context["db_path"] == "/nope/x.db"
        assert err.context["operation"] == "connect"
        assert err.suggestion

    def test_write_error(self) -> None:
        """Write error keeps the underlying message."""
        err = StorageWriteError(operation="set", underlying_error="disk full")
        assert "disk full" in err.message
        assert isinstance(err, StorageError)

    def test_corrupt_error(self) -> None:
        """Corrupt error names the key."""
        err = StorageCorruptError(key="users", operation="load", underlying_error="bad json")
        assert err.code == ERROR_STORAGE_CORRUPT
        assert "'users'" in err.message
        assert err.context["key"] == "users"
