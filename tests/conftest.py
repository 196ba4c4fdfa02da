"""
Pytest configuration and fixtures for localstore tests.

This module provides shared fixtures used across unit and integration tests.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from localstore import LocalStorageConnector, MemoryStorage, Model


class User(Model):
    """Model used throughout the tests."""

    table_name = "User"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def storage() -> MemoryStorage:
    """Empty in-memory key-value store."""
    return MemoryStorage()


@pytest.fixture
def connector(storage: MemoryStorage) -> LocalStorageConnector:
    """Connector over the in-memory store, default namespace."""
    return LocalStorageConnector(storage)


@pytest.fixture
def user_model() -> type[User]:
    """The test User model class."""
    return User


@pytest.fixture
def user_rows() -> list[dict]:
    """Three stored users, as the cache would hold them."""
    return [
        {"id": 1, "name": "foo", "age": 18},
        {"id": 2, "name": "foo", "age": 21},
        {"id": 3, "name": "bar", "age": 21},
    ]


@pytest.fixture
def sample_config_yaml() -> str:
    """Return a connector config YAML for testing."""
    return """
prefix: "test_"
postfix: "_v1"
"""
