"""
Integration tests for the CLI.

Each test runs commands against a fresh SQLite file through Typer's
CliRunner and checks the output and the stored data.
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from localstore import __version__
from localstore.cli import app
from localstore.storage import SQLiteStorage

runner = CliRunner()


@pytest.fixture
def db_path(temp_dir: Path) -> Path:
    """Path of the database used by the commands."""
    return temp_dir / "cli.db"


def invoke(db_path: Path, *args: str, config: Path | None = None):
    options = ["--db", str(db_path)]
    if config is not None:
        options += ["--config", str(config)]
    return runner.invoke(app, [*options, *args])


def seed(db_path: Path) -> None:
    assert invoke(db_path, "create-table", "users").exit_code == 0
    for attributes in (
        {"name": "foo", "age": 18},
        {"name": "foo", "age": 21},
        {"name": "bar", "age": 21},
    ):
        assert invoke(db_path, "insert", "users", json.dumps(attributes)).exit_code == 0


def stored(db_path: Path, key: str = "users") -> list[dict]:
    with SQLiteStorage(db_path) as storage:
        return json.loads(storage.get(key) or "null")


class TestVersion:
    """Tests for --version."""

    def test_version(self) -> None:
        """Prints the package version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestWriteCommands:
    """Tests for create-table, insert, update, delete."""

    def test_create_table(self, db_path: Path) -> None:
        """Creates an empty table."""
        result = invoke(db_path, "create-table", "users")
        assert result.exit_code == 0
        assert "Created table" in result.stdout
        assert stored(db_path) == []

    def test_insert_prints_identifier(self, db_path: Path) -> None:
        """Insert prints the assigned identifier."""
        invoke(db_path, "create-table", "users")
        result = invoke(db_path, "insert", "users", '{"name": "foo"}')
        assert result.exit_code == 0
        assert result.stdout.strip() == "1"
        result = invoke(db_path, "insert", "users", '{"name": "bar"}')
        assert result.stdout.strip() == "2"

    def test_insert_invalid_json(self, db_path: Path) -> None:
        """Malformed attributes exit with an error."""
        result = invoke(db_path, "insert", "users", "{name")
        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_insert_requires_object(self, db_path: Path) -> None:
        """Attributes must be a JSON object."""
        result = invoke(db_path, "insert", "users", "[1, 2]")
        assert result.exit_code == 1

    def test_update(self, db_path: Path) -> None:
        """Update replaces the stored record."""
        seed(db_path)
        result = invoke(db_path, "update", "users", "2", '{"name": "baz"}')
        assert result.exit_code == 0
        assert stored(db_path)[1] == {"name": "baz", "id": 2}

    def test_update_missing(self, db_path: Path) -> None:
        """Updating an unknown identifier fails."""
        seed(db_path)
        result = invoke(db_path, "update", "users", "42", '{"name": "ghost"}')
        assert result.exit_code == 1
        assert "E2001" in result.stdout

    def test_delete(self, db_path: Path) -> None:
        """Delete removes the record."""
        seed(db_path)
        result = invoke(db_path, "delete", "users", "1")
        assert result.exit_code == 0
        assert [r["id"] for r in stored(db_path)] == [2, 3]
        assert "Deleted" in result.stdout

    def test_delete_missing(self, db_path: Path) -> None:
        """Deleting an unknown identifier fails and changes nothing."""
        seed(db_path)
        result = invoke(db_path, "delete", "users", "42")
        assert result.exit_code == 1
        assert "E2001" in result.stdout
        assert "Deleted" not in result.stdout
        assert [r["id"] for r in stored(db_path)] == [1, 2, 3]

    def test_config_namespace(self, db_path: Path, temp_dir: Path, sample_config_yaml: str) -> None:
        """The config prefix/postfix is used for keys."""
        config = temp_dir / "config.yaml"
        config.write_text(sample_config_yaml)
        result = invoke(db_path, "create-table", "users", config=config)
        assert result.exit_code == 0
        assert stored(db_path, "test_users_v1") == []
        assert stored(db_path) is None


class TestQueryCommands:
    """Tests for query, count and tables."""

    def test_query_json(self, db_path: Path) -> None:
        """JSON output lists records in identifier order."""
        seed(db_path)
        result = invoke(db_path, "query", "users", "--json")
        assert result.exit_code == 0
        assert [r["id"] for r in json.loads(result.stdout)] == [1, 2, 3]

    def test_query_where_order_limit(self, db_path: Path) -> None:
        """Scope, order and window options are applied."""
        seed(db_path)
        result = invoke(
            db_path,
            "query",
            "users",
            "--where",
            '{"$gt": {"age": 17}}',
            "--order",
            "id:desc",
            "--skip",
            "1",
            "--limit",
            "1",
            "--json",
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout) == [{"name": "foo", "age": 21, "id": 2}]

    def test_query_table_output(self, db_path: Path) -> None:
        """Default output is a table of records."""
        seed(db_path)
        result = invoke(db_path, "query", "users", "--where", '{"name": "bar"}')
        assert result.exit_code == 0
        assert "bar" in result.stdout
        assert "foo" not in result.stdout

    def test_query_no_records(self, db_path: Path) -> None:
        """An empty result says so."""
        invoke(db_path, "create-table", "users")
        result = invoke(db_path, "query", "users")
        assert result.exit_code == 0
        assert "No records found" in result.stdout

    def test_query_unknown_operator(self, db_path: Path) -> None:
        """Unknown operators are reported as errors."""
        seed(db_path)
        result = invoke(db_path, "query", "users", "--where", '{"$bogus": 1}')
        assert result.exit_code == 1
        assert "$bogus" in result.stdout

    def test_query_invalid_order(self, db_path: Path) -> None:
        """Unknown directions are rejected."""
        seed(db_path)
        result = invoke(db_path, "query", "users", "--order", "id:sideways")
        assert result.exit_code == 1

    def test_count(self, db_path: Path) -> None:
        """Count prints the number of matching records."""
        seed(db_path)
        assert invoke(db_path, "count", "users").stdout.strip() == "3"
        result = invoke(db_path, "count", "users", "--where", '{"$in": {"age": [21]}}')
        assert result.stdout.strip() == "2"

    def test_tables(self, db_path: Path) -> None:
        """Tables lists stored keys with record counts."""
        seed(db_path)
        invoke(db_path, "create-table", "posts")
        result = invoke(db_path, "tables")
        assert result.exit_code == 0
        assert "users" in result.stdout
        assert "posts" in result.stdout

    def test_tables_empty(self, db_path: Path) -> None:
        """An empty database has no tables."""
        result = invoke(db_path, "tables")
        assert result.exit_code == 0
        assert "No tables found" in result.stdout
