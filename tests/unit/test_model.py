"""
Unit tests for the Model reference implementation.
"""

from localstore.connector import resolve_order
from localstore.model import Model, model_for


class Person(Model):
    table_name = "people"


class TestModelInstances:
    """Tests for instance behavior."""

    def test_new_until_identified(self) -> None:
        """A record without identifier is new."""
        person = Person(name="foo")
        assert person.is_new
        person.id = 1
        assert not person.is_new

    def test_database_attributes(self) -> None:
        """Attributes include the identifier and are a copy."""
        person = Person(name="foo", age=18)
        attributes = person.database_attributes
        assert attributes == {"id": None, "name": "foo", "age": 18}
        attributes["name"] = "bar"
        assert person.name == "foo"

    def test_build_and_from_record(self) -> None:
        """build creates new records, from_record wraps stored ones."""
        assert Person.build(name="foo").is_new
        stored = Person.from_record({"id": 3, "name": "bar"})
        assert not stored.is_new
        assert stored.name == "bar"

    def test_equality(self) -> None:
        """Records with equal attributes and table are equal."""
        assert Person(id=1, name="a") == Person(id=1, name="a")
        assert Person(id=1, name="a") != Person(id=2, name="a")

    def test_repr(self) -> None:
        """repr shows class and fields."""
        assert repr(Person(name="a")) == "Person(id=None, name='a')"


class TestChainableClassMethods:
    """Tests for derived model classes."""

    def test_defaults(self) -> None:
        """Base settings."""
        assert Person.identifier == "id"
        assert Person.default_scope is None
        assert Person.default_order is None
        assert Person.skip_count == 0
        assert Person.limit_count is None

    def test_chain(self) -> None:
        """Each call derives a subclass carrying one more setting."""
        derived = Person.scope({"name": "foo"}).order({"id": "desc"}).skip(1).limit(2)
        assert issubclass(derived, Person)
        assert derived.table_name == "people"
        assert derived.default_scope == {"name": "foo"}
        assert derived.default_order == {"id": "desc"}
        assert derived.skip_count == 1
        assert derived.limit_count == 2
        assert Person.limit_count is None

    def test_instances_of_derived_class(self) -> None:
        """Derived classes still build records of the same table."""
        record = Person.limit(1)(name="x")
        assert record.table_name == "people"
        assert isinstance(record, Person)


class TestResolveOrder:
    """Tests for the default order decision."""

    def test_unconfigured_orders_by_identifier(self) -> None:
        """None falls back to identifier ascending."""
        assert resolve_order(Person) == {"id": "asc"}

    def test_explicit_empty_means_unsorted(self) -> None:
        """An explicit empty order is kept as no sorting."""
        assert resolve_order(Person.unordered()) == {}

    def test_configured(self) -> None:
        """A configured order is used as is."""
        assert resolve_order(Person.order({"age": "desc"})) == {"age": "desc"}

    def test_custom_identifier(self) -> None:
        """The fallback uses the model's identifier field."""
        assert resolve_order(model_for("items", "key")) == {"key": "asc"}


class TestModelFor:
    """Tests for model_for."""

    def test_builds_class(self) -> None:
        """The class carries all settings."""
        model = model_for("user_accounts", "uid", scope={"a": 1}, order={"uid": "desc"}, skip=2, limit=3)
        assert model.__name__ == "UserAccounts"
        assert model.table_name == "user_accounts"
        assert model.identifier == "uid"
        assert model.default_scope == {"a": 1}
        assert model.skip_count == 2
        assert model.limit_count == 3
        assert model(name="x").is_new
