"""
Model contract for localstore.

The connector does not define models; it talks to whatever model layer sits
on top of it through a small contract:

Class side:
    - table_name: logical table name
    - identifier: name of the identifier field
    - default_scope: scope expression applied to every read, or None
    - default_order: order specification, None for "by identifier ascending"
    - skip_count / limit_count: pagination window of reads

Instance side:
    - is_new: True until the record has been inserted
    - database_attributes: flat dict of the values to persist
    - the identifier field, read and written as a plain attribute

Model is a small implementation of that contract with chainable class
methods (``User.scope(...).limit(2)``) for applications that have no model
layer of their own.
"""

from typing import Any, ClassVar, Protocol

from localstore.schema import Order, Record, Scope


class StoredModel(Protocol):
    """Structural type of a record the connector can persist."""

    table_name: ClassVar[str]
    identifier: ClassVar[str]
    default_scope: ClassVar[Scope | None]
    default_order: ClassVar[Order | None]
    skip_count: ClassVar[int]
    limit_count: ClassVar[int | None]

    @property
    def is_new(self) -> bool: ...

    @property
    def database_attributes(self) -> Record: ...


class Model:
    """
    Minimal model base class.

    Subclasses set ``table_name`` (and optionally the other class
    attributes); instances carry their fields as attributes.

    Example:
        class User(Model):
            table_name = "users"

        user = User(name="foo", age=18)
        await connector.save(user)
        user.id  # -> 1
    """

    table_name: ClassVar[str] = ""
    identifier: ClassVar[str] = "id"
    default_scope: ClassVar[Scope | None] = None
    default_order: ClassVar[Order | None] = None
    skip_count: ClassVar[int] = 0
    limit_count: ClassVar[int | None] = None

    def __init__(self, **attributes: Any) -> None:
        self.__dict__[self.identifier] = None
        self.__dict__.update(attributes)

    @classmethod
    def build(cls, **attributes: Any) -> "Model":
        """Create an unsaved instance."""
        return cls(**attributes)

    @classmethod
    def from_record(cls, record: Record) -> "Model":
        """Wrap a stored record in an instance."""
        return cls(**record)

    @property
    def is_new(self) -> bool:
        return getattr(self, self.identifier) is None

    @property
    def database_attributes(self) -> Record:
        return dict(self.__dict__)

    # =========================================================================
    # Chainable class methods
    # =========================================================================

    @classmethod
    def _derive(cls, **overrides: Any) -> type["Model"]:
        return type(cls.__name__, (cls,), overrides)

    @classmethod
    def scope(cls, scope: Scope | None) -> type["Model"]:
        """Derive a model class whose reads are filtered by scope."""
        return cls._derive(default_scope=scope)

    @classmethod
    def order(cls, order: Order | None) -> type["Model"]:
        """Derive a model class whose reads are sorted by order."""
        return cls._derive(default_order=order)

    @classmethod
    def unordered(cls) -> type["Model"]:
        """Derive a model class whose reads keep storage order."""
        return cls._derive(default_order={})

    @classmethod
    def skip(cls, count: int) -> type["Model"]:
        return cls._derive(skip_count=count)

    @classmethod
    def limit(cls, count: int | None) -> type["Model"]:
        return cls._derive(limit_count=count)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Model):
            return NotImplemented
        return (
            self.table_name == other.table_name
            and self.database_attributes == other.database_attributes
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self.__dict__.items())
        return f"{self.__class__.__name__}({fields})"


def model_for(
    table_name: str,
    identifier: str = "id",
    *,
    scope: Scope | None = None,
    order: Order | None = None,
    skip: int = 0,
    limit: int | None = None,
) -> type[Model]:
    """Build a Model subclass for a table without declaring a class."""
    name = "".join(part.capitalize() for part in table_name.replace("-", "_").split("_")) or "Record"
    return type(
        name,
        (Model,),
        {
            "table_name": table_name,
            "identifier": identifier,
            "default_scope": scope,
            "default_order": order,
            "skip_count": skip,
            "limit_count": limit,
        },
    )
