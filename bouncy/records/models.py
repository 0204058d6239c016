"""Record models and the Indexable capability."""

from abc import ABC, abstractmethod
from copy import deepcopy
from typing import Any, ClassVar


class Indexable(ABC):
    """Capability interface for anything that can be mirrored into the index.

    Index and type names are resolved per record type so that query builders
    can target them without an instance.
    """

    @property
    @abstractmethod
    def key(self) -> Any:
        """Primary key, or None before the record is first persisted."""
        ...

    @classmethod
    @abstractmethod
    def get_table(cls) -> str:
        """Table (collection) name in the record store."""
        ...

    @classmethod
    @abstractmethod
    def get_index_name(cls, default: str) -> str:
        """Index name, falling back to the configured default."""
        ...

    @classmethod
    @abstractmethod
    def get_type_name(cls) -> str:
        """Document type name."""
        ...

    @classmethod
    @abstractmethod
    def get_mapping_properties(cls) -> dict[str, dict[str, Any]]:
        """Declared mapping properties; empty means index every field."""
        ...

    @abstractmethod
    def get_attributes(self) -> dict[str, Any]:
        """Current field values."""
        ...

    @abstractmethod
    def get_dirty(self) -> dict[str, Any]:
        """Fields changed since the record was last persisted."""
        ...


class Record(Indexable):
    """An application entity backed by a record store.

    Subclasses configure storage and indexing through class attributes:

        class Article(Record):
            table = "articles"
            index_name = "content"
            mapping_properties = {"title": {"type": "text"}}

    Field values are read and written with item access (``article["title"]``).
    Records rebuilt from search hits additionally carry ``is_document``,
    ``document_score``, ``document_version`` and ``highlighted``; none of
    those are stored fields.
    """

    table: ClassVar[str | None] = None
    key_name: ClassVar[str] = "id"
    index_name: ClassVar[str | None] = None
    type_name: ClassVar[str | None] = None
    mapping_properties: ClassVar[dict[str, dict[str, Any]]] = {}

    def __init__(self, attributes: dict[str, Any] | None = None, **fields: Any) -> None:
        self._attributes: dict[str, Any] = {}
        self._original: dict[str, Any] = {}
        self.exists = False

        self.is_document = False
        self.document_score: float | None = None
        self.document_version: int | None = None
        self.highlighted: dict[str, str] = {}

        self.fill({**(attributes or {}), **fields})

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.key_name}={self.key!r}>"

    def __getitem__(self, field: str) -> Any:
        return self._attributes[field]

    def __setitem__(self, field: str, value: Any) -> None:
        self._attributes[field] = value

    def __delitem__(self, field: str) -> None:
        del self._attributes[field]

    def __contains__(self, field: object) -> bool:
        return field in self._attributes

    def get(self, field: str, default: Any = None) -> Any:
        return self._attributes.get(field, default)

    def fill(self, attributes: dict[str, Any]) -> "Record":
        """Assign several fields at once; assigned fields become dirty."""
        self._attributes.update(attributes)
        return self

    @property
    def key(self) -> Any:
        return self._attributes.get(self.key_name)

    @key.setter
    def key(self, value: Any) -> None:
        self._attributes[self.key_name] = value

    @classmethod
    def cast_key(cls, value: str) -> Any:
        """Convert a document id back to the store's key type.

        Numeric ids become ints, matching auto-increment keys; override for
        other key types.
        """
        try:
            return int(value)
        except ValueError:
            return value

    @classmethod
    def get_table(cls) -> str:
        if cls.table:
            return cls.table
        return f"{cls.__name__.lower()}s"

    @classmethod
    def get_index_name(cls, default: str) -> str:
        return cls.index_name or default

    @classmethod
    def get_type_name(cls) -> str:
        return cls.type_name or cls.get_table()

    @classmethod
    def get_mapping_properties(cls) -> dict[str, dict[str, Any]]:
        return dict(cls.mapping_properties)

    def get_attributes(self) -> dict[str, Any]:
        return dict(self._attributes)

    def get_dirty(self) -> dict[str, Any]:
        return {
            field: value
            for field, value in self._attributes.items()
            if field not in self._original or self._original[field] != value
        }

    def is_dirty(self) -> bool:
        return bool(self.get_dirty())

    def sync_original(self) -> None:
        """Mark the current field values as persisted.

        The snapshot is a deep copy so that lists and dicts mutated in place
        still show up as dirty.
        """
        self._original = deepcopy(self._attributes)

    def set_raw_attributes(self, attributes: dict[str, Any], sync: bool = False) -> None:
        """Replace every field value without going through fill()."""
        self._attributes = dict(attributes)
        if sync:
            self.sync_original()

    def to_dict(self) -> dict[str, Any]:
        return self.get_attributes()
