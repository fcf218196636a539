"""
Table manager interface and a dataclass-backed implementation.
"""

import dataclasses
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional, Sequence, Tuple, Type

from ..core.exceptions import InvalidArgumentError
from .fields import FieldDescriptor


class TableManager(ABC):
    """
    Abstract base class for table managers.

    A table manager binds one record type to its table name and to the
    ordered set of fields that can be mapped onto spreadsheet columns.
    """

    @abstractmethod
    def table_name(self) -> str:
        """Return the name of the managed table."""
        pass

    @abstractmethod
    def fields(self) -> Tuple[FieldDescriptor, ...]:
        """Return the mappable fields in column order, unique by name."""
        pass

    def create_record(self) -> Any:
        """Create an empty record of the managed type."""
        raise NotImplementedError(f"{type(self).__name__} can't create records")

    def get_field(self, name: str) -> Optional[FieldDescriptor]:
        """Get a field descriptor by field name."""
        for descriptor in self.fields():
            if descriptor.name == name:
                return descriptor
        return None

    def field_names(self) -> Tuple[str, ...]:
        return tuple(descriptor.name for descriptor in self.fields())

    def matches(self, table_name: str) -> bool:
        """Check if this manager handles the given table name (case-insensitive)."""
        if not isinstance(table_name, str):
            return False
        return self.table_name().casefold() == table_name.casefold()


class RecordTableManager(TableManager):
    """
    Table manager for a record class.

    The table name is the simple name of the record type. Fields are taken
    from the given descriptors or names; without them the record type must
    be a dataclass and its fields are used in declaration order.

    Example:
        >>> @dataclass
        ... class Person:
        ...     name: str = ""
        ...     age: int = 0
        >>> manager = RecordTableManager(Person)
        >>> manager.table_name()
        'Person'
        >>> manager.field_names()
        ('name', 'age')
    """

    def __init__(
        self,
        record_type: Type,
        fields: Optional[Iterable[Any]] = None,
        factory: Optional[Callable[[], Any]] = None,
    ):
        """
        Initialize the manager.

        Args:
            record_type: The managed record class
            fields: Field descriptors or field names (optional for dataclasses)
            factory: Callable creating an empty record (default: ``record_type()``)
        """
        if record_type is None:
            raise InvalidArgumentError("The record type of a table manager can't be None.")
        self.record_type = record_type
        self.factory = factory or record_type
        self._fields = self._build_fields(record_type, fields)

    @staticmethod
    def _build_fields(record_type: Type, fields: Optional[Iterable[Any]]) -> Tuple[FieldDescriptor, ...]:
        if fields is None:
            if not dataclasses.is_dataclass(record_type):
                raise InvalidArgumentError(
                    f"Fields must be given for {record_type.__name__}, it is not a dataclass."
                )
            fields = [f.name for f in dataclasses.fields(record_type)]

        descriptors = []
        seen = set()
        for item in fields:
            descriptor = item if isinstance(item, FieldDescriptor) else FieldDescriptor(item)
            if descriptor.name in seen:
                raise InvalidArgumentError(
                    f"Duplicate field \"{descriptor.name}\" for table {record_type.__name__}."
                )
            seen.add(descriptor.name)
            descriptors.append(descriptor)
        return tuple(descriptors)

    def table_name(self) -> str:
        return self.record_type.__name__

    def fields(self) -> Tuple[FieldDescriptor, ...]:
        return self._fields

    def create_record(self) -> Any:
        """Create an empty record of the managed type."""
        return self.factory()

    def to_row(self, record: Any, field_names: Optional[Sequence[str]] = None) -> dict:
        """Read the mapped fields of a record into a field-name keyed dict."""
        wanted = set(field_names) if field_names is not None else None
        return {
            descriptor.name: descriptor.read(record)
            for descriptor in self._fields
            if wanted is None or descriptor.name in wanted
        }

    def __repr__(self) -> str:
        return f"RecordTableManager({self.record_type.__name__}, fields={list(self.field_names())})"
