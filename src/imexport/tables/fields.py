"""
Field descriptors for mappable record fields.

A descriptor names one field of a record type and knows how to read and write
it. Accessor method names follow the bean convention: ``importField`` has the
getter ``getImportField`` and the setter ``setImportField``.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from ..core.exceptions import InvalidArgumentError


GETTER_METHOD_START = "get"
SETTER_METHOD_START = "set"


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Immutable description of one mappable field.

    Attributes:
        name: Field name (non-empty)
        getter: Optional accessor ``getter(record) -> value``; defaults to
            reading the attribute named ``name``
        setter: Optional accessor ``setter(record, value)``; defaults to
            setting the attribute named ``name``
    """
    name: str
    getter: Optional[Callable[[Any], Any]] = field(default=None, compare=False, repr=False)
    setter: Optional[Callable[[Any, Any], None]] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise InvalidArgumentError("A field name must be a non-empty string.")

    @property
    def getter_name(self) -> str:
        return field_name_to_getter_name(self.name)

    @property
    def setter_name(self) -> str:
        return field_name_to_setter_name(self.name)

    def read(self, record: Any) -> Any:
        """Read this field's value from a record."""
        if self.getter is not None:
            return self.getter(record)
        return getattr(record, self.name)

    def write(self, record: Any, value: Any) -> None:
        """Write a value into this field of a record."""
        if self.setter is not None:
            self.setter(record, value)
        else:
            setattr(record, self.name, value)


def _field_name_to_method_name(field_or_name: Union[FieldDescriptor, str], method_prefix: str) -> str:
    """
    Convert a field name to a method name with the given prefix.

    Example: field name "importField" and prefix "get" give "getImportField".
    """
    if isinstance(field_or_name, FieldDescriptor):
        field_name = field_or_name.name
    else:
        field_name = field_or_name
    if not field_name:
        raise InvalidArgumentError("A field name must be a non-empty string.")
    return method_prefix + field_name[0].upper() + field_name[1:]


def field_name_to_getter_name(field_or_name: Union[FieldDescriptor, str]) -> str:
    """Generate the getter method name for a field."""
    return _field_name_to_method_name(field_or_name, GETTER_METHOD_START)


def field_name_to_setter_name(field_or_name: Union[FieldDescriptor, str]) -> str:
    """Generate the setter method name for a field."""
    return _field_name_to_method_name(field_or_name, SETTER_METHOD_START)
