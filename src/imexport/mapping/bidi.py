"""
Bidirectional column-name/field-name mapping.
"""

from typing import Dict, Iterator, List, Mapping, Optional, Tuple


class BidiMapping:
    """
    Unique mapping between column names and field names.

    Both sides are unique, so lookups work in either direction.

    Example:
        >>> mapping = BidiMapping({"First Name": "firstName"})
        >>> mapping.column_to_field("First Name")
        'firstName'
        >>> mapping.field_to_column("firstName")
        'First Name'
    """

    def __init__(self, column_to_field: Optional[Mapping[str, str]] = None):
        """
        Initialize the mapping.

        Args:
            column_to_field: Column name to field name pairs

        Raises:
            ValueError: If two columns map to the same field
        """
        self._forward: Dict[str, str] = {}
        self._inverse: Dict[str, str] = {}
        for column, field_name in (column_to_field or {}).items():
            if field_name in self._inverse:
                raise ValueError(
                    f"Field \"{field_name}\" is mapped by both "
                    f"\"{self._inverse[field_name]}\" and \"{column}\""
                )
            self._forward[column] = field_name
            self._inverse[field_name] = column

    @classmethod
    def identity(cls, names) -> "BidiMapping":
        """Create a mapping where every column name equals its field name."""
        return cls({name: name for name in names})

    def column_to_field(self, column: str) -> Optional[str]:
        """Get the field name for a column, or None if the column is not mapped."""
        return self._forward.get(column)

    def field_to_column(self, field_name: str) -> Optional[str]:
        """Get the column name for a field, or None if the field is not mapped."""
        return self._inverse.get(field_name)

    def columns(self) -> List[str]:
        return list(self._forward.keys())

    def fields(self) -> List[str]:
        return list(self._inverse.keys())

    def items(self) -> List[Tuple[str, str]]:
        return list(self._forward.items())

    def inverse(self) -> "BidiMapping":
        """Return the mapping with columns and fields swapped."""
        return BidiMapping(self._inverse)

    def to_dict(self) -> Dict[str, str]:
        """Return the column name to field name pairs."""
        return dict(self._forward)

    def __contains__(self, column: str) -> bool:
        return column in self._forward

    def __iter__(self) -> Iterator[str]:
        return iter(self._forward)

    def __len__(self) -> int:
        return len(self._forward)

    def __eq__(self, other) -> bool:
        if isinstance(other, BidiMapping):
            return self._forward == other._forward
        return NotImplemented

    def __repr__(self) -> str:
        return f"BidiMapping({self._forward!r})"
