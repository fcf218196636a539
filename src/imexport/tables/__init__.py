"""
Table managers: field descriptors, the manager interface, and the registry.
"""

from .fields import (
    FieldDescriptor,
    field_name_to_getter_name,
    field_name_to_setter_name,
)
from .manager import TableManager, RecordTableManager
from .registry import (
    TableManagerRegistry,
    get_table_manager_registry,
    add_table_manager,
    remove_table_manager,
)

__all__ = [
    "FieldDescriptor",
    "field_name_to_getter_name",
    "field_name_to_setter_name",
    "TableManager",
    "RecordTableManager",
    "TableManagerRegistry",
    "get_table_manager_registry",
    "add_table_manager",
    "remove_table_manager",
]
