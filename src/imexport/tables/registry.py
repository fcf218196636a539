"""
Table Manager Registry - Catalog of the record types available for im-/export.

Managers are registered once by the embedding application before any
im-/export runs. Lookups resolve a table name to its manager, ignoring case.
"""

import logging
import threading
from typing import List, Optional

from ..core.exceptions import InvalidArgumentError, InvalidStateError
from .manager import TableManager


logger = logging.getLogger(__name__)


ERROR_TEXT_NO_TABLE_MANAGER = "There are no table managers!"
ERROR_TEXT_TABLE_MANAGER_IS_NONE = "The given table manager is None. The table manager can't be None!"
ERROR_TEXT_NOT_A_TABLE_MANAGER = "Only table managers can be registered, got {0!r}."


class TableManagerRegistry:
    """
    Registry for table managers.

    Registration and lookup are safe to call from several threads: mutations
    hold a lock and lookups scan a snapshot taken under that lock.

    The same manager may be added more than once; each addition is kept and
    ``remove`` drops one occurrence at a time.

    Example:
        >>> registry = TableManagerRegistry()
        >>> registry.add(RecordTableManager(Person))
        True
        >>> registry.lookup("person").table_name()
        'Person'
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._managers: List[TableManager] = []
        self._lock = threading.Lock()

    def add(self, manager: TableManager) -> bool:
        """
        Add a table manager.

        Args:
            manager: The table manager to add

        Returns:
            True if the registry changed

        Raises:
            InvalidArgumentError: If manager is None or not a TableManager
        """
        if manager is None:
            raise InvalidArgumentError(ERROR_TEXT_TABLE_MANAGER_IS_NONE)
        if not isinstance(manager, TableManager):
            raise InvalidArgumentError(ERROR_TEXT_NOT_A_TABLE_MANAGER.format(manager))
        table_name = manager.table_name()
        with self._lock:
            self._managers.append(manager)
        logger.debug(f"Registered table manager: {table_name}")
        return True

    def remove(self, manager: TableManager) -> bool:
        """
        Remove a table manager by identity.

        Returns:
            True if a manager was removed
        """
        with self._lock:
            for index, registered in enumerate(self._managers):
                if registered is manager:
                    del self._managers[index]
                    break
            else:
                return False
        logger.debug(f"Removed table manager: {manager.table_name()}")
        return True

    def lookup(self, table_name: str) -> Optional[TableManager]:
        """
        Find the table manager for a table name, ignoring case.

        Returns the first match in enumeration order of a snapshot of the
        registry. With concurrent registration that order is not guaranteed
        to be insertion order.

        Args:
            table_name: The table name to search for

        Returns:
            The matching manager, or None if no manager handles the table

        Raises:
            InvalidStateError: If no table manager is registered
            InvalidArgumentError: If table_name is None or not a string
        """
        managers = self.managers()
        if not managers:
            raise InvalidStateError(ERROR_TEXT_NO_TABLE_MANAGER)
        if table_name is None:
            raise InvalidArgumentError("The table name to look up can't be None.")
        if not isinstance(table_name, str):
            raise InvalidArgumentError(f"The table name to look up must be a string, got {table_name!r}.")

        for manager in managers:
            if manager.matches(table_name):
                return manager
        return None

    def managers(self) -> List[TableManager]:
        """Return a snapshot of the registered managers."""
        with self._lock:
            return list(self._managers)

    def table_names(self) -> List[str]:
        """List the table names of all registered managers."""
        return [manager.table_name() for manager in self.managers()]

    def is_empty(self) -> bool:
        with self._lock:
            return not self._managers

    def clear(self) -> None:
        """Remove all table managers."""
        with self._lock:
            self._managers.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._managers)


# Global registry instance
_registry: Optional[TableManagerRegistry] = None
_registry_lock = threading.Lock()


def get_table_manager_registry() -> TableManagerRegistry:
    """Get the process-wide table manager registry."""
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = TableManagerRegistry()
        return _registry


def add_table_manager(manager: TableManager) -> bool:
    """
    Add a table manager to the process-wide registry.

    Convenience function that uses the global registry.
    """
    return get_table_manager_registry().add(manager)


def remove_table_manager(manager: TableManager) -> bool:
    """
    Remove a table manager from the process-wide registry.

    Convenience function that uses the global registry.
    """
    return get_table_manager_registry().remove(manager)
