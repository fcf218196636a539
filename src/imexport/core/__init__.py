"""
Core subpackage for the im-/export framework.

Contains exceptions, structured warning/error values, and logging utilities.
"""

from .exceptions import (
    ImExportError,
    InvalidArgumentError,
    InvalidStateError,
    MalformedMappingError,
    CriticalIOError,
)
from .types import (
    ErrorKind,
    WarningKind,
    ImExportErrorReport,
    ImExportWarningReport,
)

__all__ = [
    # Exceptions
    "ImExportError",
    "InvalidArgumentError",
    "InvalidStateError",
    "MalformedMappingError",
    "CriticalIOError",
    # Types
    "ErrorKind",
    "WarningKind",
    "ImExportErrorReport",
    "ImExportWarningReport",
]
