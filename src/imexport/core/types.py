"""
Structured warning and error values published to observers.

Each kind carries a message template; reports bind a kind to its template
arguments so observers can render or inspect them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class ErrorKind(str, Enum):
    """Kinds of errors reported during an im-/export run."""
    MAPPING_NO_VALID_JSON_FILE = "mapping_no_valid_json_file"
    MAPPING_FILE_NOT_FOUND = "mapping_file_not_found"
    TABLE_NOT_FOUND = "table_not_found"
    SUB_RUN_FAILED = "sub_run_failed"
    FIELD_ACCESS_FAILED = "field_access_failed"

    @property
    def message_template(self) -> str:
        return _ERROR_TEMPLATES[self]


class WarningKind(str, Enum):
    """Kinds of warnings reported during an im-/export run."""
    COLUMN_NOT_MAPPED = "column_not_mapped"
    FIELD_NOT_MAPPED = "field_not_mapped"
    UNKNOWN_MAPPED_FIELD = "unknown_mapped_field"
    EMPTY_TABLE = "empty_table"
    SUB_RUN_CANCELLED = "sub_run_cancelled"

    @property
    def message_template(self) -> str:
        return _WARNING_TEMPLATES[self]


_ERROR_TEMPLATES: Dict[ErrorKind, str] = {
    ErrorKind.MAPPING_NO_VALID_JSON_FILE: "The mapping file is not a valid JSON mapping file: {0}",
    ErrorKind.MAPPING_FILE_NOT_FOUND: "The mapping file \"{0}\" could not be found.",
    ErrorKind.TABLE_NOT_FOUND: "The table with the name \"{0}\" doesn't exist for im- or export.",
    ErrorKind.SUB_RUN_FAILED: "The im-/export of table \"{0}\" failed: {1}",
    ErrorKind.FIELD_ACCESS_FAILED: "The field \"{0}\" of table \"{1}\" could not be accessed.",
}

_WARNING_TEMPLATES: Dict[WarningKind, str] = {
    WarningKind.COLUMN_NOT_MAPPED: "The column \"{0}\" of table \"{1}\" has no mapped field and is ignored.",
    WarningKind.FIELD_NOT_MAPPED: "The field \"{0}\" of table \"{1}\" is not mapped to any column.",
    WarningKind.UNKNOWN_MAPPED_FIELD: "The mapping of table \"{1}\" references the unknown field \"{0}\".",
    WarningKind.EMPTY_TABLE: "The table \"{0}\" contains no data sets.",
    WarningKind.SUB_RUN_CANCELLED: "The im-/export of table \"{0}\" was cancelled before it started.",
}


@dataclass(frozen=True)
class ImExportErrorReport:
    """
    An error observers are notified about.

    Attributes:
        kind: What went wrong
        args: Values for the kind's message template
        cause: The exception that triggered the error, if any
    """
    kind: ErrorKind
    args: Tuple[Any, ...] = ()
    cause: Optional[BaseException] = field(default=None, compare=False)

    @property
    def message(self) -> str:
        """The message template filled with the report arguments."""
        return self.kind.message_template.format(*self.args)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "cause": repr(self.cause) if self.cause is not None else None,
        }


@dataclass(frozen=True)
class ImExportWarningReport:
    """A warning observers are notified about."""
    kind: WarningKind
    args: Tuple[Any, ...] = ()

    @property
    def message(self) -> str:
        return self.kind.message_template.format(*self.args)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message}
