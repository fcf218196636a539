"""
Name mapper - resolves spreadsheet column names to record field names.

The correspondence comes either from a mapping file or from naming
convention, where a column is named exactly like its field.

Mapping files are flat JSON objects of the form
``{"column name": "field name", ...}``.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Union

from ..core.exceptions import (
    CriticalIOError,
    InvalidArgumentError,
    MalformedMappingError,
)
from ..core.types import (
    ErrorKind,
    ImExportErrorReport,
    ImExportWarningReport,
    WarningKind,
)
from ..tables.manager import TableManager
from ..tables.registry import TableManagerRegistry, get_table_manager_registry
from .bidi import BidiMapping


logger = logging.getLogger(__name__)


ERROR_TEXT_PATTERN_TABLE_NOT_EXISTS = "The table with the name \"{0}\" doesn't exist for im- or export."
ERROR_TEXT_CRITICAL_BUG = "This error is a critical bug, please report it."
DEFAULT_INDENT = 2

PathLike = Union[str, Path]


class _DuplicateKeyError(ValueError):
    pass


def _reject_duplicate_keys(pairs):
    result = {}
    for key, value in pairs:
        if key in result:
            raise _DuplicateKeyError(f"Duplicate column \"{key}\"")
        result[key] = value
    return result


class NameMapper:
    """
    Resolves column names to field names for registered tables.

    Example:
        >>> mapper = NameMapper(registry)
        >>> mapper.generate_clean_mapping_file("person.json", "Person")
        >>> mapping = mapper.load_mapping("person.json")
        >>> mapping.column_to_field("name")
        'name'
    """

    def __init__(
        self,
        registry: Optional[TableManagerRegistry] = None,
        indent: int = DEFAULT_INDENT,
    ):
        """
        Initialize the mapper.

        Args:
            registry: Registry used to resolve table names (default: process-wide)
            indent: Indentation of generated mapping files
        """
        self.registry = registry if registry is not None else get_table_manager_registry()
        self.indent = indent

    @staticmethod
    def identity_mapping(manager: TableManager) -> BidiMapping:
        """Map every field of a manager to a column of the same name."""
        return BidiMapping.identity(descriptor.name for descriptor in manager.fields())

    def load_mapping(self, file_path: PathLike) -> BidiMapping:
        """
        Load a mapping from a mapping file.

        Args:
            file_path: Path to the mapping file

        Returns:
            The bidirectional mapping

        Raises:
            MalformedMappingError: If the file is not a flat, bijective
                string-to-string JSON object
            CriticalIOError: If the file cannot be found
        """
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                document = json.load(f, object_pairs_hook=_reject_duplicate_keys)
        except FileNotFoundError as e:
            logger.critical(ERROR_TEXT_CRITICAL_BUG, exc_info=True)
            raise CriticalIOError(ERROR_TEXT_CRITICAL_BUG, path=str(file_path)) from e
        except (ValueError, UnicodeDecodeError) as e:
            raise self._malformed(file_path, str(e), e)

        if not isinstance(document, dict):
            raise self._malformed(file_path, "the top level is not a JSON object")

        for column, field_name in document.items():
            if not isinstance(field_name, str):
                raise self._malformed(file_path, f"the value of \"{column}\" is not a string")

        try:
            mapping = BidiMapping(document)
        except ValueError as e:
            raise self._malformed(file_path, str(e), e)

        logger.debug(f"Loaded mapping with {len(mapping)} columns from: {file_path}")
        return mapping

    @staticmethod
    def _malformed(file_path: PathLike, reason: str, cause: Exception = None) -> MalformedMappingError:
        report = ImExportErrorReport(
            ErrorKind.MAPPING_NO_VALID_JSON_FILE, (f"{file_path} ({reason})",), cause
        )
        logger.debug(report.message, exc_info=cause is not None)
        error = MalformedMappingError(report.message, report=report)
        error.__cause__ = cause
        return error

    def generate_clean_mapping_file(self, file_path: PathLike, table_name: str) -> None:
        """
        Write a mapping file mapping every field of a table to itself.

        The generated file is a starting point that users edit to match
        their spreadsheet headers.

        Args:
            file_path: Where to write the mapping file
            table_name: The table to generate the mapping for

        Raises:
            InvalidArgumentError: If no manager handles the table
            OSError: If the file can't be written
        """
        manager = self.registry.lookup(table_name)
        if manager is None:
            raise InvalidArgumentError(ERROR_TEXT_PATTERN_TABLE_NOT_EXISTS.format(table_name))

        mapping = self.identity_mapping(manager)
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(mapping.to_dict(), f, indent=self.indent, ensure_ascii=False)
            f.write("\n")

        logger.info(f"Generated mapping file for {manager.table_name()}: {file_path}")

    def resolve_mapping(self, manager: TableManager, mapping_path: Optional[PathLike] = None) -> BidiMapping:
        """Load the mapping file when given, else fall back to the identity mapping."""
        if mapping_path is None:
            return self.identity_mapping(manager)
        return self.load_mapping(mapping_path)

    @staticmethod
    def validate_mapping(mapping: BidiMapping, manager: TableManager) -> List[ImExportWarningReport]:
        """
        Compare a mapping against the fields of a table manager.

        Returns:
            Warnings for mapped fields the table doesn't have and for table
            fields no column maps to (empty if the mapping covers the table)
        """
        table_name = manager.table_name()
        known = set(manager.field_names())
        warnings = [
            ImExportWarningReport(WarningKind.UNKNOWN_MAPPED_FIELD, (field_name, table_name))
            for field_name in mapping.fields()
            if field_name not in known
        ]
        warnings.extend(
            ImExportWarningReport(WarningKind.FIELD_NOT_MAPPED, (field_name, table_name))
            for field_name in manager.field_names()
            if mapping.field_to_column(field_name) is None
        )
        return warnings
