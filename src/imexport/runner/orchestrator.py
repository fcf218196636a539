"""
Abstract base for spreadsheet importers and exporters.

This module provides the base class concrete im-/exporters extend. It:
- Refuses to start without registered table managers
- Resolves table names and column/field mappings
- Tracks progress across tables and rows and notifies observers
- Drives multi-table runs on a thread pool, one sub-run per table
- Supports cooperative cancellation of tables not yet started
"""

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Union

from ..config import ImExportConfig
from ..core.exceptions import (
    CriticalIOError,
    InvalidStateError,
    MalformedMappingError,
)
from ..core.logging import RunContext, log_with_context
from ..core.types import (
    ErrorKind,
    ImExportErrorReport,
    ImExportWarningReport,
    WarningKind,
)
from ..mapping.bidi import BidiMapping
from ..mapping.name_mapper import NameMapper
from ..progress.observers import ImExportObserver, ObserverHub, get_observer_hub
from ..progress.tracker import ProgressState, ProgressTracker
from ..tables.fields import field_name_to_getter_name, field_name_to_setter_name
from ..tables.manager import TableManager
from ..tables.registry import (
    ERROR_TEXT_NO_TABLE_MANAGER,
    TableManagerRegistry,
    get_table_manager_registry,
)


logger = logging.getLogger(__name__)


PathLike = Union[str, Path]

STATUS_SUCCEEDED = "succeeded"
STATUS_FAILED = "failed"
STATUS_SKIPPED = "skipped"
STATUS_CANCELLED = "cancelled"


@dataclass
class RunSummary:
    """
    Outcome of a multi-table run.

    Attributes:
        run_id: Identifier used in log context
        started_at: When the run started
        ended_at: When the last table finished
        tables_succeeded: Tables processed without error
        tables_failed: Tables whose processing raised
        tables_skipped: Unknown tables and tables with malformed mappings
        tables_cancelled: Tables not started because of a shutdown
        progress: Counters at the end of the run
    """
    run_id: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    tables_succeeded: List[str] = field(default_factory=list)
    tables_failed: List[str] = field(default_factory=list)
    tables_skipped: List[str] = field(default_factory=list)
    tables_cancelled: List[str] = field(default_factory=list)
    progress: Optional[ProgressState] = None

    @property
    def success(self) -> bool:
        return not (self.tables_failed or self.tables_skipped or self.tables_cancelled)


class AbstractImExporter(ABC):
    """
    Base class for importers and exporters.

    Subclasses implement ``process_table`` for a single table and report
    their progress through the protected hooks while iterating rows:

        class CsvImporter(AbstractImExporter):
            def process_table(self, manager, mapping):
                rows = read_rows(manager.table_name())
                self._add_data_sets_to_process(len(rows))
                for row in rows:
                    store(self.map_row(manager, mapping, row))
                    self._finish_data_set_process()
                return len(rows)

    Counters start at zero for every instance; use a new instance per run.
    """

    def __init__(
        self,
        registry: Optional[TableManagerRegistry] = None,
        hub: Optional[ObserverHub] = None,
        config: Optional[ImExportConfig] = None,
    ):
        """
        Initialize the im-/exporter.

        Args:
            registry: Table manager registry (default: process-wide registry)
            hub: Observer hub (default: process-wide hub)
            config: Framework configuration (default: built-in defaults only)

        Raises:
            InvalidStateError: If the registry holds no table manager
        """
        self.registry = registry if registry is not None else get_table_manager_registry()
        if self.registry.is_empty():
            raise InvalidStateError(ERROR_TEXT_NO_TABLE_MANAGER)

        self.hub = hub if hub is not None else get_observer_hub()
        if config is None:
            config = ImExportConfig(use_dotenv=False, use_env=False)
        self.config = config
        self.name_mapper = NameMapper(
            self.registry,
            indent=self.config.get("mapping.indent", 2),
        )
        self._progress = ProgressTracker(publish=self.hub.publish_progress)
        self._shutdown_event = threading.Event()
        self._warned_columns: Set[Tuple[str, str]] = set()
        self._warned_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def add_observer(self, observer: ImExportObserver) -> bool:
        return self.hub.register(observer)

    def remove_observer(self, observer: ImExportObserver) -> bool:
        return self.hub.unregister(observer)

    # ------------------------------------------------------------------
    # Tables and mappings
    # ------------------------------------------------------------------

    def search_table_manager(self, table_name: str) -> Optional[TableManager]:
        """Find the manager for a table name, ignoring case."""
        return self.registry.lookup(table_name)

    def load_mapping(self, mapping_file_path: PathLike) -> BidiMapping:
        """Load a column/field mapping from a mapping file."""
        return self.name_mapper.load_mapping(mapping_file_path)

    def generate_clean_mapping_file(self, file_path: PathLike, table_name: str) -> None:
        """Write a mapping file mapping every field of a table to itself."""
        self.name_mapper.generate_clean_mapping_file(file_path, table_name)

    field_name_to_getter_name = staticmethod(field_name_to_getter_name)
    field_name_to_setter_name = staticmethod(field_name_to_setter_name)

    # ------------------------------------------------------------------
    # Progress hooks
    # ------------------------------------------------------------------

    @property
    def progress(self) -> ProgressState:
        """A consistent snapshot of the progress counters."""
        return self._progress.snapshot()

    @property
    def percentage(self) -> float:
        return self._progress.percentage

    def _add_data_sets_to_process(self, count: int) -> None:
        self._progress.add_data_sets_to_process(count)

    def _add_processed_data_sets(self, count: int) -> float:
        return self._progress.add_processed_data_sets(count)

    def _finish_data_set_process(self) -> float:
        """Count one processed data set and publish the new percentage."""
        return self._progress.finish_data_set_process()

    def _finish_sub_run(self) -> None:
        self._progress.finish_sub_run()

    def _set_sub_runs(self, count: int) -> None:
        self._progress.set_sub_runs(count)

    def _calculate_progress(self) -> float:
        """
        Calculate and publish the progress percentage.

        Uses the number of sub-runs, where each sub-run is a table, so the
        result covers the complete im-/export.
        """
        return self._progress.calculate_progress()

    def _update_progress(self) -> float:
        """Publish the last percentage again."""
        return self._progress.republish()

    def _post_warning(self, warning: ImExportWarningReport) -> None:
        log_with_context(logger, logging.WARNING, warning.message, kind=warning.kind.value)
        self.hub.publish_warning(warning)

    def _post_error(self, error: ImExportErrorReport) -> None:
        log_with_context(logger, logging.ERROR, error.message, kind=error.kind.value)
        self.hub.publish_error(error)

    # ------------------------------------------------------------------
    # Row helpers
    # ------------------------------------------------------------------

    def map_row(
        self,
        manager: TableManager,
        mapping: BidiMapping,
        row: Dict[str, Any],
        record: Any = None,
    ) -> Any:
        """
        Fill a record from a column-keyed row.

        Args:
            manager: Manager of the row's table
            mapping: Column to field mapping for the table
            row: Column name to cell value
            record: Record to fill (default: a new record from the manager)

        Returns:
            The filled record
        """
        if record is None:
            record = manager.create_record()
        table_name = manager.table_name()

        for column, value in row.items():
            field_name = mapping.column_to_field(column)
            descriptor = manager.get_field(field_name) if field_name is not None else None
            if descriptor is None:
                self._warn_unmapped_column(column, table_name)
                continue
            try:
                descriptor.write(record, value)
            except Exception as e:
                self._post_error(ImExportErrorReport(
                    ErrorKind.FIELD_ACCESS_FAILED, (descriptor.name, table_name), e
                ))
        return record

    def record_to_row(self, manager: TableManager, mapping: BidiMapping, record: Any) -> Dict[str, Any]:
        """Read a record into a column-keyed row, in field order."""
        table_name = manager.table_name()
        row: Dict[str, Any] = {}

        for descriptor in manager.fields():
            column = mapping.field_to_column(descriptor.name)
            if column is None:
                continue
            try:
                row[column] = descriptor.read(record)
            except Exception as e:
                self._post_error(ImExportErrorReport(
                    ErrorKind.FIELD_ACCESS_FAILED, (descriptor.name, table_name), e
                ))
        return row

    def _warn_unmapped_column(self, column: str, table_name: str) -> None:
        key = (table_name, column)
        with self._warned_lock:
            if key in self._warned_columns:
                return
            self._warned_columns.add(key)
        self._post_warning(ImExportWarningReport(WarningKind.COLUMN_NOT_MAPPED, (column, table_name)))

    # ------------------------------------------------------------------
    # Multi-table runs
    # ------------------------------------------------------------------

    @abstractmethod
    def process_table(self, manager: TableManager, mapping: BidiMapping) -> Optional[int]:
        """
        Import or export one table.

        Implementations announce their data sets with
        ``_add_data_sets_to_process`` and count each finished one with
        ``_finish_data_set_process``.

        Returns:
            Optionally, the number of data sets handled; 0 raises an
            empty-table warning
        """
        pass

    def run_sub_runs(
        self,
        table_names: Sequence[str],
        mapping_paths: Optional[Dict[str, PathLike]] = None,
        run_id: Optional[str] = None,
    ) -> RunSummary:
        """
        Import or export several tables, one sub-run per table.

        Tables run on ``runner.max_workers`` threads. Failures of a single
        table are reported to observers and don't stop the others; only a
        ``CriticalIOError`` aborts the run.

        Args:
            table_names: Tables to process
            mapping_paths: Mapping file per table name; tables without one use
                ``<mapping dir>/<table>.json`` if present, else the identity mapping
            run_id: Optional run identifier (auto-generated if not provided)

        Returns:
            RunSummary with per-table outcomes
        """
        if run_id is None:
            run_id = str(uuid.uuid4())
        mapping_paths = mapping_paths or {}
        table_names = list(table_names)

        summary = RunSummary(run_id=run_id, started_at=datetime.now(timezone.utc))
        max_workers = min(self.config.max_workers, max(len(table_names), 1))

        with RunContext(run_id=run_id):
            log_with_context(
                logger, logging.INFO,
                f"Starting run over {len(table_names)} tables with {max_workers} workers",
            )
            self._set_sub_runs(len(table_names))

            with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="imexport-worker") as executor:
                futures = [
                    executor.submit(self._run_table, run_id, table_name, mapping_paths)
                    for table_name in table_names
                ]
                try:
                    for table_name, future in zip(table_names, futures):
                        status = future.result()
                        self._record_status(summary, table_name, status)
                except CriticalIOError:
                    self.shutdown()
                    raise

            self._calculate_progress()
            summary.ended_at = datetime.now(timezone.utc)
            summary.progress = self.progress
            log_with_context(
                logger, logging.INFO,
                f"Run complete: succeeded={len(summary.tables_succeeded)}, "
                f"failed={len(summary.tables_failed)}, skipped={len(summary.tables_skipped)}, "
                f"cancelled={len(summary.tables_cancelled)}",
            )
        return summary

    @staticmethod
    def _record_status(summary: RunSummary, table_name: str, status: str) -> None:
        if status == STATUS_SUCCEEDED:
            summary.tables_succeeded.append(table_name)
        elif status == STATUS_FAILED:
            summary.tables_failed.append(table_name)
        elif status == STATUS_CANCELLED:
            summary.tables_cancelled.append(table_name)
        else:
            summary.tables_skipped.append(table_name)

    def _run_table(self, run_id: str, table_name: str, mapping_paths: Dict[str, PathLike]) -> str:
        """Process one table inside a worker thread and return its status."""
        worker_id = threading.current_thread().name
        with RunContext(run_id=run_id, table_name=table_name, worker_id=worker_id):
            try:
                return self._process_sub_run(table_name, mapping_paths)
            finally:
                self._finish_sub_run()

    def _process_sub_run(self, table_name: str, mapping_paths: Dict[str, PathLike]) -> str:
        if self._shutdown_event.is_set():
            self._post_warning(ImExportWarningReport(WarningKind.SUB_RUN_CANCELLED, (table_name,)))
            return STATUS_CANCELLED

        manager = self.search_table_manager(table_name)
        if manager is None:
            self._post_error(ImExportErrorReport(ErrorKind.TABLE_NOT_FOUND, (table_name,)))
            return STATUS_SKIPPED

        mapping_path = self._mapping_path_for(manager, table_name, mapping_paths)
        if mapping_path is not None and not Path(mapping_path).is_file():
            self._post_error(ImExportErrorReport(ErrorKind.MAPPING_FILE_NOT_FOUND, (str(mapping_path),)))
            return STATUS_SKIPPED

        try:
            mapping = self.name_mapper.resolve_mapping(manager, mapping_path)
        except MalformedMappingError as e:
            self._post_error(e.report)
            return STATUS_SKIPPED

        for warning in self.name_mapper.validate_mapping(mapping, manager):
            self._post_warning(warning)

        log_with_context(logger, logging.DEBUG, f"Processing table {manager.table_name()}")
        try:
            handled = self.process_table(manager, mapping)
        except CriticalIOError:
            raise
        except Exception as e:
            logger.error(f"Processing table {table_name} failed", exc_info=True)
            self._post_error(ImExportErrorReport(ErrorKind.SUB_RUN_FAILED, (table_name, e), e))
            return STATUS_FAILED

        if handled == 0:
            self._post_warning(ImExportWarningReport(WarningKind.EMPTY_TABLE, (manager.table_name(),)))
        return STATUS_SUCCEEDED

    def _mapping_path_for(
        self,
        manager: TableManager,
        table_name: str,
        mapping_paths: Dict[str, PathLike],
    ) -> Optional[PathLike]:
        """Pick the explicit mapping file, else the table's file in the mapping directory."""
        for key in (table_name, manager.table_name()):
            if key in mapping_paths:
                return mapping_paths[key]

        mapping_dir = self.config.mapping_dir
        if mapping_dir is not None:
            candidate = mapping_dir / f"{manager.table_name()}.json"
            if candidate.is_file():
                return candidate
        return None

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def shutdown(self) -> None:
        """Request cancellation; tables not yet started are skipped."""
        logger.info("Shutdown requested, remaining tables will be cancelled")
        self._shutdown_event.set()

    @property
    def is_shutting_down(self) -> bool:
        return self._shutdown_event.is_set()
