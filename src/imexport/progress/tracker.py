"""
Progress tracking for multi-table im-/export runs.

Counters are guarded by one lock per tracker so a percentage is always
computed from a consistent snapshot. Publishing happens after the lock is
released; observers never block counter updates.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from ..core.exceptions import InvalidArgumentError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressState:
    """
    Snapshot of the progress counters.

    Attributes:
        data_sets_to_process: Data sets announced so far
        processed_data_sets: Data sets finished so far
        sub_runs: Number of sub-runs (tables) in the run
        finished_sub_runs: Sub-runs finished so far
    """
    data_sets_to_process: int = 0
    processed_data_sets: int = 0
    sub_runs: int = 0
    finished_sub_runs: int = 0

    @property
    def unfinished_sub_runs(self) -> int:
        """Sub-runs still open; never below 1."""
        return max(self.sub_runs - self.finished_sub_runs, 1)

    @property
    def percentage(self) -> float:
        """
        Overall progress in percent.

        Progress is divided by the sub-runs still open so that finishing one
        table doesn't run ahead of tables not yet started. It is 0 while no
        data sets were announced.
        """
        if self.data_sets_to_process == 0:
            return 0.0
        return self.processed_data_sets / self.data_sets_to_process * 100.0 / self.unfinished_sub_runs


class ProgressTracker:
    """
    Thread-safe progress counters with percentage publishing.

    Example:
        >>> tracker = ProgressTracker(publish=hub.publish_progress)
        >>> tracker.set_sub_runs(2)
        >>> tracker.add_data_sets_to_process(10)
        >>> tracker.finish_data_set_process()   # publishes 5.0
    """

    def __init__(self, publish: Optional[Callable[[float], None]] = None):
        """
        Initialize the tracker with all counters at zero.

        Args:
            publish: Callback receiving each computed percentage
        """
        self._publish = publish
        self._lock = threading.Lock()
        self._data_sets_to_process = 0
        self._processed_data_sets = 0
        self._sub_runs = 0
        self._finished_sub_runs = 0
        self._percentage = 0.0

    @staticmethod
    def _check_count(count: int, name: str) -> None:
        if count < 0:
            raise InvalidArgumentError(f"{name} can't be negative, got {count}")

    def add_data_sets_to_process(self, count: int) -> None:
        self._check_count(count, "Data sets to process")
        with self._lock:
            self._data_sets_to_process += count

    def set_sub_runs(self, count: int) -> None:
        """Set the number of sub-runs; call once before processing starts."""
        self._check_count(count, "Sub runs")
        with self._lock:
            self._sub_runs = count

    def add_processed_data_sets(self, count: int) -> float:
        """
        Count processed data sets, then recompute and publish the percentage.

        Returns:
            The new percentage
        """
        self._check_count(count, "Processed data sets")
        with self._lock:
            self._processed_data_sets += count
            percentage = self._recalculate()
        self._emit(percentage)
        return percentage

    def finish_data_set_process(self) -> float:
        """Count one processed data set."""
        return self.add_processed_data_sets(1)

    def finish_sub_run(self) -> None:
        """Count one finished sub-run. Doesn't publish."""
        with self._lock:
            self._finished_sub_runs += 1

    def calculate_progress(self) -> float:
        """Recompute the percentage from the current counters and publish it."""
        with self._lock:
            percentage = self._recalculate()
        self._emit(percentage)
        return percentage

    def republish(self) -> float:
        """Publish the last computed percentage again without recomputing."""
        with self._lock:
            percentage = self._percentage
        self._emit(percentage)
        return percentage

    @property
    def percentage(self) -> float:
        """The last computed percentage."""
        with self._lock:
            return self._percentage

    def snapshot(self) -> ProgressState:
        """Return a consistent copy of the counters."""
        with self._lock:
            return self._state()

    def _state(self) -> ProgressState:
        return ProgressState(
            data_sets_to_process=self._data_sets_to_process,
            processed_data_sets=self._processed_data_sets,
            sub_runs=self._sub_runs,
            finished_sub_runs=self._finished_sub_runs,
        )

    def _recalculate(self) -> float:
        # Caller holds the lock
        self._percentage = self._state().percentage
        return self._percentage

    def _emit(self, percentage: float) -> None:
        if self._publish is not None:
            self._publish(percentage)
