"""
Observers of im-/export runs and the hub that notifies them.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from ..core.types import ImExportErrorReport, ImExportWarningReport


logger = logging.getLogger(__name__)


class ImExportObserver(ABC):
    """
    Abstract base class for im-/export observers.

    Observers are notified from the threads doing the work, so
    implementations must be thread-safe.
    """

    @abstractmethod
    def on_progress(self, percentage: float) -> None:
        """Receive the overall progress in percent."""
        pass

    @abstractmethod
    def on_warning(self, warning: ImExportWarningReport) -> None:
        """Receive a warning."""
        pass

    @abstractmethod
    def on_error(self, error: ImExportErrorReport) -> None:
        """Receive an error."""
        pass


class ObserverHub:
    """
    Fans progress, warnings, and errors out to registered observers.

    Delivery works on a snapshot of the observers, so observers may be
    registered or removed while a notification is in flight. A failing
    observer is logged and skipped; the others still get the event.
    """

    def __init__(self):
        self._observers: List[ImExportObserver] = []
        self._lock = threading.Lock()

    def register(self, observer: ImExportObserver) -> bool:
        """
        Register an observer.

        Returns:
            True if the observer was added, False if it was already registered
        """
        with self._lock:
            if any(registered is observer for registered in self._observers):
                return False
            self._observers.append(observer)
        logger.debug(f"Registered observer: {observer!r}")
        return True

    def unregister(self, observer: ImExportObserver) -> bool:
        """
        Remove an observer.

        Returns:
            True if the observer was removed
        """
        with self._lock:
            for index, registered in enumerate(self._observers):
                if registered is observer:
                    del self._observers[index]
                    break
            else:
                return False
        logger.debug(f"Removed observer: {observer!r}")
        return True

    def observers(self) -> List[ImExportObserver]:
        """Return a snapshot of the registered observers."""
        with self._lock:
            return list(self._observers)

    def __len__(self) -> int:
        with self._lock:
            return len(self._observers)

    def publish_progress(self, percentage: float) -> None:
        self._notify("on_progress", lambda observer: observer.on_progress(percentage))

    def publish_warning(self, warning: ImExportWarningReport) -> None:
        self._notify("on_warning", lambda observer: observer.on_warning(warning))

    def publish_error(self, error: ImExportErrorReport) -> None:
        self._notify("on_error", lambda observer: observer.on_error(error))

    def _notify(self, callback_name: str, deliver: Callable[[ImExportObserver], None]) -> None:
        for observer in self.observers():
            try:
                deliver(observer)
            except Exception:
                logger.error(
                    f"Observer {observer!r} failed in {callback_name}",
                    exc_info=True,
                )


# Global hub instance
_hub: Optional[ObserverHub] = None
_hub_lock = threading.Lock()


def get_observer_hub() -> ObserverHub:
    """Get the process-wide observer hub."""
    global _hub
    with _hub_lock:
        if _hub is None:
            _hub = ObserverHub()
        return _hub
