"""
Progress tracking and observer notification.
"""

from .observers import ImExportObserver, ObserverHub, get_observer_hub
from .tracker import ProgressState, ProgressTracker

__all__ = [
    "ImExportObserver",
    "ObserverHub",
    "get_observer_hub",
    "ProgressState",
    "ProgressTracker",
]
