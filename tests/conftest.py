"""
Shared test fixtures and configuration for pytest.
"""

import logging
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import imexport.config
from imexport.config import ENV_LOG_LEVEL, ENV_LOG_STRUCTURED, ENV_MAPPING_DIR, ENV_MAX_WORKERS
from imexport.core.logging import PACKAGE_LOGGER
from imexport.progress.observers import ImExportObserver, ObserverHub
from imexport.tables.manager import RecordTableManager
from imexport.tables.registry import TableManagerRegistry


logger = logging.getLogger(__name__)


# ============================================================================
# Pytest hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "slow: Tests that take a long time to run")


# ============================================================================
# Sample records
# ============================================================================

@dataclass
class Person:
    firstName: str = ""
    lastName: str = ""
    age: int = 0


@dataclass
class Address:
    street: str = ""
    city: str = ""


class RecordingObserver(ImExportObserver):
    """Observer collecting everything it receives."""

    def __init__(self):
        self.progress: List[float] = []
        self.warnings = []
        self.errors = []
        self._lock = threading.Lock()

    def on_progress(self, percentage: float) -> None:
        with self._lock:
            self.progress.append(percentage)

    def on_warning(self, warning) -> None:
        with self._lock:
            self.warnings.append(warning)

    def on_error(self, error) -> None:
        with self._lock:
            self.errors.append(error)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep framework environment variables and .env state out of the tests."""
    for name in (ENV_MAPPING_DIR, ENV_MAX_WORKERS, ENV_LOG_LEVEL, ENV_LOG_STRUCTURED):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(imexport.config, "_dotenv_loaded", False)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers configure_logging installed during a test."""
    yield
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        if getattr(handler, "_imexport_handler", False):
            package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def person_manager():
    return RecordTableManager(Person)


@pytest.fixture
def address_manager():
    return RecordTableManager(Address)


@pytest.fixture
def registry(person_manager, address_manager):
    """Registry with the Person and Address tables."""
    registry = TableManagerRegistry()
    registry.add(person_manager)
    registry.add(address_manager)
    return registry


@pytest.fixture
def empty_registry():
    return TableManagerRegistry()


@pytest.fixture
def hub():
    return ObserverHub()


@pytest.fixture
def observer(hub):
    """Recording observer registered on the hub fixture."""
    recording = RecordingObserver()
    hub.register(recording)
    return recording
