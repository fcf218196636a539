"""
Runner module: the abstract im-/exporter driving multi-table runs.
"""

from .orchestrator import AbstractImExporter, RunSummary

__all__ = ["AbstractImExporter", "RunSummary"]
