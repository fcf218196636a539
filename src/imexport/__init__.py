"""
Spreadsheet Im-/Export Framework

This package provides the infrastructure for importing and exporting tabular
spreadsheet data into and out of typed record objects. Concrete importers and
exporters plug into it; cell-level reading and writing lives with them.

Key components:
- core/: Exceptions, structured warning/error values, and logging utilities
- tables/: Field descriptors, table managers, and the table manager registry
- mapping/: Column-name to field-name mappings and mapping files
- progress/: Thread-safe progress tracking and observer fan-out
- runner/: The abstract im-/exporter that ties everything together
- config.py: YAML/.env/environment configuration
"""

__version__ = "0.1.0"
