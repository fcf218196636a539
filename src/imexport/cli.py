#!/usr/bin/env python3
"""
CLI for managing mapping files of registered tables.

Table managers are registered by a setup module of the embedding
application, imported with ``--setup``.

Usage:
    python -m imexport.cli --help
    python -m imexport.cli tables --setup myapp.tables
    python -m imexport.cli generate-mapping --setup myapp.tables --table Person -o person.json
    python -m imexport.cli check-mapping --setup myapp.tables --table Person --mapping person.json
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import ImExportConfig
from .core.exceptions import ImExportError, MalformedMappingError
from .core.logging import configure_logging
from .mapping.name_mapper import NameMapper
from .tables.registry import get_table_manager_registry


logger = logging.getLogger(__name__)


def setup_logging(config: ImExportConfig, verbose: bool = False) -> None:
    """Configure logging from config, forcing DEBUG when verbose."""
    level = logging.DEBUG if verbose else config.log_level
    configure_logging(
        level=level,
        structured=bool(config.get("logging.structured", False)),
        stream=sys.stderr,
    )


def load_setup_module(module_name: str) -> None:
    """Import the module that registers the table managers."""
    logger.debug(f"Importing setup module: {module_name}")
    importlib.import_module(module_name)


def _build_mapper(config: ImExportConfig) -> NameMapper:
    return NameMapper(get_table_manager_registry(), indent=config.get("mapping.indent", 2))


def cmd_tables(args: argparse.Namespace, config: ImExportConfig) -> int:
    """List registered tables and their fields."""
    registry = get_table_manager_registry()
    managers = registry.managers()
    if not managers:
        print("No table managers registered.")
        return 1

    for manager in managers:
        print(f"{manager.table_name()}")
        for descriptor in manager.fields():
            print(f"  {descriptor.name:<24} {descriptor.getter_name} / {descriptor.setter_name}")
    return 0


def cmd_generate_mapping(args: argparse.Namespace, config: ImExportConfig) -> int:
    """Write a clean mapping file for a table."""
    output = Path(args.output) if args.output else None
    if output is None:
        mapping_dir = config.mapping_dir or Path(".")
        output = mapping_dir / f"{args.table}.json"

    _build_mapper(config).generate_clean_mapping_file(output, args.table)
    print(f"Mapping file written: {output}")
    return 0


def cmd_check_mapping(args: argparse.Namespace, config: ImExportConfig) -> int:
    """Load a mapping file and compare it against a table."""
    mapper = _build_mapper(config)
    manager = mapper.registry.lookup(args.table)
    if manager is None:
        print(f"Unknown table: {args.table}")
        return 1

    mapping_path = Path(args.mapping)
    if not mapping_path.is_file():
        print(f"Mapping file not found: {mapping_path}")
        return 1

    try:
        mapping = mapper.load_mapping(mapping_path)
    except MalformedMappingError as e:
        print(f"Malformed mapping: {e}")
        return 1

    warnings = mapper.validate_mapping(mapping, manager)
    for warning in warnings:
        print(f"WARNING: {warning.message}")

    print(f"{len(mapping)} columns mapped, {len(warnings)} warnings")
    return 1 if warnings else 0


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Spreadsheet im-/export mapping CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--config", help="Path to YAML config file")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    def add_setup_argument(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--setup",
            required=True,
            help="Module that registers the table managers (e.g. myapp.tables)",
        )

    # tables command
    tables_parser = subparsers.add_parser("tables", help="List registered tables")
    add_setup_argument(tables_parser)
    tables_parser.set_defaults(func=cmd_tables)

    # generate-mapping command
    generate_parser = subparsers.add_parser(
        "generate-mapping", help="Write a clean mapping file for a table"
    )
    add_setup_argument(generate_parser)
    generate_parser.add_argument("--table", required=True, help="Table name")
    generate_parser.add_argument(
        "-o", "--output", help="Output path (default: <mapping dir>/<table>.json)"
    )
    generate_parser.set_defaults(func=cmd_generate_mapping)

    # check-mapping command
    check_parser = subparsers.add_parser(
        "check-mapping", help="Validate a mapping file against a table"
    )
    add_setup_argument(check_parser)
    check_parser.add_argument("--table", required=True, help="Table name")
    check_parser.add_argument("--mapping", required=True, help="Mapping file to check")
    check_parser.set_defaults(func=cmd_check_mapping)

    args = parser.parse_args(argv)

    config = ImExportConfig(args.config)
    setup_logging(config, args.verbose)

    if not args.command:
        parser.print_help()
        return 1

    try:
        load_setup_module(args.setup)
        return args.func(args, config)
    except ImExportError as e:
        logger.error(str(e))
        return 2


if __name__ == "__main__":
    sys.exit(main())
