"""
Command line interface for Istoria.

Imports Daylio backups and Obsidian vaults into the memory database, and
exports the database as NotebookLM text files.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import ConfigManager, get_config
from .database import DatabaseManager
from .exporters import EXPORT_INTERVALS, export_to_notebooklm
from .importers import BaseImporter, DaylioImporter, ObsidianImporter


def setup_logging(cfg: ConfigManager, log_file: Path):
    """Configure logging for the application."""
    level = getattr(logging, str(cfg.get("logging.level", "INFO")).upper(), logging.INFO)
    format_str = cfg.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding='utf-8')
        ]
    )


def run_import(db: DatabaseManager, importer: BaseImporter) -> int:
    """
    Run one importer and store its output as a single batch.

    Returns:
        Number of memories stored
    """
    memories = importer.get_all_memories()
    db.import_memories(memories)
    logging.info(f"Stored {len(memories)} memories from {importer.source}")
    return len(memories)


def run_export(db: DatabaseManager, export_dir: Path, interval: str) -> int:
    """
    Export all stored memories into export_dir.

    Returns:
        Number of files written
    """
    export_dir.mkdir(parents=True, exist_ok=True)
    written = export_to_notebooklm(db, str(export_dir), interval)
    return len(written)


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="istoria",
        description="Istoria - import journals and moods, export them for NotebookLM",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  istoria --daylio backup.daylio                      # Import a Daylio backup
  istoria --obsidian ~/Vault                          # Import an Obsidian vault
  istoria -o data --daylio backup.daylio --export month
  istoria --export year                               # Export what is already stored
  istoria --export                                    # Export using export.interval from config
        """
    )

    parser.add_argument(
        "-o", "--output-dir",
        type=str,
        help="Directory for the database, log file and exports (default: from config)"
    )

    parser.add_argument(
        "--daylio",
        type=str,
        metavar="PATH",
        help="Path to a .daylio backup to import"
    )

    parser.add_argument(
        "--obsidian",
        type=str,
        metavar="PATH",
        help="Path to an Obsidian vault to import"
    )

    parser.add_argument(
        "--export",
        nargs="?",
        const="",
        metavar="{month,year}",
        help="Export all memories to NotebookLM text files, one per month or year "
             "(default interval: from config)"
    )

    parser.add_argument(
        "--db",
        type=str,
        help="Path to the database file (default: <output-dir>/<database.filename>)"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to a configuration file (default: config.yaml)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Istoria {__version__}"
    )

    args = parser.parse_args(argv)

    # A bare --export leaves the interval to the config
    if args.export and args.export not in EXPORT_INTERVALS:
        parser.error(f"argument --export: invalid choice: '{args.export}' (choose from month, year)")

    if not (args.daylio or args.obsidian or args.export is not None):
        parser.error("nothing to do: pass --daylio, --obsidian and/or --export")

    return args


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Process exit code: 0 on success, 1 on any failure
    """
    args = parse_arguments(argv)
    cfg = ConfigManager(args.config) if args.config else get_config()

    try:
        output_dir = Path(args.output_dir or cfg.output_directory)
        output_dir.mkdir(parents=True, exist_ok=True)
        setup_logging(cfg, output_dir / cfg.log_filename)

        db_path = args.db or str(output_dir / cfg.database_filename)
        logging.info(f"Istoria {__version__} using database {db_path}")

        with DatabaseManager(db_path) as db:
            db.initialize_database()

            if args.daylio:
                run_import(db, DaylioImporter(args.daylio, archive_entry=cfg.daylio_archive_entry))

            if args.obsidian:
                run_import(db, ObsidianImporter(
                    args.obsidian,
                    extension=cfg.obsidian_extension,
                    reserved_dir=cfg.obsidian_reserved_dir
                ))

            if args.export is not None:
                interval = args.export or cfg.export_interval
                file_count = run_export(db, output_dir / cfg.export_directory, interval)
                logging.info(f"Exported {file_count} files")

    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        print("Interrupted.", file=sys.stderr)
        return 1

    except Exception as e:
        logging.error(f"Istoria failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0
