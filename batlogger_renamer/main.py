import argparse
import logging
import sys
from pathlib import Path

from . import config
from .core import BatloggerRepairApp
from .exceptions import BatloggerRenamerError


def setup_logging(log_dir: Path, verbose: bool):
    """Sets up logging to both console and a file in the report folder."""
    log_level = logging.DEBUG if verbose else logging.INFO

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / config.LOG_FILE_NAME

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler(sys.stdout)
        ]
    )


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Batlogger Renamer: fix badly renamed Batlogger audio files")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = p.add_subparsers(dest="command", required=True)

    collate = sub.add_parser("collate", help="Scan original audio and propose good/bad names")
    collate.add_argument("original", type=Path, help="Folder containing the original audio (one subfolder per site)")
    collate.add_argument("--report-dir", type=Path, required=True, help="Where to save the log, catalog and diagnostics")
    collate.add_argument("--db", type=Path, default=None, help=f"Catalog DB path (default: report-dir/{config.DEFAULT_DB_NAME})")

    repair = sub.add_parser("repair", help="Rename badly named files and fix results CSVs")
    repair.add_argument("folders", type=Path, nargs="+", help="Folders containing badly named audio")
    repair.add_argument("--db", type=Path, required=True, help="Catalog DB produced by 'collate'")
    repair.add_argument("--xml", action="store_true", help="Also rename XML sidecars")
    repair.add_argument("--dry-run", action="store_true", help="Simulate renames without modifying disk")

    retrofit = sub.add_parser("retrofit", help="Recompute date/time columns of results CSVs from their filenames")
    retrofit.add_argument("csv_dir", type=Path, help="Folder containing results CSV files")

    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    if args.command == "collate":
        log_dir = args.report_dir.resolve()
    elif args.command == "repair":
        log_dir = args.db.resolve().parent
    else:
        log_dir = args.csv_dir.resolve().parent

    setup_logging(log_dir, args.verbose)
    logging.info(f"=== Batlogger Renamer: {args.command} ===")

    try:
        if args.command == "collate":
            db_path = args.db if args.db else log_dir / config.DEFAULT_DB_NAME
            app = BatloggerRepairApp(db_path)
            app.collate(args.original.resolve(), log_dir)
        elif args.command == "repair":
            app = BatloggerRepairApp(args.db.resolve())
            app.repair(
                [f.resolve() for f in args.folders],
                rename_sidecars=args.xml,
                dry_run=args.dry_run,
            )
        else:
            app = BatloggerRepairApp(log_dir / config.DEFAULT_DB_NAME)
            app.retrofit(args.csv_dir.resolve())
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        sys.exit(1)
    except BatloggerRenamerError as e:
        logging.error(str(e))
        sys.exit(1)
    except Exception:
        logging.exception(f"Fatal error during {args.command}.")
        sys.exit(1)

    logging.info("Done.")


if __name__ == "__main__":
    main()
