"""
Reading and writing Acoustic Pipeline results tables.

Some exported tables are missing the final line terminator. Reading is
therefore a two-step affair: parse, and if that fails, append the missing
newline once and parse again.
"""
import csv
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

from .. import config
from ..exceptions import ResultsTableError

BOM = "\ufeff"


@dataclass
class ResultsTable:
    path: Path
    fieldnames: List[str]
    rows: List[Dict[str, str]]
    # utf-8-sig when the export started with a BOM
    encoding: str = "utf-8"


def _parse_table(path: Path) -> ResultsTable:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ResultsTableError(f"{path.name} is not UTF-8 text: {e}") from e

    encoding = "utf-8"
    if text.startswith(BOM):
        text = text[len(BOM):]
        encoding = "utf-8-sig"

    if text and not text.endswith(("\n", "\r")):
        raise csv.Error("missing final line terminator")

    reader = csv.DictReader(io.StringIO(text, newline=""), strict=True)
    rows = list(reader)
    fieldnames = list(reader.fieldnames or [])

    missing = [col for col in config.REQUIRED_COLUMNS if col not in fieldnames]
    if missing:
        raise ResultsTableError(f"{path.name} is missing columns: {', '.join(missing)}")

    for line_no, row in enumerate(rows, start=2):
        if None in row:
            raise ResultsTableError(f"{path.name} row {line_no} has more fields than the header")

    return ResultsTable(path=path, fieldnames=fieldnames, rows=rows, encoding=encoding)


def repair_line_terminator(path: Path):
    logging.info(f"Appending missing line terminator to {path}")
    with path.open("a", encoding="utf-8", newline="") as f:
        f.write("\n")


def load_results_table(path: Path) -> ResultsTable:
    try:
        return _parse_table(path)
    except csv.Error as e:
        logging.debug(f"First read of {path} failed: {e}")

    repair_line_terminator(path)
    try:
        return _parse_table(path)
    except csv.Error as e:
        raise ResultsTableError(f"{path.name} is unreadable after repair: {e}") from e


def write_results_table(table: ResultsTable):
    """Overwrites the table on disk, keeping the original column order."""
    with table.path.open("w", newline="", encoding=table.encoding) as f:
        writer = csv.DictWriter(f, fieldnames=table.fieldnames)
        writer.writeheader()
        writer.writerows(table.rows)
