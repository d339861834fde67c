import csv
import logging
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional

from . import config
from .catalog import Catalog
from .database.ops import record_to_row
from .database.schema import CATALOG_COLUMNS
from .models import FileOutcome, TableFixResult, TableRetrofitResult


class ReportGenerator:
    """
    Writes the per-run CSV reports: the naming catalog audit, the per-site
    overview, per-file rename outcomes and per-table fix percentages.
    """

    def __init__(self, report_dir: Path, run_date: Optional[date] = None):
        self.report_dir = report_dir
        self.run_date = run_date or date.today()

    def report_path(self, pattern: str, folder: Optional[Path] = None) -> Path:
        name = pattern.format(
            date=self.run_date.strftime(config.REPORT_DATE_FORMAT),
            folder=folder.name if folder else "",
        )
        return self.report_dir / name

    def write_catalog(self, catalog: Catalog) -> Path:
        """Exports the catalog with empty cells for missing values."""
        out = self.report_path(config.CATALOG_REPORT)
        rows = (
            ["" if v is None else v for v in record_to_row(rec)]
            for rec in catalog
        )
        self._write(out, CATALOG_COLUMNS, rows)
        logging.info(f"Naming catalog written to {out}")
        return out

    def write_site_overview(self, catalog: Catalog) -> Path:
        out = self.report_path(config.OVERVIEW_REPORT)
        summaries = catalog.site_summaries()

        logging.info("site | files | percent_renamable")
        for s in summaries:
            logging.info(f"{s.site} | {s.files} | {s.percent_renamable:.1f}")

        self._write(
            out,
            ["site", "files", "percent_renamable"],
            ([s.site, s.files, f"{s.percent_renamable:.1f}"] for s in summaries),
        )
        return out

    def write_outcomes(self, outcomes: Iterable[FileOutcome], out: Path) -> Path:
        self._write(out, ["original_name", "outcome"], ([str(o.path), o.outcome] for o in outcomes))
        logging.info(f"Outcome report written to {out}")
        return out

    def write_table_fixes(self, results: List[TableFixResult], out: Path) -> Path:
        self._write(
            out,
            ["csv", "percent_fixed", "error"],
            ([str(r.path), f"{r.percent_fixed:.1f}", r.error or ""] for r in results),
        )
        return out

    def write_table_retrofits(self, results: List[TableRetrofitResult], out: Path) -> Path:
        self._write(
            out,
            ["csv", "percent_dates_changed", "percent_times_changed",
             "percent_survey_dates_changed", "error"],
            (
                [str(r.path),
                 f"{r.percent_dates_changed:.1f}",
                 f"{r.percent_times_changed:.1f}",
                 f"{r.percent_survey_dates_changed:.1f}",
                 r.error or ""]
                for r in results
            ),
        )
        return out

    def _write(self, out: Path, headers, rows):
        out.parent.mkdir(parents=True, exist_ok=True)
        with open(out, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(headers)
            writer.writerows(rows)
