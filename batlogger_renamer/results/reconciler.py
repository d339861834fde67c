"""
Propagates corrected filenames into results tables and recomputes the
detection date, time and survey date from the timestamp in the filename.
"""
import re
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, Optional

from .. import config
from ..catalog import Catalog
from ..exceptions import ResultsTableError
from ..matching.matcher import strip_to_marker
from ..models import DateFields, TableFixResult, TableRetrofitResult
from .tables import load_results_table, write_results_table

_TIMESTAMP_RE = re.compile(config.TIMESTAMP_PATTERN)


def parse_filename_timestamp(filename: str) -> Optional[datetime]:
    """Finds the embedded YYYYMMDD_HHMMSS stamp in a good name."""
    m = _TIMESTAMP_RE.search(filename or "")
    if not m:
        return None
    try:
        return datetime.strptime(f"{m.group(1)}_{m.group(2)}", config.TIMESTAMP_FORMAT)
    except ValueError:
        return None


def survey_date_for(dt: datetime) -> datetime:
    """
    Recordings are nocturnal: a detection in the AM belongs to the survey
    night that began on the previous calendar day.
    """
    if dt.hour < config.SURVEY_NIGHT_CUTOFF_HOUR:
        return dt - timedelta(days=1)
    return dt


def derive_date_fields(filename: str) -> Optional[DateFields]:
    dt = parse_filename_timestamp(filename)
    if dt is None:
        return None
    return DateFields(
        actual_date=dt.strftime(config.RESULT_DATE_FORMAT),
        survey_date=survey_date_for(dt).strftime(config.RESULT_DATE_FORMAT),
        time=dt.strftime(config.RESULT_TIME_FORMAT),
    )


def apply_date_fields(row: Dict[str, str], fields: DateFields):
    row[config.COL_ACTUAL_DATE] = fields.actual_date
    row[config.COL_SURVEY_DATE] = fields.survey_date
    row[config.COL_TIME] = fields.time


class CsvReconciler:
    """Rewrites the filename column of results tables using the catalog."""

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def fix_row(self, row: Dict[str, str]) -> bool:
        """Returns True if the row was corrected."""
        key = strip_to_marker(row.get(config.COL_FILENAME) or "")
        matches = self.catalog.find_exact_bad_name(key)
        if len(matches) != 1:
            return False

        good_name = matches[0].good_name
        if good_name is None:
            return False

        fields = derive_date_fields(good_name)
        if fields is None:
            return False

        row[config.COL_FILENAME] = good_name
        apply_date_fields(row, fields)
        return True

    def fix_table(self, path: Path) -> TableFixResult:
        result = TableFixResult(path=path)
        try:
            table = load_results_table(path)
        except (ResultsTableError, OSError) as e:
            logging.error(f"Skipping results table {path}: {e}")
            result.error = str(e)
            return result

        for row in table.rows:
            result.rows += 1
            if self.fix_row(row):
                result.rows_fixed += 1

        try:
            write_results_table(table)
        except OSError as e:
            logging.error(f"Failed to write results table {path}: {e}")
            result.error = str(e)
            return result

        logging.info(f"{path.name}: fixed {result.rows_fixed}/{result.rows} rows ({result.percent_fixed:.1f}%)")
        return result


class DateRetrofitter:
    """
    Recomputes the date columns from whatever filename each row already has.
    For tables whose filenames were corrected before the date fix existed.
    """

    def retrofit_row(self, row: Dict[str, str]) -> Dict[str, bool]:
        """Returns which of the three columns changed."""
        fields = derive_date_fields(row.get(config.COL_FILENAME) or "")
        if fields is None:
            return {'date': False, 'time': False, 'survey_date': False}

        changed = {
            'date': fields.actual_date != row.get(config.COL_ACTUAL_DATE),
            'time': fields.time != row.get(config.COL_TIME),
            'survey_date': fields.survey_date != row.get(config.COL_SURVEY_DATE),
        }
        apply_date_fields(row, fields)
        return changed

    def retrofit_table(self, path: Path) -> TableRetrofitResult:
        result = TableRetrofitResult(path=path)
        try:
            table = load_results_table(path)
        except (ResultsTableError, OSError) as e:
            logging.error(f"Skipping results table {path}: {e}")
            result.error = str(e)
            return result

        for row in table.rows:
            changed = self.retrofit_row(row)
            result.rows += 1
            result.dates_changed += changed['date']
            result.times_changed += changed['time']
            result.survey_dates_changed += changed['survey_date']

        try:
            write_results_table(table)
        except OSError as e:
            logging.error(f"Failed to write results table {path}: {e}")
            result.error = str(e)
            return result

        logging.info(f"Fixing: {path}")
        logging.info(f" Changed {result.percent_dates_changed:.1f} percent of detection dates")
        logging.info(f" Changed {result.percent_times_changed:.1f} percent of detection times")
        logging.info(f" Changed {result.percent_survey_dates_changed:.1f} percent of survey dates")
        return result
