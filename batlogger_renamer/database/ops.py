import sqlite3
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple, Any

from .. import config
from ..catalog import Catalog
from ..exceptions import CatalogError
from ..models import CatalogRecord
from .schema import CATALOG_COLUMNS


def record_to_row(rec: CatalogRecord) -> Tuple[Any, ...]:
    """Flattens a record into CATALOG_COLUMNS order (None for missing values)."""
    return (
        rec.original_path,
        rec.original_dir,
        rec.original_filename,
        int(rec.has_metadata),
        rec.compact_timestamp,
        rec.latitude,
        rec.longitude,
        rec.good_name,
        rec.bad_name,
        rec.site_long,
        rec.site_short,
    )


def row_to_record(row: Tuple[Any, ...]) -> CatalogRecord:
    (orig_path, orig_dir, orig_file, has_xml, date_str,
     lat, lon, good, bad, site_long, site_short) = row

    timestamp: Optional[datetime] = None
    if date_str:
        timestamp = datetime.strptime(date_str, config.TIMESTAMP_FORMAT)

    return CatalogRecord(
        original_path=orig_path,
        original_dir=orig_dir,
        original_filename=orig_file,
        has_metadata=bool(has_xml),
        bad_name=bad,
        site_long=site_long,
        site_short=site_short,
        derived_timestamp=timestamp,
        latitude=lat,
        longitude=lon,
        good_name=good or None,
    )


class DBOperations:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def replace_catalog(self, records: Iterable[CatalogRecord]) -> int:
        """
        Replaces the stored catalog with `records` in one transaction.
        Returns the number of rows written.
        """
        rows = [record_to_row(rec) for rec in records]
        placeholders = ", ".join("?" for _ in CATALOG_COLUMNS)
        try:
            with self.conn:
                self.conn.execute("DELETE FROM catalog")
                self.conn.executemany(
                    f"INSERT INTO catalog ({', '.join(CATALOG_COLUMNS)}) VALUES ({placeholders})",
                    rows,
                )
        except sqlite3.Error as e:
            raise CatalogError(f"Failed to save catalog: {e}") from e

        logging.info(f"Saved {len(rows)} catalog rows.")
        return len(rows)

    def fetch_records(self) -> List[CatalogRecord]:
        cur = self.conn.cursor()
        try:
            cur.execute(f"SELECT {', '.join(CATALOG_COLUMNS)} FROM catalog ORDER BY id")
        except sqlite3.Error as e:
            raise CatalogError(f"Failed to read catalog: {e}") from e
        return [row_to_record(row) for row in cur.fetchall()]

    def load_catalog(self) -> Catalog:
        records = self.fetch_records()
        if not records:
            raise CatalogError("Catalog is empty. Run 'collate' first.")
        return Catalog(records)
