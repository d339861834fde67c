from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from . import config


@dataclass(frozen=True)
class SidecarMetadata:
    """
    What could be read from one audio file's XML sidecar.
    """
    has_metadata: bool
    timestamp: Optional[datetime] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class CatalogRecord:
    """
    Naming info for one original audio file.
    Created once during the collate scan and never modified afterwards.
    """
    original_path: str
    original_dir: str
    original_filename: str
    has_metadata: bool
    bad_name: str
    site_long: str
    site_short: str

    derived_timestamp: Optional[datetime] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    good_name: Optional[str] = None  # None iff derived_timestamp is None

    @property
    def compact_timestamp(self) -> Optional[str]:
        if self.derived_timestamp is None:
            return None
        return self.derived_timestamp.strftime(config.TIMESTAMP_FORMAT)


@dataclass(frozen=True)
class MatchResult:
    """Result of looking up one on-disk file in the catalog."""
    key: str
    status: str                          # 'matched' or an outcome tag
    record: Optional[CatalogRecord] = None
    candidates: int = 0

    @property
    def is_match(self) -> bool:
        return self.record is not None


@dataclass(frozen=True)
class FileOutcome:
    path: Path
    outcome: str


@dataclass(frozen=True)
class DateFields:
    """The three date/time columns of a results row."""
    actual_date: str
    survey_date: str
    time: str


@dataclass
class TableFixResult:
    path: Path
    rows: int = 0
    rows_fixed: int = 0
    error: Optional[str] = None

    @property
    def percent_fixed(self) -> float:
        if not self.rows:
            return 0.0
        return 100.0 * self.rows_fixed / self.rows


@dataclass
class TableRetrofitResult:
    path: Path
    rows: int = 0
    dates_changed: int = 0
    times_changed: int = 0
    survey_dates_changed: int = 0
    error: Optional[str] = None

    def _percent(self, count: int) -> float:
        return 100.0 * count / self.rows if self.rows else 0.0

    @property
    def percent_dates_changed(self) -> float:
        return self._percent(self.dates_changed)

    @property
    def percent_times_changed(self) -> float:
        return self._percent(self.times_changed)

    @property
    def percent_survey_dates_changed(self) -> float:
        return self._percent(self.survey_dates_changed)
