"""
The naming catalog: one record per original audio file.

Built once by scanning the original audio tree, persisted, then shared
read-only by the matcher and the CSV reconciler.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from tqdm import tqdm

from .exceptions import ConfigurationError
from .metadata.extract import MetadataExtractor
from .metadata.naming import NameProposer
from .models import CatalogRecord
from .scanning.filesystem import DiskScanner


@dataclass(frozen=True)
class SiteSummary:
    site: str
    files: int
    with_metadata: int

    @property
    def percent_renamable(self) -> float:
        return 100.0 * self.with_metadata / self.files if self.files else 0.0


class Catalog:
    """
    Read-only lookup table over CatalogRecords.

    Keeps an exact index on bad_name. Substring searches scan every record
    and return every hit, so callers can tell a unique match from an
    ambiguous one.
    """

    def __init__(self, records: Iterable[CatalogRecord]):
        self._records: Tuple[CatalogRecord, ...] = tuple(records)

        by_bad_name: Dict[str, List[CatalogRecord]] = defaultdict(list)
        for rec in self._records:
            by_bad_name[rec.bad_name].append(rec)
        self._by_bad_name = dict(by_bad_name)

        # Paths are compared with forward slashes regardless of the OS that built them
        self._posix_paths = tuple(
            (rec.original_path.replace('\\', '/'), rec) for rec in self._records
        )

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def find_exact_bad_name(self, name: str) -> List[CatalogRecord]:
        return list(self._by_bad_name.get(name, ()))

    def find_bad_name_containing(self, fragment: str) -> List[CatalogRecord]:
        if not fragment:
            return []
        return [rec for rec in self._records if fragment in rec.bad_name]

    def find_path_containing(self, fragment: str) -> List[CatalogRecord]:
        if not fragment:
            return []
        fragment = fragment.replace('\\', '/')
        return [rec for path, rec in self._posix_paths if fragment in path]

    def site_summaries(self) -> List[SiteSummary]:
        """Share of files per site whose sidecar could be read."""
        totals: Dict[str, List[int]] = {}
        for rec in self._records:
            counts = totals.setdefault(rec.site_long, [0, 0])
            counts[0] += 1
            counts[1] += int(rec.has_metadata)
        return [
            SiteSummary(site=site, files=files, with_metadata=with_meta)
            for site, (files, with_meta) in sorted(totals.items())
        ]


class CatalogBuilder:
    """Scans the original audio tree and proposes names for every file."""

    def __init__(self):
        self.scanner = DiskScanner()
        self.metadata = MetadataExtractor()
        self.proposer = NameProposer()

    def build(self, root: Path) -> Catalog:
        if not root.is_dir():
            raise ConfigurationError(f"Original audio folder not found: {root}")

        sites = self.scanner.list_sites(root)
        logging.info(f"There are {len(sites)} sites to process")

        records: List[CatalogRecord] = []
        for site in sites:
            records.extend(self.build_site(site))

        catalog = Catalog(records)
        logging.info(f"Catalog built: {len(catalog)} audio files across {len(sites)} sites.")
        return catalog

    def build_site(self, site: Path) -> List[CatalogRecord]:
        audio_files = list(self.scanner.iter_audio_files(site))
        if not audio_files:
            logging.warning(f"No wavs for site {site.name}")
            return []

        logging.info(f"{site.name} contains {len(audio_files)} wav files to process")

        records = []
        for path in tqdm(audio_files, desc=site.name):
            meta = self.metadata.extract(path)
            records.append(self.proposer.build_record(path, site, meta))
        return records
