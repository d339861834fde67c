import logging
from pathlib import Path
from typing import List, Optional, Sequence

from . import config
from .catalog import Catalog, CatalogBuilder
from .database.db import DBManager
from .database.ops import DBOperations
from .exceptions import CatalogError, ConfigurationError
from .matching.matcher import Matcher
from .models import FileOutcome, TableFixResult, TableRetrofitResult
from .organization.renamer import Renamer
from .reporting import ReportGenerator
from .results.reconciler import CsvReconciler, DateRetrofitter
from .scanning.filesystem import DiskScanner


class BatloggerRepairApp:
    def __init__(self, db_path: Path):
        self.db_manager = DBManager(db_path)
        self.scanner = DiskScanner()

    def collate(self, original_root: Path, report_dir: Path) -> Catalog:
        """
        Step 1: scan the original audio, propose good names and rebuild the
        bad names, then persist the catalog for the repair step.
        """
        catalog = CatalogBuilder().build(original_root)

        with self.db_manager as conn:
            DBOperations(conn).replace_catalog(catalog)

        reporter = ReportGenerator(report_dir)
        reporter.write_catalog(catalog)
        reporter.write_site_overview(catalog)
        return catalog

    def load_catalog(self) -> Catalog:
        if not self.db_manager.db_path.exists():
            raise CatalogError(f"Catalog database not found at {self.db_manager.db_path}. Run 'collate' first.")
        with self.db_manager as conn:
            return DBOperations(conn).load_catalog()

    def repair(self,
               folders: Sequence[Path],
               rename_sidecars: bool = False,
               dry_run: bool = False,
               catalog: Optional[Catalog] = None):
        """
        Step 2: rename the badly named audio (and optionally XML) files in
        each folder, then fix the results tables in its CSV subfolder.
        """
        self.validate_folders(folders)
        catalog = catalog if catalog is not None else self.load_catalog()

        renamer = Renamer(Matcher(catalog), dry_run=dry_run)
        reconciler = CsvReconciler(catalog)

        logging.info("About to process the following folders:")
        for folder in folders:
            logging.info(f"  {folder}")

        for folder in folders:
            self._repair_folder(folder, catalog, renamer, reconciler, rename_sidecars)

    def retrofit(self, csv_dir: Path) -> List[TableRetrofitResult]:
        """Optional: recompute date columns in tables whose names are already fixed."""
        if not csv_dir.is_dir():
            raise ConfigurationError(f"CSV folder not found: {csv_dir}")

        retrofitter = DateRetrofitter()
        results = [retrofitter.retrofit_table(p) for p in self.scanner.list_results_tables(csv_dir)]

        reporter = ReportGenerator(csv_dir.parent)
        reporter.write_table_retrofits(results, reporter.report_path(config.CSV_RETROFIT_REPORT, csv_dir))
        return results

    def validate_folders(self, folders: Sequence[Path]):
        if not config.MIN_AUDIO_FOLDERS <= len(folders) <= config.MAX_AUDIO_FOLDERS:
            raise ConfigurationError(
                f"Number of folders needs to be between {config.MIN_AUDIO_FOLDERS} "
                f"and {config.MAX_AUDIO_FOLDERS} (got {len(folders)})"
            )
        for folder in folders:
            if not folder.is_dir():
                raise ConfigurationError(f"Audio folder not found: {folder}")

    def _repair_folder(self,
                       folder: Path,
                       catalog: Catalog,
                       renamer: Renamer,
                       reconciler: CsvReconciler,
                       rename_sidecars: bool):
        logging.info(f"Folder: {folder}")
        reporter = ReportGenerator(folder.parent)

        wavs = list(self.scanner.iter_audio_files(folder))
        xmls = list(self.scanner.iter_sidecar_files(folder))
        logging.info(f"N wav files: {len(wavs)}")
        logging.info(f"N xml files: {len(xmls)}")
        self._check_counts(wavs, xmls, catalog)

        outcomes: List[FileOutcome] = renamer.rename_all(wavs)
        reporter.write_outcomes(outcomes, reporter.report_path(config.WAV_RENAME_REPORT, folder))

        if rename_sidecars:
            xml_outcomes = renamer.rename_all(xmls, sidecars=True)
            reporter.write_outcomes(xml_outcomes, reporter.report_path(config.XML_RENAME_REPORT, folder))

        csv_folder = self.scanner.find_results_folder(folder)
        if csv_folder is not None and renamer.dry_run:
            logging.info(f"[DRY RUN] Leaving results tables in {csv_folder} untouched")
        elif csv_folder is not None:
            logging.info("Fixing results tables...")
            fixes: List[TableFixResult] = [
                reconciler.fix_table(p) for p in self.scanner.list_results_tables(csv_folder)
            ]
            reporter.write_table_fixes(fixes, reporter.report_path(config.CSV_FIX_REPORT, folder))

    def _check_counts(self, wavs: List[Path], xmls: List[Path], catalog: Catalog):
        """Diagnostics only; mismatches never stop the run."""
        if len(wavs) != len(xmls):
            logging.warning("Number of wavs and xmls does not match")
        if len(wavs) != len(catalog):
            logging.warning(f"Number of wavs does not match renaming info (wavs={len(wavs)}, names={len(catalog)})")
        else:
            logging.info("Success: Number of wavs matches renaming info")
