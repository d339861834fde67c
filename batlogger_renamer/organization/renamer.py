import logging
from collections import Counter
from pathlib import Path
from typing import Iterable, List

from tqdm import tqdm

from .. import config
from ..matching.matcher import Matcher
from ..models import FileOutcome, MatchResult


class Renamer:
    """
    Renames matched audio files and sidecars to their proposed good names.
    Each call yields exactly one outcome tag; failures never propagate.
    """

    def __init__(self, matcher: Matcher, dry_run: bool = False):
        self.matcher = matcher
        self.dry_run = dry_run

    def rename_audio(self, path: Path) -> str:
        match = self.matcher.match_audio(path)
        if not match.is_match:
            return match.status
        return self._apply(path, match, sidecar=False)

    def rename_sidecar(self, path: Path) -> str:
        match = self.matcher.match_sidecar(path)
        if not match.is_match:
            return match.status
        return self._apply(path, match, sidecar=True)

    def rename_all(self, paths: Iterable[Path], sidecars: bool = False) -> List[FileOutcome]:
        """Renames every path in order and logs a tally of the outcomes."""
        paths = list(paths)
        kind = "xml" if sidecars else "wav"
        rename_one = self.rename_sidecar if sidecars else self.rename_audio

        logging.info(f"Renaming {len(paths)} {kind} files (DryRun={self.dry_run})...")

        outcomes = []
        for path in tqdm(paths, desc=f"Fixing {kind}s"):
            outcomes.append(FileOutcome(path=path, outcome=rename_one(path)))

        tally = Counter(o.outcome for o in outcomes)
        for outcome, count in sorted(tally.items()):
            logging.info(f"  {outcome}: {count}")
        return outcomes

    def destination_for(self, path: Path, good_name: str, sidecar: bool) -> Path:
        if sidecar:
            good_name = str(Path(good_name).with_suffix(path.suffix))
        return path.parent / good_name

    def _apply(self, path: Path, match: MatchResult, sidecar: bool) -> str:
        good_name = match.record.good_name
        if good_name is None:
            return config.OUTCOME_NO_DATE

        dest = self.destination_for(path, good_name, sidecar)

        if dest.name == path.name:
            return config.OUTCOME_ALREADY_RENAMED

        if self.dry_run:
            logging.info(f"[DRY RUN] Rename {path} -> {dest}")
            return config.OUTCOME_WOULD_RENAME

        if dest.exists():
            logging.error(f"Failed to rename {path}: {dest.name} already exists")
            return config.OUTCOME_FAILED

        try:
            path.rename(dest)
        except OSError as e:
            logging.error(f"Failed to rename {path} -> {dest}: {e}")
            return config.OUTCOME_FAILED

        logging.debug(f"Renamed {path} -> {dest}")
        return config.OUTCOME_RENAMED_XML if sidecar else config.OUTCOME_RENAMED
