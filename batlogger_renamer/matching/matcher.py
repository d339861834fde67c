import re
import logging
from pathlib import Path
from typing import List

from .. import config
from ..catalog import Catalog
from ..models import CatalogRecord, MatchResult

MATCHED = 'matched'


def strip_to_marker(filename: str) -> str:
    """
    Drops anything before the first marker token (e.g. a part number the
    upload app prepended). Returns the name unchanged if the token is absent.
    """
    idx = filename.find(config.MARKER_TOKEN)
    if idx < 0:
        return filename
    return filename[idx:]


def paired_audio_name(sidecar_name: str) -> str:
    """'x.xml' -> 'x.wav', 'x.XML' -> 'x.WAV'."""
    stem, dot, ext = sidecar_name.rpartition('.')
    if not dot:
        return sidecar_name
    audio_ext = config.AUDIO_EXT.lstrip('.')
    return f"{stem}.{audio_ext.upper() if ext.isupper() else audio_ext}"


class Matcher:
    """
    Maps badly named files found on disk back to their catalog record.

    Audio files are matched on bad_name. Sidecars are matched on the original
    path, using the night folder plus the paired WAV name, because plain
    filenames restart every night and repeat across sites.
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog
        self._already_done = re.compile(config.ALREADY_RENAMED_PATTERN)

    def is_already_renamed(self, filename: str) -> bool:
        return bool(self._already_done.search(filename))

    def audio_key(self, path: Path) -> str:
        return strip_to_marker(path.name)

    def sidecar_key(self, path: Path) -> str:
        return f"{path.parent.name}/{paired_audio_name(path.name)}"

    def match_audio(self, path: Path) -> MatchResult:
        if self.is_already_renamed(path.name):
            return MatchResult(key=path.name, status=config.OUTCOME_ALREADY_RENAMED)

        key = self.audio_key(path)
        return self._resolve(path, key, self.catalog.find_bad_name_containing(key))

    def match_sidecar(self, path: Path) -> MatchResult:
        if self.is_already_renamed(path.name):
            return MatchResult(key=path.name, status=config.OUTCOME_ALREADY_RENAMED)

        key = self.sidecar_key(path)
        return self._resolve(path, key, self.catalog.find_path_containing(key))

    def _resolve(self, path: Path, key: str, candidates: List[CatalogRecord]) -> MatchResult:
        if len(candidates) != 1:
            logging.warning(f"{path} has {len(candidates)} matches (key: {key})")
            return MatchResult(key=key, status=config.OUTCOME_NO_MATCH, candidates=len(candidates))
        return MatchResult(key=key, status=MATCHED, record=candidates[0], candidates=1)
