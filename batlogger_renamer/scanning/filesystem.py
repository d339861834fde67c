import os
import logging
from pathlib import Path
from typing import Iterator, List, Optional, Set

from .. import config


class DiskScanner:
    """
    Enumerates the candidate files of a Batlogger drive: site folders,
    audio files, XML sidecars and results tables.
    """

    def list_sites(self, root: Path) -> List[Path]:
        """Immediate subdirectories of root, sorted by name."""
        try:
            with os.scandir(root) as it:
                dirs = [Path(e.path) for e in it if e.is_dir(follow_symlinks=False)]
        except OSError as e:
            logging.error(f"Cannot list sites in {root}: {e}")
            raise
        return sorted(dirs, key=lambda p: p.name.lower())

    def iter_audio_files(self, root: Path) -> Iterator[Path]:
        yield from self._iter_files(root, config.AUDIO_EXTS)

    def iter_sidecar_files(self, root: Path) -> Iterator[Path]:
        yield from self._iter_files(root, config.SIDECAR_EXTS)

    def list_results_tables(self, folder: Path) -> List[Path]:
        """CSV tables directly inside folder (not recursive)."""
        return sorted(p for p in folder.iterdir() if p.is_file() and p.suffix.lower() == '.csv')

    def find_results_folder(self, folder: Path) -> Optional[Path]:
        candidate = folder / config.RESULTS_SUBFOLDER
        return candidate if candidate.is_dir() else None

    def _iter_files(self, root: Path, exts: Set[str]) -> Iterator[Path]:
        """Depth-first walker using os.scandir for speed."""
        stack = [root]
        while stack:
            current = stack.pop()

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except (OSError, PermissionError):
                logging.warning(f"Permission denied: {current}")
                continue

            # Sort for stable traversal order
            entries.sort(key=lambda e: e.name.lower())

            dirs = []
            files = []
            for e in entries:
                if e.is_dir(follow_symlinks=False):
                    dirs.append(Path(e.path))
                elif e.is_file(follow_symlinks=False) and not e.name.startswith("._"):
                    if os.path.splitext(e.name)[1].lower() in exts:
                        files.append(Path(e.path))

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)

            for f in files:
                yield f
