"""
Proposes the corrected ("good") name for each audio file and rebuilds the
"bad" name an early version of the upload app gave it.

The bad name was produced by gluing the site folder, the night folder and the
filename together. Files on disk still carry it, so it is the key used to find
them again.
"""
from pathlib import Path
from typing import Optional

from .. import config
from ..models import CatalogRecord, SidecarMetadata


class NameProposer:

    def format_coordinate(self, value: float) -> str:
        """52.1234 -> '52~1234', 52.1 -> '52~1', 52.0 -> '52'."""
        text = f"{value:.{config.COORD_DECIMALS}f}".rstrip('0').rstrip('.')
        if text == '-0':
            text = '0'
        return text.replace('.', config.COORD_SEPARATOR)

    def propose_good_name(self, filename: str, metadata: SidecarMetadata) -> Optional[str]:
        if metadata.timestamp is None:
            return None

        stamp = metadata.timestamp.strftime(config.TIMESTAMP_FORMAT)
        if metadata.has_position:
            lat = self.format_coordinate(metadata.latitude)
            lon = self.format_coordinate(metadata.longitude)
            name = f"{lat}{config.POSITION_JOINER}{lon}_{stamp}{config.AUDIO_EXT}"
        else:
            name = f"{stamp}_{filename}"
        return name.strip()

    def propose_bad_name(self, site_label: str, parent_dir: str, filename: str) -> str:
        return f"{site_label}_{parent_dir}_{filename}".strip()

    def site_short_label(self, site_label: str) -> str:
        return site_label.replace(config.SITE_LABEL_PREFIX, '')

    def build_record(self, audio_path: Path, site_dir: Path, metadata: SidecarMetadata) -> CatalogRecord:
        """Combines path context and sidecar metadata into one catalog row."""
        filename = audio_path.name
        site_label = site_dir.name

        return CatalogRecord(
            original_path=str(audio_path),
            original_dir=str(audio_path.parent),
            original_filename=filename,
            has_metadata=metadata.has_metadata,
            bad_name=self.propose_bad_name(site_label, audio_path.parent.name, filename),
            site_long=site_label,
            site_short=self.site_short_label(site_label),
            derived_timestamp=metadata.timestamp,
            latitude=metadata.latitude if metadata.has_position else None,
            longitude=metadata.longitude if metadata.has_position else None,
            good_name=self.propose_good_name(filename, metadata),
        )
