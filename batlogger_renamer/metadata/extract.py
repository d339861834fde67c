import logging
import math
import xml.etree.ElementTree as ET
from pathlib import Path
from datetime import datetime
from typing import Optional, Tuple

from .. import config
from ..exceptions import MetadataExtractionError
from ..models import SidecarMetadata


class MetadataExtractor:
    """
    Reads recording time and position from the XML sidecar that Batlogger
    writes next to every WAV file.

    A missing or corrupt sidecar is not an error: the file simply has no
    metadata and cannot be given a dated name.
    """

    def sidecar_path_for(self, audio_path: Path) -> Path:
        """
        Swaps the audio extension (any case) for the sidecar extension.
        Prefers a lowercase '.xml' but accepts '.XML' if that is what exists.
        """
        if audio_path.suffix.lower() not in config.AUDIO_EXTS:
            raise ValueError(f"Not an audio file: {audio_path}")

        lower = audio_path.with_suffix(config.SIDECAR_EXT)
        if lower.exists():
            return lower
        upper = audio_path.with_suffix(config.SIDECAR_EXT.upper())
        if upper.exists():
            return upper
        return lower

    def extract(self, audio_path: Path) -> SidecarMetadata:
        sidecar = self.sidecar_path_for(audio_path)
        if not sidecar.exists():
            logging.debug(f"No sidecar for {audio_path}")
            return SidecarMetadata(has_metadata=False)

        try:
            root = self._read_sidecar(sidecar)
        except MetadataExtractionError as e:
            logging.warning(f"Treating {sidecar} as missing: {e}")
            return SidecarMetadata(has_metadata=False)

        timestamp = self._parse_timestamp(self._find_text(root, config.DATETIME_ELEMENT))
        lat, lon = self._parse_position(self._find_text(root, config.POSITION_ELEMENT))

        return SidecarMetadata(
            has_metadata=True,
            timestamp=timestamp,
            latitude=lat,
            longitude=lon,
        )

    # --- Internal Parsing Helpers ---

    def _read_sidecar(self, sidecar: Path) -> ET.Element:
        try:
            return ET.parse(sidecar).getroot()
        except ET.ParseError as e:
            raise MetadataExtractionError(f"corrupt XML ({e})") from e
        except OSError as e:
            raise MetadataExtractionError(f"unreadable ({e})") from e

    def _find_text(self, root: ET.Element, tag: str) -> Optional[str]:
        """Text of the first element named `tag` anywhere in the document."""
        for elem in root.iter(tag):
            return "".join(elem.itertext()).strip()
        return None

    def _parse_timestamp(self, value: Optional[str]) -> Optional[datetime]:
        if not value:
            return None
        try:
            return datetime.strptime(value, config.SIDECAR_DATETIME_FORMAT)
        except ValueError:
            logging.debug(f"Unparsable sidecar datetime: {value!r}")
            return None

    def _parse_position(self, value: Optional[str]) -> Tuple[Optional[float], Optional[float]]:
        """
        Position is one field holding "lat lon". Either both coordinates
        come out of it or neither does.
        """
        if not value:
            return None, None

        parts = value.split()
        if len(parts) < 2:
            logging.debug(f"Incomplete sidecar position: {value!r}")
            return None, None

        try:
            lat = round(float(parts[0]), config.COORD_DECIMALS)
            lon = round(float(parts[1]), config.COORD_DECIMALS)
        except ValueError:
            logging.debug(f"Unparsable sidecar position: {value!r}")
            return None, None

        if not (math.isfinite(lat) and math.isfinite(lon)):
            return None, None

        return lat, lon
