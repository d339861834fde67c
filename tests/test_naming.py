import pytest
from pathlib import Path
from datetime import datetime
from batlogger_renamer.metadata.naming import NameProposer
from batlogger_renamer.models import SidecarMetadata

TS = datetime(2023, 8, 14, 23, 45, 10)


def test_good_name_with_position():
    meta = SidecarMetadata(has_metadata=True, timestamp=TS, latitude=52.1234, longitude=0.5678)
    name = NameProposer().propose_good_name("Location3_REC001.wav", meta)
    assert name == "52~1234+0~5678_20230814_234510.wav"


def test_good_name_without_position():
    meta = SidecarMetadata(has_metadata=True, timestamp=TS)
    name = NameProposer().propose_good_name("Location3_REC001.wav", meta)
    assert name == "20230814_234510_Location3_REC001.wav"


def test_no_timestamp_means_no_good_name():
    meta = SidecarMetadata(has_metadata=True, latitude=52.1234, longitude=0.5678)
    assert NameProposer().propose_good_name("REC001.wav", meta) is None


@pytest.mark.parametrize("value, expected", [
    (52.1234, "52~1234"),
    (52.1, "52~1"),
    (52.0, "52"),
    (-1.2345, "-1~2345"),
    (0.0001, "0~0001"),
])
def test_format_coordinate(value, expected):
    formatted = NameProposer().format_coordinate(value)
    assert formatted == expected
    assert "." not in formatted


def test_bad_name_is_concatenated_path_segments():
    proposer = NameProposer()
    bad = proposer.propose_bad_name("Location 3", "20230814", "Location3_REC001.wav")
    assert bad == "Location 3_20230814_Location3_REC001.wav"
    # Pure function of its inputs
    assert bad == proposer.propose_bad_name("Location 3", "20230814", "Location3_REC001.wav")


def test_good_name_is_trimmed():
    meta = SidecarMetadata(has_metadata=True, timestamp=TS)
    assert NameProposer().propose_good_name("REC001.wav  ", meta) == "20230814_234510_REC001.wav"


def test_build_record_from_path_context():
    site = Path("/drive/original/Location 3")
    wav = site / "Night1" / "Location3_REC001.wav"
    meta = SidecarMetadata(has_metadata=True, timestamp=TS, latitude=52.1234, longitude=0.5678)

    rec = NameProposer().build_record(wav, site, meta)

    assert rec.original_path == str(wav)
    assert rec.original_dir == str(wav.parent)
    assert rec.original_filename == "Location3_REC001.wav"
    assert rec.bad_name == "Location 3_Night1_Location3_REC001.wav"
    assert rec.good_name == "52~1234+0~5678_20230814_234510.wav"
    assert rec.site_long == "Location 3"
    assert rec.site_short == "3"
    assert rec.compact_timestamp == "20230814_234510"


def test_record_without_metadata_keeps_bad_name():
    site = Path("/drive/original/Location 4")
    wav = site / "Night2" / "Location4_REC009.wav"

    rec = NameProposer().build_record(wav, site, SidecarMetadata(has_metadata=False))

    assert rec.good_name is None
    assert rec.derived_timestamp is None
    assert rec.bad_name == "Location 4_Night2_Location4_REC009.wav"
