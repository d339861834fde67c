import csv
import shutil
import pytest
from datetime import date
from pathlib import Path
from batlogger_renamer import config
from batlogger_renamer.core import BatloggerRepairApp
from batlogger_renamer.exceptions import CatalogError, ConfigurationError


def _copy_as_bad(original_root: Path, bad_root: Path):
    """Recreates the broken upload: every file renamed to site_night_filename, flattened per site."""
    for site in original_root.iterdir():
        for f in site.rglob("*"):
            if f.is_file():
                dest = bad_root / site.name / f.parent.name
                dest.mkdir(parents=True, exist_ok=True)
                if f.suffix == ".wav":
                    shutil.copy2(f, dest / f"{site.name}_{f.parent.name}_{f.name}")
                else:
                    shutil.copy2(f, dest / f.name)


def _read(path: Path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


@pytest.fixture
def drive(tmp_path, make_recording):
    original = tmp_path / "original"
    make_recording(original, "Location 1", "Night1", "Location1_REC001.wav")
    make_recording(original, "Location 1", "Night1", "Location1_REC002.wav", xml=False)
    make_recording(original, "Location 1", "Night2", "Location1_REC001.wav",
                   datetime_value="15.08.2023 01:02:03", position=None)

    bad = tmp_path / "renamed" / "batch1"
    _copy_as_bad(original, bad)

    csv_dir = bad / config.RESULTS_SUBFOLDER
    csv_dir.mkdir()
    (csv_dir / "results.csv").write_text(
        "ORIGINAL.FILE.NAME,ACTUAL.DATE,SURVEY.DATE,TIME\n"
        "Location 1_Night1_Location1_REC001.wav,,,\n"
        "Location 1_Night2_Location1_REC001.wav,,,\n"
        "Location 1_Night1_Location1_REC002.wav,,,\n",
        encoding="utf-8",
    )
    return tmp_path, original, bad


def test_collate_persists_catalog_and_reports(drive):
    tmp_path, original, _ = drive
    report_dir = tmp_path / "logs"
    app = BatloggerRepairApp(tmp_path / "catalog.db")

    catalog = app.collate(original, report_dir)

    assert len(catalog) == 3
    assert len(app.load_catalog()) == 3

    stamp = date.today().strftime(config.REPORT_DATE_FORMAT)
    audit = _read(report_dir / config.CATALOG_REPORT.format(date=stamp))
    assert {r["newname_bad"] for r in audit} == {
        "Location 1_Night1_Location1_REC001.wav",
        "Location 1_Night1_Location1_REC002.wav",
        "Location 1_Night2_Location1_REC001.wav",
    }
    no_xml = [r for r in audit if r["has_xml"] == "0"]
    assert len(no_xml) == 1 and no_xml[0]["newname_good"] == ""

    overview = _read(report_dir / config.OVERVIEW_REPORT.format(date=stamp))
    assert overview == [{"site": "Location 1", "files": "3", "percent_renamable": "66.7"}]


def test_repair_renames_and_fixes_tables(drive):
    tmp_path, original, bad = drive
    app = BatloggerRepairApp(tmp_path / "catalog.db")
    app.collate(original, tmp_path / "logs")

    app.repair([bad], rename_sidecars=True)

    night1 = bad / "Location 1" / "Night1"
    night2 = bad / "Location 1" / "Night2"
    assert (night1 / "52~1234+0~5678_20230814_234510.wav").exists()
    assert (night1 / "52~1234+0~5678_20230814_234510.xml").exists()
    assert (night1 / "Location 1_Night1_Location1_REC002.wav").exists()
    assert (night2 / "20230815_010203_Location1_REC001.wav").exists()
    assert (night2 / "20230815_010203_Location1_REC001.xml").exists()

    stamp = date.today().strftime(config.REPORT_DATE_FORMAT)
    wav_report = _read(bad.parent / config.WAV_RENAME_REPORT.format(date=stamp, folder="batch1"))
    assert sorted(r["outcome"] for r in wav_report) == [
        config.OUTCOME_NO_DATE, config.OUTCOME_RENAMED, config.OUTCOME_RENAMED,
    ]

    rows = _read(bad / config.RESULTS_SUBFOLDER / "results.csv")
    assert rows[1]["ORIGINAL.FILE.NAME"] == "20230815_010203_Location1_REC001.wav"
    assert (rows[1]["ACTUAL.DATE"], rows[1]["SURVEY.DATE"], rows[1]["TIME"]) == ("15/08/2023", "14/08/2023", "01:02:03")

    fixes = _read(bad.parent / config.CSV_FIX_REPORT.format(date=stamp, folder="batch1"))
    assert fixes[0]["percent_fixed"] == "66.7"

    # Second run changes nothing on disk
    app.repair([bad], rename_sidecars=True)
    assert (night1 / "52~1234+0~5678_20230814_234510.wav").exists()


def test_repair_dry_run_touches_nothing(drive):
    tmp_path, original, bad = drive
    app = BatloggerRepairApp(tmp_path / "catalog.db")
    app.collate(original, tmp_path / "logs")
    before = sorted(p.name for p in bad.rglob("*"))
    table_before = (bad / config.RESULTS_SUBFOLDER / "results.csv").read_text(encoding="utf-8")

    app.repair([bad], rename_sidecars=True, dry_run=True)

    after = sorted(p.name for p in bad.rglob("*"))
    assert before == after
    assert (bad / config.RESULTS_SUBFOLDER / "results.csv").read_text(encoding="utf-8") == table_before


def test_count_mismatch_is_only_a_warning(drive, caplog):
    tmp_path, original, bad = drive
    app = BatloggerRepairApp(tmp_path / "catalog.db")
    catalog = app.collate(original, tmp_path / "logs")
    (bad / "Location 1" / "Night1" / "stray.wav").write_bytes(b"RIFF")

    app.repair([bad], catalog=catalog)

    assert "Number of wavs does not match renaming info" in caplog.text


@pytest.mark.parametrize("count", [0, 4])
def test_folder_count_is_validated(tmp_path, count):
    folders = [tmp_path] * count
    with pytest.raises(ConfigurationError):
        BatloggerRepairApp(tmp_path / "catalog.db").repair(folders)


def test_repair_without_catalog(tmp_path):
    with pytest.raises(CatalogError):
        BatloggerRepairApp(tmp_path / "missing.db").repair([tmp_path])


def test_retrofit_writes_report(tmp_path):
    csv_dir = tmp_path / "CSV"
    csv_dir.mkdir()
    (csv_dir / "a.csv").write_text(
        "ORIGINAL.FILE.NAME,ACTUAL.DATE,SURVEY.DATE,TIME\n"
        "20230815_003010_REC.wav,15/08/2023,15/08/2023,00:30:10\n",
        encoding="utf-8",
    )

    results = BatloggerRepairApp(tmp_path / "catalog.db").retrofit(csv_dir)

    assert results[0].survey_dates_changed == 1
    stamp = date.today().strftime(config.REPORT_DATE_FORMAT)
    report = _read(tmp_path / config.CSV_RETROFIT_REPORT.format(date=stamp, folder="CSV"))
    assert report[0]["percent_survey_dates_changed"] == "100.0"
