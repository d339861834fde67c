import pytest
import sqlite3
from pathlib import Path
from batlogger_renamer.database.schema import init_schema
from batlogger_renamer.database.ops import DBOperations


@pytest.fixture
def conn():
    """Returns an in-memory SQLite connection with the schema initialized."""
    c = sqlite3.connect(":memory:")
    init_schema(c)
    try:
        yield c
    finally:
        c.close()


@pytest.fixture
def db_ops(conn):
    """Returns a DBOperations instance attached to the in-memory DB."""
    return DBOperations(conn)


def write_sidecar(path: Path, datetime_value=None, position=None):
    parts = ["<?xml version=\"1.0\" encoding=\"UTF-8\"?>", "<BatRecord>"]
    if datetime_value is not None:
        parts.append(f"  <DateTime>{datetime_value}</DateTime>")
    if position is not None:
        parts.append(f"  <GPS><Position>{position}</Position></GPS>")
    parts.append("</BatRecord>")
    path.write_text("\n".join(parts), encoding="utf-8")


@pytest.fixture
def make_recording():
    """
    Creates a WAV (and optionally its XML sidecar) at site/night/filename.
    Pass xml=False for no sidecar, or xml='corrupt' for a broken one.
    """
    def _make(root: Path, site: str, night: str, filename: str,
              datetime_value="14.08.2023 23:45:10", position="52.1234 0.5678", xml=True):
        folder = root / site / night
        folder.mkdir(parents=True, exist_ok=True)
        wav = folder / filename
        wav.write_bytes(b"RIFF")
        sidecar = wav.with_suffix(".xml")
        if xml == 'corrupt':
            sidecar.write_text("<BatRecord><DateTime>14.08.2023", encoding="utf-8")
        elif xml:
            write_sidecar(sidecar, datetime_value, position)
        return wav
    return _make
