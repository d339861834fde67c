"""
Database schema definitions.
"""
import sqlite3
import logging

CURRENT_SCHEMA_VERSION = 1

# Column order shared by the SQLite table and the audit CSV export
CATALOG_COLUMNS = (
    'original_audio',
    'original_audio_path',
    'original_audio_file',
    'has_xml',
    'date_from_xml',
    'lat_from_xml',
    'lon_from_xml',
    'newname_good',
    'newname_bad',
    'site_long',
    'site_short',
)


def init_schema(conn: sqlite3.Connection):
    """
    Applies the catalog schema to the database.
    Idempotent: safe to run on every startup.
    """
    with conn:
        # 1. Version Tracking (For future migrations)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            );
        """)

        cur = conn.cursor()
        cur.execute("SELECT version FROM schema_version")
        if not cur.fetchone():
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (CURRENT_SCHEMA_VERSION,))

        # 2. Naming Catalog
        # One row per original audio file, written by 'collate', read by 'repair'
        conn.execute("""
        CREATE TABLE IF NOT EXISTS catalog (
            id                  INTEGER PRIMARY KEY AUTOINCREMENT,
            original_audio      TEXT NOT NULL,
            original_audio_path TEXT NOT NULL,
            original_audio_file TEXT NOT NULL,
            has_xml             INTEGER NOT NULL DEFAULT 0,
            date_from_xml       TEXT,                 -- YYYYMMDD_HHMMSS
            lat_from_xml        REAL,
            lon_from_xml        REAL,
            newname_good        TEXT,                 -- NULL when no usable date
            newname_bad         TEXT NOT NULL,
            site_long           TEXT NOT NULL,
            site_short          TEXT NOT NULL
        );
        """)

        # 3. Indices for Performance
        conn.execute("CREATE INDEX IF NOT EXISTS idx_catalog_bad ON catalog(newname_bad);")
        conn.execute("CREATE INDEX IF NOT EXISTS idx_catalog_site ON catalog(site_long);")

    logging.debug("Database schema initialized.")
