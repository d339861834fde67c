"""
Configuration constants for the batlogger renamer.
"""

# --- File Type Definitions ---
AUDIO_EXTS = {'.wav'}
SIDECAR_EXTS = {'.xml'}
AUDIO_EXT = '.wav'
SIDECAR_EXT = '.xml'

# --- Sidecar Parsing ---
DATETIME_ELEMENT = 'DateTime'
POSITION_ELEMENT = 'Position'
SIDECAR_DATETIME_FORMAT = "%d.%m.%Y %H:%M:%S"

# --- Naming ---
# Compact, sortable timestamp embedded in every good name
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
TIMESTAMP_PATTERN = r'(\d{8})_(\d{6})'
COORD_DECIMALS = 4
# Bat viewer tooling cannot parse '.' inside filenames
COORD_SEPARATOR = '~'
POSITION_JOINER = '+'
# Both good-name shapes: '{lat}+{lon}_{stamp}' and '{stamp}_{filename}'.
# Coordinates may have lost their fraction ('52' for 52.0).
ALREADY_RENAMED_PATTERN = r'^(?:-?\d+(?:~\d+)?\+-?\d+(?:~\d+)?_\d{8}_\d{6}|\d{8}_\d{6}_)'

# Segment of the bad name that survived the naming bug intact.
# Anything before it on disk (e.g. part numbers) is pruned before matching.
MARKER_TOKEN = 'Location'
SITE_LABEL_PREFIX = 'Location '

# --- Results Tables ---
RESULTS_SUBFOLDER = 'CSV'
COL_FILENAME = 'ORIGINAL.FILE.NAME'
COL_ACTUAL_DATE = 'ACTUAL.DATE'
COL_SURVEY_DATE = 'SURVEY.DATE'
COL_TIME = 'TIME'
REQUIRED_COLUMNS = (COL_FILENAME, COL_ACTUAL_DATE, COL_SURVEY_DATE, COL_TIME)
RESULT_DATE_FORMAT = "%d/%m/%Y"
RESULT_TIME_FORMAT = "%H:%M:%S"
# Detections before this hour belong to the night that started the previous day
SURVEY_NIGHT_CUTOFF_HOUR = 12

# --- Outcome Tags ---
OUTCOME_RENAMED = 'renamed'
OUTCOME_RENAMED_XML = 'renamed xml'
OUTCOME_WOULD_RENAME = 'would rename'
OUTCOME_ALREADY_RENAMED = 'already renamed'
OUTCOME_NO_MATCH = 'cannot match filename'
OUTCOME_NO_DATE = 'no date info for renaming'
OUTCOME_FAILED = 'failed to rename'

# --- Runs & Reports ---
MIN_AUDIO_FOLDERS = 1
MAX_AUDIO_FOLDERS = 3
DEFAULT_DB_NAME = 'batlogger_catalog.db'
LOG_FILE_NAME = 'batlogger_renamer.log'
REPORT_DATE_FORMAT = "%Y%m%d"
CATALOG_REPORT = "{date}_audit_batlogger_files_good_and_bad_names.csv"
OVERVIEW_REPORT = "{date}_audit_batlogger_files_overview.csv"
WAV_RENAME_REPORT = "{date}_rename_batlogger_wav_files_{folder}.csv"
XML_RENAME_REPORT = "{date}_rename_batlogger_xml_files_{folder}.csv"
CSV_FIX_REPORT = "{date}_fix_csv_results_{folder}.csv"
CSV_RETROFIT_REPORT = "{date}_retrofit_csv_results_{folder}.csv"
