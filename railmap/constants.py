"""Constants shared across railmap modules."""

from __future__ import annotations

from pathlib import Path

# N05 survey property keys
START_YEAR_KEY = "N05_005b"
END_YEAR_KEY = "N05_005e"
LINE_NAME_KEY = "N05_002"

# Year values meaning "unknown" or "not applicable" in the survey data
UNKNOWN_YEAR = 999
OPEN_YEAR_THRESHOLD = 9000

# Year sentinel meaning "no filter requested"
NO_FILTER_YEAR = 0

RAIL_DATA_FILE_NAME = "N05-24_RailroadSection2.geojson"
STATION_DATA_FILE_NAME = "N05-24_Station2.geojson"

DEFAULT_UTF8_DIR = Path("N05-24_GML") / "UTF-8"
DEFAULT_STATIC_DIR = Path("web") / "static"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_LOG_LEVEL = "info"
DEFAULT_CACHE_MAX_YEARS = 256

GEOJSON_MEDIA_TYPE = "application/geo+json"
CACHE_CONTROL_VALUE = "public, max-age=300"
FEATURE_COUNT_HEADER = "X-Feature-Count"
FILTER_YEAR_HEADER = "X-Filter-Year"
DATE_FORMAT_HINT = "invalid date format, use YYYY-MM-DD"
