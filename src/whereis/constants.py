"""Centralized constants for all modules."""

# Fastah API
FASTAH_ENDPOINT_BASE = "https://ep.api.getfastah.com/whereis/v1/json/"
FASTAH_KEY_HEADER = "Fastah-Key"
USER_AGENT = "whereis/1 (+https://github.com/blackbuck-computing/whereis)"

# Timeouts (seconds)
HANDSHAKE_TIMEOUT = 5.0

# Configuration
CONFIG_FILE_NAME = ".whereis.yaml"
KEY_API_KEY = "fastah-api-key"
KEY_ENDPOINT = "fastah-endpoint"
KEY_MMDB_PATH = "mmdb-path"
KEY_LOG_LEVEL = "log-level"
CONFIG_KEYS = (KEY_API_KEY, KEY_ENDPOINT, KEY_MMDB_PATH, KEY_LOG_LEVEL)
DEFAULT_LOG_LEVEL = "WARNING"

# Local database
MMDB_FILE_NAME = "GeoLite2-City.mmdb"

# Table output
SENTINEL = "💩"
PLAIN_HEADER = ("IP", "Country", "City", "Lat/Lng", "TZ")
COMPARE_HEADER = (
    "IP",
    "Country (F)",
    "Country (M)",
    "City (F)",
    "City (M)",
    "Lat/Lng (F)",
    "Lat/Lng (M)",
    "TZ (F)",
    "TZ (M)",
)
# Country, City, Lat/Lng, TZ
LOCATION_FIELDS = 4
