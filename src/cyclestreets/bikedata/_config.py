# Default configuration

VERSION = "0.1.0"

API_BASE_URL = "https://api.cyclestreets.net"
API_RESOURCE = "collisions"

TILE_URL = "https://{s}.tile.thunderforest.com/cycle/{z}/{x}/{y}.png"
TILE_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors; '
    '<a href="https://www.thunderforest.com/">Thunderforest</a>'
)

# west,south,east,north; keeps geocoder results near the UK
AUTOCOMPLETE_BBOX = "-6.6577,49.9370,1.7797,57.6924"

DEFAULT_CENTER = (51.505, -0.09)
DEFAULT_ZOOM = 13

REQUEST_TIMEOUT = 30  # seconds
GEOCODER_TIMEOUT = 10  # seconds

# Must match the delimiter the API expects for multi-valued parameters
DELIMITER = ","

# Trailing suffix marking a checkbox as a member of a group, e.g. "vehicles[]"
GROUP_MARKER = "[]"

NULL_PLACEHOLDER = "[null]"

CATEGORY_PROPERTY = "severity"

CATEGORIES = [
    "slight",
    "serious",
    "fatal",
]

ICON_COLOURS = {
    "slight": "#f1c40f",
    "serious": "#e67e22",
    "fatal": "#c0392b",
}

ICON_SIZE = (38, 95)

ENV_PREFIX = "BIKEDATA_"
