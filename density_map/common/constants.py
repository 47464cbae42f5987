"""Application constants."""

COMMANDS = ("aggregate", "pincodes")
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20

REQUIRED_FIELDS = ("start_gps", "end_gps", "start_area_code", "end_area_code")
NULL_SENTINELS = ("null", "undefined")
UNKNOWN_PINCODE = "Unknown"
FINGERPRINT_PRECISION = 5

REFERENCE_ZOOM = 12.0
BASE_RADIUS_MULTIPLIER = 120.0
MIN_RADIUS = 50.0
MAX_RADIUS = 1500.0

# (tier, exclusive lower bound, colour), deepest first.
DEFAULT_TIERS = (
    (5, 1000, "#006400"),
    (4, 500, "#32CD32"),
    (3, 100, "#FFD700"),
    (2, 20, "#FFA500"),
)
BASE_TIER = (1, "#FF0000")

DISPLAY_CAP = 1000
SAMPLE_DISPLAY_LIMIT = 3

JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "event",
    "status",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
