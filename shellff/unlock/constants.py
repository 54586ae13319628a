from datetime import timedelta

DEFAULT_COVER_ART = "/api/placeholder/400/400"
UNKNOWN_ARTIST_NAME = "Unknown Artist"

ACCESS_SOURCE_UNLOCK_CODE = "UNLOCK_CODE"

ATTEMPT_RESULT_ACCEPTED = "ACCEPTED"
LOGGED_ATTEMPT_RESULTS = (
    "ACCEPTED",
    "INVALID_FORMAT",
    "NOT_FOUND",
    "ALREADY_REDEEMED",
    "ALREADY_OWNED",
    "RATE_LIMITED",
)
FAILED_ATTEMPT_RESULTS = ("INVALID_FORMAT", "NOT_FOUND", "ALREADY_REDEEMED")
ATTEMPTED_CODE_MAX_LENGTH = 32

REDEEM_RATE_LIMIT_WINDOW = timedelta(hours=1)
REDEEM_MAX_FAILED_ATTEMPTS = 10

DEFAULT_BATCH_MAX = 10_000
