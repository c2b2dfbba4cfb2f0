"""Internal constants shared across the library."""

LOT_IDS: tuple[str, ...] = ("lot1", "lot2")
COMMENT_LOTS: tuple[str, ...] = (*LOT_IDS, "all")

STATE_KEY = "state"
LOCK_KEY_PREFIX = "lock"

# ------------------------------------------------------------------
# Capacity of the bounded sequences in the state document
# ------------------------------------------------------------------

MAX_PRICES = 400
MAX_SERIES = 500
MAX_COMMENTS = 200

# ------------------------------------------------------------------
# Input limits
# ------------------------------------------------------------------

MAX_PRICE = 5_000_000
MAX_NAME_LENGTH = 30
MIN_COMMENT_LENGTH = 3
MAX_COMMENT_LENGTH = 800

# ------------------------------------------------------------------
# Identity
# ------------------------------------------------------------------

COOKIE_NAME = "hsid"
COOKIE_MAX_AGE = 365 * 24 * 3600
TOKEN_LENGTH = 24
COMMENT_ID_BYTES = 6
FINGERPRINT_SEPARATOR = "|"
CLIENT_IP_HEADER = "CF-Connecting-IP"


def lock_key(lot: str, fingerprint: str) -> str:
    """Storage key of the vote lock for *lot* and *fingerprint*."""
    return f"{LOCK_KEY_PREFIX}:{lot}:{fingerprint}"
