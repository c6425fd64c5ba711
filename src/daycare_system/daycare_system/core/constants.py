"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_HOURLY_RATE = "15"
DEFAULT_TAX_RATE = "0.1"
DEFAULT_FULL_DAY_HOURS = "8"
DEFAULT_FULL_DAY_RATE = "100"
DEFAULT_INVOICE_DUE_DAYS = 15

INVOICE_NUMBER_PREFIX = "INV-"
INVOICE_NUMBER_WIDTH = 6

DEFAULT_HISTORY_LIMIT = 30
MIN_PASSWORD_LENGTH = 6

CHILD_ACTIVITY_LIMIT = 50
NOTE_PREVIEW_LENGTH = 100
DEFAULT_NOTE_CATEGORY = "general"

# Storage precision of line amounts (DECIMAL(14,4))
LINE_AMOUNT_PLACES = "0.0001"
