"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# Slug generation
MAX_SLUG_LENGTH = 63

# String field lengths
MAX_NAME_LENGTH = 255
MAX_TITLE_LENGTH = 255
MAX_ICON_LENGTH = 512
MAX_LOCALE_LENGTH = 16
MAX_CURRENCY_LENGTH = 8
MAX_TG_ID_LENGTH = 64

# Categories
DEFAULT_LOCALE = "en"

# Shop lifecycle
SHOP_RETENTION_DAYS = 30
