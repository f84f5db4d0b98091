"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_BIOMETRIC_TOLERANCE_MINUTES = 15
DEFAULT_APP_START_WINDOW_MINUTES = 30
DEFAULT_SHIFT_STORE = "mysql"
