SECRET_KEY = "test-secret"

DB_CONFIG = None
SHIFT_STORE = "memory"

BIOMETRIC_TOLERANCE_MINUTES = 15
APP_START_WINDOW_MINUTES = 30

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
