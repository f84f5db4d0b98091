import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "guard_shifts"),
}

# "mysql" or "memory"
SHIFT_STORE = os.getenv("SHIFT_STORE", "mysql")

BIOMETRIC_TOLERANCE_MINUTES = int(os.getenv("BIOMETRIC_TOLERANCE_MINUTES", "15"))
APP_START_WINDOW_MINUTES = int(os.getenv("APP_START_WINDOW_MINUTES", "30"))

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
