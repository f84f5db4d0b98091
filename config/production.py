import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "guard_shifts"),
}

SHIFT_STORE = "mysql"

BIOMETRIC_TOLERANCE_MINUTES = int(os.getenv("BIOMETRIC_TOLERANCE_MINUTES", "15"))
APP_START_WINDOW_MINUTES = int(os.getenv("APP_START_WINDOW_MINUTES", "30"))

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
