import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "geoface_test"),
}

ADMIN_PASSWORD = "test-admin"

GEMINI_API_KEY = ""
GEMINI_MODEL = "gemini-2.5-flash"
VERIFIER_TIMEOUT_SECONDS = 5.0

SELFIE_FALLBACK_POLICY = "fail_open"

TELEGRAM_BOT_TOKEN = ""

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

MAX_CONTENT_LENGTH = 2 * 1024 * 1024

AUTO_INIT_DB = False
AUTO_SEED_DB = False
