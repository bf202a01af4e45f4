import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "face_access"),
}

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Organization time zone as a fixed UTC offset (Bogotá: -5)
ORG_UTC_OFFSET_HOURS = float(os.getenv("ORG_UTC_OFFSET_HOURS", "-5"))
# Local time given to check-outs synthesized for a forgotten check-out
AUTO_CLOSE_TIME = os.getenv("AUTO_CLOSE_TIME", "23:59:59")
EDIT_AUTO_GENERATED_ONLY = bool(int(os.getenv("EDIT_AUTO_GENERATED_ONLY", "0")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FORMAT = os.getenv("LOG_FORMAT", "%(asctime)s %(levelname)s %(name)s: %(message)s")
