import os

from .config import Config, db_config_from

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config_from(Config)

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()

ATTENDANCE_THRESHOLD = Config.ATTENDANCE_THRESHOLD
ACADEMIC_YEAR_START_MONTH = Config.ACADEMIC_YEAR_START_MONTH

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
