from .config import Config, db_config_from

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from(Config)

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

ATTENDANCE_THRESHOLD = 75.0
ACADEMIC_YEAR_START_MONTH = 7

AUTO_INIT_DB = False
AUTO_SEED_DB = False
