import os

from .config import Config, db_config_from

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config_from(Config)

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL

ATTENDANCE_THRESHOLD = Config.ATTENDANCE_THRESHOLD
ACADEMIC_YEAR_START_MONTH = Config.ACADEMIC_YEAR_START_MONTH

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = Config.AUTO_SEED_DB
