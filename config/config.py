import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "course-attendance-dev-key"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "course_attendance")
    DB_POOL_SIZE = int(os.environ.get("DB_POOL_SIZE", "0"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Attendance policy
    ATTENDANCE_THRESHOLD = float(os.environ.get("ATTENDANCE_THRESHOLD", "75"))
    ACADEMIC_YEAR_START_MONTH = int(os.environ.get("ACADEMIC_YEAR_START_MONTH", "7"))

    # Dev helpers
    AUTO_INIT_DB = bool(int(os.environ.get("AUTO_INIT_DB", "0")))
    AUTO_SEED_DB = bool(int(os.environ.get("AUTO_SEED_DB", "0")))


def db_config_from(config=Config) -> dict:
    return {
        "host": config.DB_HOST,
        "port": config.DB_PORT,
        "user": config.DB_USER,
        "password": config.DB_PASSWORD,
        "database": config.DB_NAME,
        "pool_size": config.DB_POOL_SIZE,
    }
