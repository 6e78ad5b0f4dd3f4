"""Load the demo courses, subjects and students from database/seed.sql."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import load_settings

from src.course_attendance.course_attendance.database.bootstrap import apply_seed_sql

logger = logging.getLogger("seed_db")


def main() -> int:
    settings = load_settings()
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format="%(levelname)s %(message)s")

    apply_seed_sql(dict(settings.DB_CONFIG), seed_path=REPO_ROOT / "database" / "seed.sql")
    logger.info("Demo data loaded into %s", settings.DB_CONFIG.get("database"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
