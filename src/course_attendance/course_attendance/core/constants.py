"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ATTENDANCE_THRESHOLD = 75.0
DEFAULT_ACADEMIC_YEAR_START_MONTH = 7
MIN_MERGE_FINAL_COUNT = 1
