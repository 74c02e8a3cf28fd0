"""Application-wide constants for the tutoring-center backend."""

from __future__ import annotations

BRAND_NAME = "TutorCenter"
API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = "Recurring session generation and conflict detection for tutoring centers"
API_VERSION = "1.0.0"

# ISO weekday numbering (Monday=1 ... Sunday=7)
ISO_WEEKDAYS = range(1, 8)

# Local wall-clock input formats
DATE_ONLY_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_HH_MM_PATTERN = r"^(?:[01]\d|2[0-3]):[0-5]\d$"

# Commit responses echo this many created session ids
CREATED_SAMPLE_ID_LIMIT = 10
