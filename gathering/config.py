# env vars + constants
import os
from datetime import date, datetime
from zoneinfo import ZoneInfo

GROUP_ID = os.getenv("GROUP_ID", "group1")
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Polls close at the end of their end_date in this zone.
TIMEZONE = os.getenv("TIMEZONE", "UTC")

MAX_NAME_LENGTH = int(os.getenv("MAX_NAME_LENGTH", "40"))
MAX_OPTIONS = int(os.getenv("MAX_OPTIONS", "20"))


def today() -> date:
    return datetime.now(ZoneInfo(TIMEZONE)).date()
