"""Wall-clock helpers.

All timestamps are stored as naive datetimes in the configured timezone so
that comparisons behave the same on PostgreSQL and SQLite.
"""

from datetime import datetime

import pytz

from bloglytics.config import get_settings

settings = get_settings()
tz = pytz.timezone(settings.TIMEZONE)


def now() -> datetime:
    """Current time in the configured timezone, without tzinfo."""
    return datetime.now(tz).replace(tzinfo=None)
