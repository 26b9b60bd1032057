import os
from datetime import datetime
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "America/New_York")


def local_tz() -> ZoneInfo:
    return ZoneInfo(DEFAULT_TIMEZONE)


def local_now() -> datetime:
    """Timezone-aware current time in the assistant's home timezone."""
    return datetime.now(local_tz())


def ensure_aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=local_tz())
