"""
Calendar-day keys for the quota ledgers.

Authenticated views are keyed by the server's UTC date while guest
allowances follow the visitor's local date, so close to midnight the two
paths can sit in different quota windows.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional


def server_day_key(now: Optional[datetime] = None) -> str:
    """UTC date used for authenticated view records."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).date().isoformat()


def guest_day_key(tz_offset_min: Optional[int] = None, now: Optional[datetime] = None) -> str:
    """
    Local date of the visitor.

    Args:
        tz_offset_min: Browser timezone offset in minutes (UTC - local, as
            returned by ``Date.getTimezoneOffset``). Falls back to the server's
            local date when missing.
        now: Override for the current instant
    """
    now = now or datetime.now(timezone.utc)
    if isinstance(tz_offset_min, int) and -14 * 60 <= tz_offset_min <= 14 * 60:
        tz = timezone(timedelta(minutes=-tz_offset_min))
        return now.astimezone(tz).date().isoformat()
    return now.astimezone().date().isoformat()


def parse_tz_offset(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None
