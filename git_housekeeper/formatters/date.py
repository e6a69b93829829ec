"""Date and time formatting utilities."""

from datetime import datetime, tzinfo
from typing import Optional

from git_housekeeper.constants import UNKNOWN


def format_commit_date(date: Optional[datetime], tz: Optional[tzinfo] = None) -> str:
    """
    Format a commit time as a short local timestamp, e.g. ``3/7/24 2:05 PM``.

    Args:
        date: Commit time (None when unknown)
        tz: Time zone to render in (defaults to the local zone)

    Returns:
        Formatted date string, or ``N/A`` when unknown
    """
    if date is None:
        return UNKNOWN

    local = date.astimezone(tz)
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{local.month}/{local.day}/{local:%y} {hour}:{local:%M} {meridiem}"
