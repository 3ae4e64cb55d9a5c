"""Convert free-text job durations into minutes."""

import re
from typing import Optional

DEFAULT_MINUTES = 60
HALF_DAY_MINUTES = 240
FULL_DAY_MINUTES = 480
MULTIPLE_DAYS_MINUTES = 1440

_HOURS_PATTERN = re.compile(r"(?<![\d.])(\d+)\s*hours?\b", re.IGNORECASE)


def parse_minutes(duration: Optional[str]) -> int:
    """
    Parse a duration descriptor such as "2 hours" or "Half day".

    Rules are checked in order; anything unrecognised falls back to
    DEFAULT_MINUTES. Never raises.

    Args:
        duration: Descriptor as entered on the job form, or None

    Returns:
        Duration in minutes
    """
    if not duration or not duration.strip():
        return DEFAULT_MINUTES

    hours = _HOURS_PATTERN.search(duration)
    if hours:
        return int(hours.group(1)) * 60

    text = duration.lower()
    if "half day" in text:
        return HALF_DAY_MINUTES
    if "full day" in text:
        return FULL_DAY_MINUTES
    if "multiple days" in text:
        return MULTIPLE_DAYS_MINUTES

    return DEFAULT_MINUTES
