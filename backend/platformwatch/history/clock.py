import re
from datetime import date, datetime, timezone
from typing import Callable, Optional

from platformwatch.history.types import WEEKDAYS

Clock = Callable[[], datetime]

# H:MM or HH:MM, 24-hour
HHMM_RE = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def clean_text(value) -> Optional[str]:
    """Blank and missing are the same absent value."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def normalize_hhmm(value) -> Optional[str]:
    """
    "9:05" -> "09:05". Returns None for anything that is not a 24-hour H:MM / HH:MM time.
    """
    value = clean_text(value)
    if value is None:
        return None
    m = HHMM_RE.match(value)
    if not m:
        return None
    return f"{int(m.group(1)):02d}:{m.group(2)}"


def weekday_name(d: date) -> str:
    # Python weekday: Mon=0..Sun=6
    return WEEKDAYS[d.weekday()]
