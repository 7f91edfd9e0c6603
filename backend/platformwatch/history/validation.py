from __future__ import annotations

from typing import Optional

from platformwatch.core.errors import ValidationError
from platformwatch.history.clock import clean_text, normalize_hhmm
from platformwatch.history.types import WEEKDAYS, ServiceQuery


def validate_service_query(
    day_of_week: str,
    scheduled_time: str,
    destination: Optional[str] = None,
    *,
    default_destination: str = "TLH",
) -> ServiceQuery:
    if day_of_week not in WEEKDAYS:
        raise ValidationError(f"day_of_week must be one of {', '.join(WEEKDAYS)}; got {day_of_week!r}")

    hhmm = normalize_hhmm(scheduled_time)
    if hhmm is None or clean_text(scheduled_time) != scheduled_time:
        raise ValidationError(f"scheduled_time must be HH:MM (24-hour); got {scheduled_time!r}")

    return ServiceQuery(
        day_of_week=day_of_week,
        scheduled_time=hhmm,
        destination=(clean_text(destination) or default_destination).upper(),
    )
