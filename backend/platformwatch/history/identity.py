"""
Identity resolution for raw departure updates.

A departure instance is identified by (service_date, destination, scheduled_time). All
calendar derivation happens here, in one configured civil timezone, so service_date and
day_of_week can never disagree around midnight or a clock change.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

import pytz

from platformwatch.core.errors import InvalidInput
from platformwatch.history.clock import Clock, clean_text, normalize_hhmm, utc_now, weekday_name
from platformwatch.history.types import RawDepartureUpdate, ResolvedIdentity, SnapshotCandidate

logger = logging.getLogger(__name__)

# Upstream literals meaning "no deviation from the timetable"
NO_DEVIATION = {"on time"}


def normalize_estimate(etd) -> Optional[str]:
    etd = clean_text(etd)
    if etd is None or etd.lower() in NO_DEVIATION:
        return None
    return normalize_hhmm(etd) or etd


def _coerce_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise InvalidInput(f"service_date must be YYYY-MM-DD, got {value!r}") from None


class IdentityResolver:
    def __init__(self, tz_name: str = "Europe/London", clock: Optional[Clock] = None):
        self.tz = pytz.timezone(tz_name)
        self.clock = clock or utc_now

    def today(self) -> date:
        """Current civil date in the configured timezone."""
        return self.clock().astimezone(self.tz).date()

    def resolve(self, update: RawDepartureUpdate) -> ResolvedIdentity:
        destination = clean_text(update.destination)
        if destination is None:
            raise InvalidInput("departure update has no destination")

        raw_time = clean_text(update.scheduled_time) or clean_text(update.departure_time)
        if raw_time is None:
            raise InvalidInput(f"departure update to {destination} has no scheduled or departure time")
        scheduled_time = normalize_hhmm(raw_time)
        if scheduled_time is None:
            raise InvalidInput(f"departure update to {destination} has unusable time {raw_time!r}")

        service_date = _coerce_date(update.service_date) or self.today()
        day_of_week = weekday_name(service_date)

        supplied = clean_text(update.day_of_week)
        if supplied is not None and supplied != day_of_week:
            logger.warning(
                "Ignoring supplied day_of_week=%r for %s (%s); using %s",
                supplied,
                service_date.isoformat(),
                self.tz.zone,
                day_of_week,
            )

        return ResolvedIdentity(
            service_date=service_date,
            day_of_week=day_of_week,
            destination=destination.upper(),
            scheduled_time=scheduled_time,
        )


def build_candidate(update: RawDepartureUpdate, identity: ResolvedIdentity) -> SnapshotCandidate:
    estimated_time = normalize_estimate(update.estimated_time)

    # departure_time is only an explicit display time when a real scheduled time was supplied;
    # for legacy updates it already served as the scheduled time.
    explicit_display = clean_text(update.departure_time) if clean_text(update.scheduled_time) else None
    departure_time = explicit_display or estimated_time or identity.scheduled_time

    return SnapshotCandidate(
        identity=identity,
        estimated_time=estimated_time,
        departure_time=departure_time,
        platform=clean_text(update.platform),
        operator=clean_text(update.operator),
        is_cancelled=bool(update.is_cancelled),
        cancel_reason=clean_text(update.cancel_reason),
    )
