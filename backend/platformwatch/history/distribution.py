"""
Historical platform distribution for recurring departures.

A recurring departure is (day_of_week, scheduled_time, destination). Each service_date
contributes exactly one vote: the platform of its last captured snapshot with a platform.
The excluded date (normally today) is left out because its final platform is not known yet.

Steps, all in SQL:
  1. filter to the recurring departure(s)
  2. drop the excluded service_date
  3. drop snapshots without a platform
  4. ROW_NUMBER() per service_date by captured_at DESC, keep rank 1
  5. count days per platform
Ordering is done in Python so platform "10" sorts after "2".
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import Date, bindparam, text

from platformwatch.history.store import SnapshotStore
from platformwatch.history.types import WEEKDAYS


@dataclass(frozen=True)
class PlatformCount:
    platform: str
    count: int

    def to_dict(self) -> dict:
        return {"platform": self.platform, "count": self.count}


@dataclass(frozen=True)
class ServiceDistribution:
    day_of_week: str
    scheduled_time: str
    destination: str
    platform_counts: list[PlatformCount] = field(default_factory=list)

    @property
    def total_days(self) -> int:
        return sum(p.count for p in self.platform_counts)

    def to_dict(self) -> dict:
        return {
            "day_of_week": self.day_of_week,
            "scheduled_time": self.scheduled_time,
            "destination": self.destination,
            "platform_counts": [p.to_dict() for p in self.platform_counts],
            "total_days": self.total_days,
        }


_SERVICE_DISTRIBUTION_SQL = text(
    """
    WITH latest_per_day AS (
        SELECT
            s.platform,
            ROW_NUMBER() OVER (
                PARTITION BY s.service_date
                ORDER BY s.captured_at DESC, s.id DESC
            ) AS rn
        FROM service_snapshots s
        WHERE s.day_of_week = :day_of_week
          AND s.scheduled_time = :scheduled_time
          AND s.destination = :destination
          AND s.service_date <> :exclude_date
          AND s.platform IS NOT NULL
    )
    SELECT platform, COUNT(*) AS days
    FROM latest_per_day
    WHERE rn = 1
    GROUP BY platform
    """
).bindparams(bindparam("exclude_date", type_=Date))


_ALL_SERVICES_DISTRIBUTION_SQL = text(
    """
    WITH latest_per_day AS (
        SELECT
            s.day_of_week,
            s.scheduled_time,
            s.destination,
            s.platform,
            ROW_NUMBER() OVER (
                PARTITION BY s.day_of_week, s.scheduled_time, s.destination, s.service_date
                ORDER BY s.captured_at DESC, s.id DESC
            ) AS rn
        FROM service_snapshots s
        WHERE s.service_date <> :exclude_date
          AND s.platform IS NOT NULL
    )
    SELECT day_of_week, scheduled_time, destination, platform, COUNT(*) AS days
    FROM latest_per_day
    WHERE rn = 1
    GROUP BY day_of_week, scheduled_time, destination, platform
    """
).bindparams(bindparam("exclude_date", type_=Date))


_LEADING_NUMBER = re.compile(r"^([0-9]+)(.*)$")


def platform_sort_key(platform: str) -> tuple:
    """Numeric platforms first in numeric order ("2" < "10" < "10A"), then the rest by value."""
    m = _LEADING_NUMBER.match(platform)
    if m:
        return (0, int(m.group(1)), m.group(2), platform)
    return (1, 0, platform, platform)


def _weekday_index(day_of_week: str) -> int:
    try:
        return WEEKDAYS.index(day_of_week)
    except ValueError:
        return len(WEEKDAYS)


def _sorted_counts(counts: dict[str, int]) -> list[PlatformCount]:
    return [PlatformCount(platform=p, count=counts[p]) for p in sorted(counts, key=platform_sort_key)]


def platform_distribution(
    store: SnapshotStore,
    *,
    day_of_week: str,
    scheduled_time: str,
    destination: str,
    exclude_date: date,
) -> ServiceDistribution:
    with store.session() as db:
        rows = db.execute(
            _SERVICE_DISTRIBUTION_SQL,
            {
                "day_of_week": day_of_week,
                "scheduled_time": scheduled_time,
                "destination": destination,
                "exclude_date": exclude_date,
            },
        ).mappings().all()

    counts = {r["platform"]: int(r["days"]) for r in rows}
    return ServiceDistribution(
        day_of_week=day_of_week,
        scheduled_time=scheduled_time,
        destination=destination,
        platform_counts=_sorted_counts(counts),
    )


def all_platform_distributions(store: SnapshotStore, *, exclude_date: date) -> list[ServiceDistribution]:
    with store.session() as db:
        rows = db.execute(_ALL_SERVICES_DISTRIBUTION_SQL, {"exclude_date": exclude_date}).mappings().all()

    by_service: dict[tuple[str, str, str], dict[str, int]] = {}
    for r in rows:
        key = (r["day_of_week"], r["scheduled_time"], r["destination"])
        by_service.setdefault(key, {})[r["platform"]] = int(r["days"])

    ordered = sorted(by_service, key=lambda k: (_weekday_index(k[0]), k[1], k[2]))
    return [
        ServiceDistribution(
            day_of_week=dow,
            scheduled_time=hhmm,
            destination=dest,
            platform_counts=_sorted_counts(by_service[(dow, hhmm, dest)]),
        )
        for dow, hhmm, dest in ordered
    ]
