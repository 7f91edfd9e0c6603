from dataclasses import dataclass
from datetime import date
from typing import Optional

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass(frozen=True)
class RawDepartureUpdate:
    destination: Optional[str] = None          # CRS
    scheduled_time: Optional[str] = None       # timetable "std"
    estimated_time: Optional[str] = None       # live "etd", may be "On time"
    departure_time: Optional[str] = None       # explicit display time; legacy callers send only this
    platform: Optional[str] = None
    operator: Optional[str] = None
    is_cancelled: Optional[bool] = None
    cancel_reason: Optional[str] = None
    service_date: Optional[date] = None
    day_of_week: Optional[str] = None


@dataclass(frozen=True)
class ResolvedIdentity:
    service_date: date
    day_of_week: str
    destination: str
    scheduled_time: str                        # HH:MM


@dataclass(frozen=True)
class SnapshotCandidate:
    identity: ResolvedIdentity

    estimated_time: Optional[str]
    departure_time: str
    platform: Optional[str]
    operator: Optional[str]
    is_cancelled: bool
    cancel_reason: Optional[str]


@dataclass(frozen=True)
class ServiceQuery:
    day_of_week: str
    scheduled_time: str
    destination: str
