from datetime import date, datetime, timedelta, timezone

from platformwatch.core.config import Settings
from platformwatch.history.identity import IdentityResolver
from platformwatch.history.store import SnapshotStore
from platformwatch.history.types import RawDepartureUpdate


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, *args) -> datetime:
        self.now = datetime(*args, tzinfo=timezone.utc)
        return self.now


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def open_store(clock: FakeClock) -> SnapshotStore:
    return SnapshotStore.from_url("sqlite://", clock=clock).open()


def resolver_for(clock: FakeClock) -> IdentityResolver:
    return IdentityResolver("Europe/London", clock=clock)


def make_settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        timezone="Europe/London",
        default_origin="PAD",
        default_destination="TLH",
        retention_months=3,
        log_level="WARNING",
        log_file=None,
    )


def departure(
    platform="4",
    *,
    service_date=date(2025, 9, 22),
    scheduled_time="14:45",
    destination="TLH",
    **overrides,
) -> RawDepartureUpdate:
    fields = {
        "service_date": service_date,
        "scheduled_time": scheduled_time,
        "destination": destination,
        "estimated_time": "On time",
        "platform": platform,
        "operator": "Great Western Railway",
        "is_cancelled": False,
        "cancel_reason": None,
    }
    fields.update(overrides)
    return RawDepartureUpdate(**fields)
