from typing import Optional

from pydantic import BaseModel, Field


class SnapshotOut(BaseModel):
    id: int
    service_date: str = Field(..., description="YYYY-MM-DD, Europe/London civil date")
    day_of_week: str
    destination: str
    scheduled_time: str
    estimated_time: Optional[str] = None
    departure_time: str
    platform: Optional[str] = None
    operator: Optional[str] = None
    is_cancelled: bool
    cancel_reason: Optional[str] = None
    captured_at: str


class RecentDepartures(BaseModel):
    departures: list[SnapshotOut]
    count: int


class PlatformDepartures(BaseModel):
    platform: str
    departures: list[SnapshotOut]
    count: int


class NextDeparture(BaseModel):
    service_date: str
    destination: str
    scheduled_time: str
    estimated_time: Optional[str] = None
    departure_time: str

    platform: Optional[str] = None
    platform_is_last_known: bool = False

    operator: Optional[str] = None
    is_cancelled: bool
    cancel_reason: Optional[str] = None


class IngestCounts(BaseModel):
    total: int
    inserted: int
    skipped: int
    invalid: int


class NextTrainBoard(BaseModel):
    from_loc: str
    to_loc: str
    generated_at: str
    departures: list[NextDeparture]
    ingest: IngestCounts
