from sqlalchemy import Boolean, Column, Date, DateTime, Index, Integer, Text
from platformwatch.core.db import Base

class ServiceSnapshot(Base):
    __tablename__ = "service_snapshots"

    id = Column(Integer, primary_key=True, autoincrement=True)

    service_date = Column(Date, nullable=False)
    day_of_week = Column(Text, nullable=False)
    destination = Column(Text, nullable=False)

    scheduled_time = Column(Text, nullable=False)   # HH:MM, identity component
    estimated_time = Column(Text, nullable=True)    # null = on schedule
    departure_time = Column(Text, nullable=False)   # effective display time

    platform = Column(Text, nullable=True)
    operator = Column(Text, nullable=True)
    is_cancelled = Column(Boolean, nullable=False, default=False)
    cancel_reason = Column(Text, nullable=True)

    captured_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_service_snapshots_departure_time", "departure_time"),
        Index("ix_service_snapshots_date_time", "service_date", "departure_time"),
        Index("ix_service_snapshots_identity", "service_date", "destination", "scheduled_time"),
        Index("ix_service_snapshots_recurring", "day_of_week", "scheduled_time", "destination"),
        Index("ix_service_snapshots_captured_at", "captured_at"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "service_date": self.service_date.isoformat() if self.service_date else None,
            "day_of_week": self.day_of_week,
            "destination": self.destination,
            "scheduled_time": self.scheduled_time,
            "estimated_time": self.estimated_time,
            "departure_time": self.departure_time,
            "platform": self.platform,
            "operator": self.operator,
            "is_cancelled": bool(self.is_cancelled),
            "cancel_reason": self.cancel_reason,
            "captured_at": self.captured_at.isoformat() if self.captured_at else None,
        }
