"""
Append-only store of departure snapshots.

The store is an explicit handle: build it around an engine, open() it (which migrates the
schema to head), and close() it when done. Every operation runs in its own short session;
SQLAlchemy errors surface as StorageFailure and nothing is partially written.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime, timedelta, timezone
from typing import Iterator, Optional, Union

from dateutil.relativedelta import relativedelta
from sqlalchemy import delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from platformwatch.core import migrations
from platformwatch.core.db import create_db_engine
from platformwatch.core.errors import StorageFailure
from platformwatch.history.clock import Clock, utc_now
from platformwatch.history.types import SnapshotCandidate
from platformwatch.models.service_snapshots import ServiceSnapshot

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = relativedelta(months=3)

Horizon = Union[relativedelta, timedelta]


def _as_utc(ts: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is written in UTC.
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


class SnapshotStore:
    def __init__(self, engine: Engine, clock: Optional[Clock] = None):
        self.engine = engine
        self.clock = clock or utc_now
        self._sessions = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
        self._open = False

    @classmethod
    def from_url(cls, database_url: str, clock: Optional[Clock] = None) -> "SnapshotStore":
        return cls(create_db_engine(database_url), clock=clock)

    # --- lifecycle ---

    def open(self, migrate: bool = True) -> "SnapshotStore":
        if self._open:
            return self
        if migrate:
            try:
                migrations.upgrade(self.engine)
            except SQLAlchemyError as e:
                raise StorageFailure(f"schema migration failed: {e}") from e
        self._open = True
        logger.info("Snapshot store open url=%s", self.engine.url.render_as_string(hide_password=True))
        return self

    def close(self) -> None:
        if not self._open:
            return
        self.engine.dispose()
        self._open = False
        logger.info("Snapshot store closed")

    def __enter__(self) -> "SnapshotStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._open

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Commit on success, roll back on any error, always close."""
        if not self._open:
            raise StorageFailure("snapshot store is not open")
        db = self._sessions()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageFailure(str(e)) from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def schema_revision(self) -> Optional[str]:
        try:
            return migrations.current_revision(self.engine)
        except SQLAlchemyError as e:
            raise StorageFailure(str(e)) from e

    # --- writes ---

    def append(self, candidate: SnapshotCandidate) -> ServiceSnapshot:
        ident = candidate.identity
        row = ServiceSnapshot(
            service_date=ident.service_date,
            day_of_week=ident.day_of_week,
            destination=ident.destination,
            scheduled_time=ident.scheduled_time,
            estimated_time=candidate.estimated_time,
            departure_time=candidate.departure_time,
            platform=candidate.platform,
            operator=candidate.operator,
            is_cancelled=candidate.is_cancelled,
            cancel_reason=candidate.cancel_reason,
            captured_at=_as_utc(self.clock()),
        )
        with self.session() as db:
            db.add(row)
            db.flush()

        logger.info(
            "Stored new snapshot for %s %s (%s) to %s platform=%s cancelled=%s",
            ident.service_date.isoformat(),
            ident.scheduled_time,
            candidate.departure_time,
            ident.destination,
            candidate.platform,
            candidate.is_cancelled,
        )
        return row

    def purge_older_than(self, horizon: Horizon = DEFAULT_RETENTION) -> int:
        """Hard-delete snapshots captured before now - horizon. Rows at the cutoff survive."""
        cutoff = _as_utc(self.clock()) - horizon
        with self.session() as db:
            res = db.execute(
                delete(ServiceSnapshot)
                .where(ServiceSnapshot.captured_at < cutoff)
                .execution_options(synchronize_session=False)
            )
            removed = int(res.rowcount or 0)

        logger.debug("Cleaned up %d snapshots captured before %s", removed, cutoff.isoformat())
        return removed

    # --- reads ---

    def most_recent(self, service_date: date, destination: str, scheduled_time: str) -> Optional[ServiceSnapshot]:
        q = (
            select(ServiceSnapshot)
            .where(
                ServiceSnapshot.service_date == service_date,
                ServiceSnapshot.destination == destination,
                ServiceSnapshot.scheduled_time == scheduled_time,
            )
            .order_by(ServiceSnapshot.captured_at.desc(), ServiceSnapshot.id.desc())
            .limit(1)
        )
        with self.session() as db:
            return db.execute(q).scalars().first()

    def last_known_platform(self, service_date: date, scheduled_time: str, destination: str) -> Optional[str]:
        q = (
            select(ServiceSnapshot.platform)
            .where(
                ServiceSnapshot.service_date == service_date,
                ServiceSnapshot.destination == destination,
                ServiceSnapshot.scheduled_time == scheduled_time,
                ServiceSnapshot.platform.is_not(None),
            )
            .order_by(ServiceSnapshot.captured_at.desc(), ServiceSnapshot.id.desc())
            .limit(1)
        )
        with self.session() as db:
            return db.execute(q).scalar_one_or_none()

    def recent(self, limit: Optional[int] = None) -> list[ServiceSnapshot]:
        q = select(ServiceSnapshot).order_by(ServiceSnapshot.captured_at.desc(), ServiceSnapshot.id.desc())
        if limit:
            q = q.limit(limit)
        with self.session() as db:
            return list(db.execute(q).scalars().all())

    def by_platform(self, platform: str, limit: Optional[int] = None) -> list[ServiceSnapshot]:
        """Snapshots that recorded this platform, newest first."""
        q = (
            select(ServiceSnapshot)
            .where(ServiceSnapshot.platform == platform)
            .order_by(ServiceSnapshot.captured_at.desc(), ServiceSnapshot.id.desc())
        )
        if limit:
            q = q.limit(limit)
        with self.session() as db:
            return list(db.execute(q).scalars().all())
