"""Indexes for identity lookups, recurring-service history and retention

Also backfills day_of_week where legacy rows left it empty, then makes it NOT NULL.

Revision ID: 0003
Revises: 0002
"""
from datetime import date
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0003"
down_revision: Union[str, None] = "0002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def _backfill_day_of_week() -> None:
    conn = op.get_bind()
    snapshots = sa.table(
        "service_snapshots",
        sa.column("id", sa.Integer()),
        sa.column("service_date", sa.Date()),
        sa.column("day_of_week", sa.Text()),
    )
    rows = conn.execute(
        sa.select(snapshots.c.id, snapshots.c.service_date).where(snapshots.c.day_of_week.is_(None))
    ).all()
    for row_id, service_date in rows:
        if isinstance(service_date, str):
            service_date = date.fromisoformat(service_date)
        conn.execute(
            snapshots.update()
            .where(snapshots.c.id == row_id)
            .values(day_of_week=_WEEKDAYS[service_date.weekday()])
        )


def upgrade() -> None:
    _backfill_day_of_week()

    with op.batch_alter_table("service_snapshots") as batch:
        batch.alter_column("day_of_week", existing_type=sa.Text(), nullable=False)

    op.create_index("ix_service_snapshots_departure_time", "service_snapshots", ["departure_time"])
    op.create_index("ix_service_snapshots_date_time", "service_snapshots", ["service_date", "departure_time"])
    op.create_index(
        "ix_service_snapshots_identity", "service_snapshots", ["service_date", "destination", "scheduled_time"]
    )
    op.create_index(
        "ix_service_snapshots_recurring", "service_snapshots", ["day_of_week", "scheduled_time", "destination"]
    )
    op.create_index("ix_service_snapshots_captured_at", "service_snapshots", ["captured_at"])


def downgrade() -> None:
    op.drop_index("ix_service_snapshots_captured_at", table_name="service_snapshots")
    op.drop_index("ix_service_snapshots_recurring", table_name="service_snapshots")
    op.drop_index("ix_service_snapshots_identity", table_name="service_snapshots")
    op.drop_index("ix_service_snapshots_date_time", table_name="service_snapshots")
    op.drop_index("ix_service_snapshots_departure_time", table_name="service_snapshots")
    with op.batch_alter_table("service_snapshots") as batch:
        batch.alter_column("day_of_week", existing_type=sa.Text(), nullable=True)
