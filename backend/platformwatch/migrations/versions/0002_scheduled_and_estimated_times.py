"""Split scheduled/estimated times out of departure_time

Rows written before this revision only carried departure_time; it becomes their scheduled_time.

Revision ID: 0002
Revises: 0001
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("service_snapshots", sa.Column("scheduled_time", sa.Text(), nullable=True))
    op.add_column("service_snapshots", sa.Column("estimated_time", sa.Text(), nullable=True))

    op.execute(sa.text("UPDATE service_snapshots SET scheduled_time = departure_time WHERE scheduled_time IS NULL"))

    with op.batch_alter_table("service_snapshots") as batch:
        batch.alter_column("scheduled_time", existing_type=sa.Text(), nullable=False)


def downgrade() -> None:
    with op.batch_alter_table("service_snapshots") as batch:
        batch.drop_column("estimated_time")
        batch.drop_column("scheduled_time")
