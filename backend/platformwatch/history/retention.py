from __future__ import annotations

import logging

from dateutil.relativedelta import relativedelta

from platformwatch.history.store import DEFAULT_RETENTION, Horizon, SnapshotStore

logger = logging.getLogger(__name__)

SWEEP_INTERVAL_HOURS = 12


class RetentionSweeper:
    """Deletes snapshots older than the retention horizon. Stateless; safe to call repeatedly."""

    def __init__(self, store: SnapshotStore, horizon: Horizon = DEFAULT_RETENTION):
        self.store = store
        self.horizon = horizon

    @classmethod
    def for_months(cls, store: SnapshotStore, months: int) -> "RetentionSweeper":
        return cls(store, relativedelta(months=months))

    def sweep(self) -> int:
        removed = self.store.purge_older_than(self.horizon)
        logger.info("Retention sweep removed=%d horizon=%s", removed, self.horizon)
        return removed
