import argparse
import logging
import time
from typing import Optional

from platformwatch.core.config import load_settings
from platformwatch.core.errors import StorageFailure, UpstreamUnavailable
from platformwatch.core.logging import configure_logging_if_needed
from platformwatch.history.identity import IdentityResolver
from platformwatch.history.retention import SWEEP_INTERVAL_HOURS, RetentionSweeper
from platformwatch.history.store import SnapshotStore
from platformwatch.jobs.ingest.loader import ingest_updates
from platformwatch.jobs.ingest.sources.base import BaseSource
from platformwatch.jobs.ingest.sources.ldbws.source import LdbwsSource

logger = logging.getLogger(__name__)


def poll_once(
    store: SnapshotStore,
    resolver: IdentityResolver,
    source: BaseSource,
    *,
    from_loc: str,
    to_loc: str,
) -> Optional[dict]:
    """
    One polling cycle. Returns ingest counters, or None when nothing could be stored this cycle.
    Upstream and storage failures are logged; the loop keeps going.
    """
    try:
        board = source.fetch_board(from_loc, to_loc)
    except UpstreamUnavailable as e:
        logger.warning("No board this cycle %s->%s: %s", from_loc, to_loc, e)
        return None

    try:
        result = ingest_updates(store, resolver, board.updates)
    except StorageFailure:
        logger.exception("Storage failure while ingesting %s->%s", from_loc, to_loc)
        return None

    logger.info("Poll %s->%s result=%s", from_loc, to_loc, result)
    return result


def run_poller(
    store: SnapshotStore,
    resolver: IdentityResolver,
    source: BaseSource,
    sweeper: RetentionSweeper,
    *,
    from_loc: str,
    to_loc: str,
    interval_seconds: float,
    sweep_interval_hours: float = SWEEP_INTERVAL_HOURS,
    max_cycles: Optional[int] = None,
    sleep=time.sleep,
    monotonic=time.monotonic,
) -> int:
    """Poll until max_cycles (forever when None). Returns the number of cycles run."""
    sweep_every = sweep_interval_hours * 3600.0
    last_sweep: Optional[float] = None
    cycles = 0

    while max_cycles is None or cycles < max_cycles:
        cycles += 1
        poll_once(store, resolver, source, from_loc=from_loc, to_loc=to_loc)

        now = monotonic()
        if last_sweep is None or now - last_sweep >= sweep_every:
            try:
                sweeper.sweep()
            except StorageFailure:
                logger.exception("Retention sweep failed")
            last_sweep = now

        if max_cycles is None or cycles < max_cycles:
            sleep(interval_seconds)

    return cycles


def main():
    settings = load_settings()

    p = argparse.ArgumentParser(description="Poll the live departure board into service_snapshots")
    p.add_argument("--from-loc", default=settings.default_origin, help="CRS code (e.g. PAD)")
    p.add_argument("--to-loc", default=settings.default_destination, help="CRS code (e.g. TLH)")
    p.add_argument("--interval-seconds", type=float, default=60.0)
    p.add_argument("--sweep-interval-hours", type=float, default=float(SWEEP_INTERVAL_HOURS))
    p.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    args = p.parse_args()

    configure_logging_if_needed(settings.log_level, settings.log_file)

    store = SnapshotStore.from_url(settings.database_url)
    try:
        store.open()
        run_poller(
            store,
            IdentityResolver(settings.timezone),
            LdbwsSource(),
            RetentionSweeper.for_months(store, settings.retention_months),
            from_loc=args.from_loc,
            to_loc=args.to_loc,
            interval_seconds=args.interval_seconds,
            sweep_interval_hours=args.sweep_interval_hours,
            max_cycles=1 if args.once else None,
        )
    except KeyboardInterrupt:
        logger.info("Shutting down poller...")
    finally:
        store.close()


if __name__ == "__main__":
    main()
