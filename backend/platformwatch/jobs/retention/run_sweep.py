import argparse

from platformwatch.core.config import load_settings
from platformwatch.core.logging import configure_logging_if_needed
from platformwatch.history.retention import RetentionSweeper
from platformwatch.history.store import SnapshotStore


def main():
    settings = load_settings()

    p = argparse.ArgumentParser(description="Delete service_snapshots older than the retention horizon")
    p.add_argument("--months", type=int, default=settings.retention_months)
    args = p.parse_args()

    configure_logging_if_needed(settings.log_level, settings.log_file)

    with SnapshotStore.from_url(settings.database_url) as store:
        removed = RetentionSweeper.for_months(store, args.months).sweep()
        print({"removed": removed, "months": args.months})


if __name__ == "__main__":
    main()
