import logging
from typing import Iterable, Optional

from platformwatch.core.errors import InvalidInput
from platformwatch.history.change_detection import changed_fields, should_append
from platformwatch.history.identity import IdentityResolver, build_candidate
from platformwatch.history.store import SnapshotStore
from platformwatch.history.types import RawDepartureUpdate
from platformwatch.models.service_snapshots import ServiceSnapshot

logger = logging.getLogger(__name__)


def ingest_update(
    store: SnapshotStore,
    resolver: IdentityResolver,
    update: RawDepartureUpdate,
) -> Optional[ServiceSnapshot]:
    """
    Resolve -> compare with the latest stored snapshot -> append if anything changed.

    Returns the new row, or None when the update matched the latest snapshot.
    Read and append are separate sessions: callers serialise ingestion per service.
    """
    identity = resolver.resolve(update)
    candidate = build_candidate(update, identity)

    latest = store.most_recent(identity.service_date, identity.destination, identity.scheduled_time)
    if not should_append(candidate, latest):
        logger.debug(
            "Unchanged %s %s to %s; skipped",
            identity.service_date.isoformat(),
            identity.scheduled_time,
            identity.destination,
        )
        return None

    if latest is not None:
        logger.debug(
            "Changed %s for %s to %s",
            changed_fields(candidate, latest),
            identity.scheduled_time,
            identity.destination,
        )
    return store.append(candidate)


def ingest_updates(
    store: SnapshotStore,
    resolver: IdentityResolver,
    updates: Iterable[RawDepartureUpdate],
) -> dict:
    """
    Ingest a batch of updates in order. Unresolvable updates are counted and skipped;
    storage failures propagate to the caller.
    """
    total = 0
    inserted = 0
    skipped = 0
    invalid = 0

    for update in updates:
        total += 1
        try:
            row = ingest_update(store, resolver, update)
        except InvalidInput as e:
            invalid += 1
            logger.warning("Skipping unusable departure update: %s", e)
            continue

        if row is None:
            skipped += 1
        else:
            inserted += 1

    return {"total": total, "inserted": inserted, "skipped": skipped, "invalid": invalid}
