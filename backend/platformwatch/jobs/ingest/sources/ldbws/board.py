import logging
from typing import Optional

from platformwatch.history.types import RawDepartureUpdate

logger = logging.getLogger(__name__)


def as_list(x):
    if x is None:
        return []
    return x if isinstance(x, list) else [x]


def departure_to_update(departure, *, fallback_destination: Optional[str]) -> Optional[RawDepartureUpdate]:
    if not isinstance(departure, dict):
        logger.debug("Departure skipped: not an object (%r)", departure)
        return None

    service = departure.get("service")
    if not service:
        logger.debug("Departure skipped: no service block (crs=%r)", departure.get("crs"))
        return None
    if not isinstance(service, dict):
        logger.debug("Departure skipped: malformed service block (crs=%r)", departure.get("crs"))
        return None

    return RawDepartureUpdate(
        destination=(departure.get("crs") or fallback_destination),
        scheduled_time=service.get("std"),
        estimated_time=service.get("etd"),
        platform=service.get("platform"),
        operator=service.get("operator"),
        is_cancelled=bool(service.get("isCancelled") or False),
        cancel_reason=service.get("cancelReason") or service.get("delayReason"),
    )


def parse_departure_board(payload: dict, *, fallback_destination: Optional[str] = None) -> list[RawDepartureUpdate]:
    """
    GetNextDepartures-style board: {"departures": [{"crs": "TLH", "service": {...}}, ...]}.
    Services carry std/etd/platform/operator/isCancelled/cancelReason/delayReason.
    Entries that are not shaped like that are skipped.
    """
    updates: list[RawDepartureUpdate] = []
    for departure in as_list(payload.get("departures")):
        update = departure_to_update(departure, fallback_destination=fallback_destination)
        if update is not None:
            updates.append(update)
    return updates
