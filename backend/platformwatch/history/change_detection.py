from __future__ import annotations

from typing import Optional

from platformwatch.history.clock import clean_text
from platformwatch.history.types import SnapshotCandidate

COMPARED_FIELDS = (
    "platform",
    "operator",
    "is_cancelled",
    "cancel_reason",
    "estimated_time",
    "departure_time",
)


def _comparable(field: str, value):
    if field == "is_cancelled":
        return bool(value)
    return clean_text(value)


def changed_fields(candidate: SnapshotCandidate, latest) -> list[str]:
    """
    Fields whose values differ between the candidate and the latest stored snapshot.
    None, missing and blank strings compare equal.
    """
    return [
        f
        for f in COMPARED_FIELDS
        if _comparable(f, getattr(candidate, f)) != _comparable(f, getattr(latest, f, None))
    ]


def should_append(candidate: SnapshotCandidate, latest: Optional[object]) -> bool:
    """
    Append when there is no prior snapshot for the instance, or when any compared field
    changed relative to the immediately preceding snapshot. Older identical states are not
    consulted, so a 4 -> 5 -> 4 platform flap appends three rows.
    """
    if latest is None:
        return True
    return bool(changed_fields(candidate, latest))
