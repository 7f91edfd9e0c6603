from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Path, Query

from platformwatch.api.v1.schemas.departures import (
    NextDeparture,
    NextTrainBoard,
    PlatformDepartures,
    RecentDepartures,
    SnapshotOut,
)
from platformwatch.core.deps import get_resolver, get_source, get_store
from platformwatch.core.errors import InvalidInput
from platformwatch.history.identity import IdentityResolver, build_candidate
from platformwatch.history.store import SnapshotStore
from platformwatch.jobs.ingest.loader import ingest_updates
from platformwatch.jobs.ingest.sources.base import BaseSource

router = APIRouter(prefix="/api", tags=["departures"])


@router.get("/next-train/{from_loc}/{to_loc}", response_model=NextTrainBoard)
def next_train(
    from_loc: str = Path(..., min_length=3, max_length=3),
    to_loc: str = Path(..., min_length=3, max_length=3),
    store: SnapshotStore = Depends(get_store),
    resolver: IdentityResolver = Depends(get_resolver),
    source: BaseSource = Depends(get_source),
):
    # UpstreamUnavailable propagates as 503; nothing is written for this request.
    board = source.fetch_board(from_loc, to_loc)
    counts = ingest_updates(store, resolver, board.updates)

    out: list[NextDeparture] = []
    for update in board.updates:
        try:
            identity = resolver.resolve(update)
        except InvalidInput:
            continue
        candidate = build_candidate(update, identity)

        platform = candidate.platform
        last_known = False
        if platform is None:
            platform = store.last_known_platform(identity.service_date, identity.scheduled_time, identity.destination)
            last_known = platform is not None

        out.append(
            NextDeparture(
                service_date=identity.service_date.isoformat(),
                destination=identity.destination,
                scheduled_time=identity.scheduled_time,
                estimated_time=candidate.estimated_time,
                departure_time=candidate.departure_time,
                platform=platform,
                platform_is_last_known=last_known,
                operator=candidate.operator,
                is_cancelled=candidate.is_cancelled,
                cancel_reason=candidate.cancel_reason,
            )
        )

    return NextTrainBoard(
        from_loc=board.from_loc,
        to_loc=board.to_loc,
        generated_at=datetime.now(timezone.utc).isoformat(),
        departures=out,
        ingest=counts,
    )


@router.get("/departures/recent", response_model=RecentDepartures)
def recent_departures(
    limit: int = Query(10, ge=1, le=1000),
    store: SnapshotStore = Depends(get_store),
):
    rows = store.recent(limit)
    departures = [SnapshotOut(**r.to_dict()) for r in rows]
    return RecentDepartures(departures=departures, count=len(departures))


@router.get("/departures/platform/{platform}", response_model=PlatformDepartures)
def departures_by_platform(
    platform: str = Path(..., min_length=1, max_length=10),
    limit: int = Query(50, ge=1, le=1000),
    store: SnapshotStore = Depends(get_store),
):
    rows = store.by_platform(platform, limit)
    departures = [SnapshotOut(**r.to_dict()) for r in rows]
    return PlatformDepartures(platform=platform, departures=departures, count=len(departures))
