from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query

from platformwatch.api.v1.schemas.platforms import AllServicePlatforms, ServicePlatforms
from platformwatch.core.config import Settings
from platformwatch.core.deps import get_resolver, get_settings, get_store
from platformwatch.history.distribution import all_platform_distributions, platform_distribution
from platformwatch.history.identity import IdentityResolver
from platformwatch.history.store import SnapshotStore
from platformwatch.history.validation import validate_service_query

router = APIRouter(prefix="/api", tags=["platforms"])


@router.get("/platforms/{day_of_week}/{scheduled_time}", response_model=ServicePlatforms)
def service_platforms(
    day_of_week: str,
    scheduled_time: str,
    destination: Optional[str] = Query(None, description="CRS code; defaults to DEFAULT_DESTINATION"),
    store: SnapshotStore = Depends(get_store),
    resolver: IdentityResolver = Depends(get_resolver),
    settings: Settings = Depends(get_settings),
):
    # Validation runs before any storage access.
    query = validate_service_query(
        day_of_week,
        scheduled_time,
        destination,
        default_destination=settings.default_destination,
    )
    today = resolver.today()

    dist = platform_distribution(
        store,
        day_of_week=query.day_of_week,
        scheduled_time=query.scheduled_time,
        destination=query.destination,
        exclude_date=today,
    )
    body = dist.to_dict()
    return ServicePlatforms(
        service={
            "day_of_week": dist.day_of_week,
            "scheduled_time": dist.scheduled_time,
            "destination": dist.destination,
        },
        excluded_date=today.isoformat(),
        platform_counts=body["platform_counts"],
        total_days=body["total_days"],
    )


@router.get("/all-platforms", response_model=AllServicePlatforms)
def all_platforms(
    store: SnapshotStore = Depends(get_store),
    resolver: IdentityResolver = Depends(get_resolver),
):
    today = resolver.today()
    services = [d.to_dict() for d in all_platform_distributions(store, exclude_date=today)]
    return AllServicePlatforms(
        services=services,
        total_services=len(services),
        excluded_date=today.isoformat(),
        generated_at=datetime.now(timezone.utc).isoformat(),
    )
