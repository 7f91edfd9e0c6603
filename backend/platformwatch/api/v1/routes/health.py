from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from platformwatch.core.deps import get_store
from platformwatch.history.store import SnapshotStore

router = APIRouter(tags=["health"])


@router.get("/health")
def health(store: SnapshotStore = Depends(get_store)):
    return {
        "status": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "schema_revision": store.schema_revision(),
    }
