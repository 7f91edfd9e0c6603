from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from platformwatch.api.errors import register_error_handlers
from platformwatch.api.v1.routes.departures import router as departures_router
from platformwatch.api.v1.routes.health import router as health_router
from platformwatch.api.v1.routes.platforms import router as platforms_router
from platformwatch.core.config import Settings, load_settings
from platformwatch.core.logging import configure_logging_if_needed
from platformwatch.history.identity import IdentityResolver
from platformwatch.history.store import SnapshotStore
from platformwatch.jobs.ingest.sources.base import BaseSource


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[SnapshotStore] = None,
    resolver: Optional[IdentityResolver] = None,
    source: Optional[BaseSource] = None,
) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging_if_needed(settings.log_level, settings.log_file)
        # A store handed in by the caller stays open; the caller owns its lifecycle.
        s = store or SnapshotStore.from_url(settings.database_url)
        s.open()
        app.state.settings = settings
        app.state.store = s
        app.state.resolver = resolver or IdentityResolver(settings.timezone)
        app.state.source = source
        try:
            yield
        finally:
            if store is None:
                s.close()

    app = FastAPI(title="PlatformWatch API", lifespan=lifespan)

    # Dev-friendly CORS policy: the departure board page calls the API directly.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router, prefix="/api")
    app.include_router(departures_router)
    app.include_router(platforms_router)
    return app


app = create_app()
