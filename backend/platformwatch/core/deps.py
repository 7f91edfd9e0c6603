from fastapi import Request

from platformwatch.core.config import Settings
from platformwatch.core.errors import UpstreamUnavailable
from platformwatch.history.identity import IdentityResolver
from platformwatch.history.store import SnapshotStore
from platformwatch.jobs.ingest.sources.base import BaseSource


def get_store(request: Request) -> SnapshotStore:
    return request.app.state.store


def get_resolver(request: Request) -> IdentityResolver:
    return request.app.state.resolver


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_source(request: Request) -> BaseSource:
    source = getattr(request.app.state, "source", None)
    if source is None:
        from platformwatch.jobs.ingest.sources.ldbws.source import LdbwsSource

        try:
            source = LdbwsSource()
        except RuntimeError as e:
            raise UpstreamUnavailable(str(e)) from e
        request.app.state.source = source
    return source
