"""
Error taxonomy shared by the snapshot history core and its collaborators.
Absence of data is never an error: lookups return None or an empty list.
"""
from __future__ import annotations


class PlatformWatchError(Exception):
    """Base class for every error raised on purpose by platformwatch."""


class ValidationError(PlatformWatchError):
    """Malformed query parameters (day of week, scheduled time). Never retried."""


class InvalidInput(ValidationError):
    """A raw departure update that cannot be resolved to a service identity."""


class StorageFailure(PlatformWatchError):
    """The persistence layer failed; the operation wrote nothing."""


class UpstreamUnavailable(PlatformWatchError):
    """The live departure board could not be fetched or parsed this cycle."""
