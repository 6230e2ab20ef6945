"""Exceptions raised along the watch → dispatch → notify pipeline.

Everything except ``FatalWatchError`` is recovered by the dispatcher: the
event is logged and dropped, and the watch loop keeps running.
"""


class SyncError(Exception):
    """Base class for library sync failures."""


class ConfigError(SyncError):
    """Raised when the configuration file is missing or invalid."""


class ClassificationRejection(SyncError):
    """The event is well formed but cannot be turned into a library request."""


class SerializationFailure(SyncError):
    """The request payload could not be encoded."""


class TransportFailure(SyncError):
    """The request could not be sent or the connection failed."""


class RemoteRejection(SyncError):
    """The library answered with anything other than HTTP 200."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        message = f"Library responded with HTTP {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class FatalWatchError(SyncError):
    """The watch source failed and cannot continue (e.g. root directory removed)."""
