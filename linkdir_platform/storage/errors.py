"""
Error taxonomy for the link-directory storage layer.

Every adapter translates its driver's native exceptions into these types so
callers (HTTP handlers, scripts) can branch on meaning instead of on the
backend in use:

    StorageError
    ├── ConfigurationError      missing/invalid settings, unknown backend tag
    ├── StorageConnectionError  backend unreachable or handshake rejected
    ├── NotConnectedError       CRUD call issued before connect()
    ├── ValidationError         required field missing or invalid reference
    └── NotFoundError           update target does not resolve

There is no retry anywhere in this layer; a caller that wants one should
retry on StorageConnectionError with its own backoff.
"""

__all__ = [
    "StorageError",
    "ConfigurationError",
    "StorageConnectionError",
    "NotConnectedError",
    "ValidationError",
    "NotFoundError",
]


class StorageError(Exception):
    """Generic storage failure (wrapped backend error)."""


class ConfigurationError(StorageError, ValueError):
    """Connection settings are missing or invalid, or the backend tag is unknown."""


class StorageConnectionError(StorageError):
    """The backend could not be reached or refused the handshake."""


class NotConnectedError(StorageError):
    """An operation was issued before connect() or after disconnect()."""


class ValidationError(StorageError, ValueError):
    """Input failed presence/type checks, or referenced a missing category."""


class NotFoundError(StorageError, LookupError):
    """The record addressed by id does not exist."""

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} not found: {record_id!r}")
        self.kind = kind
        self.record_id = record_id
