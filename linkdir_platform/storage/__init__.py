"""
Storage layer: one async contract, two backends (PostgreSQL, MongoDB).

Use `get_storage()` to obtain an adapter; backend modules are imported lazily.
"""

from .errors import (
    ConfigurationError,
    NotConnectedError,
    NotFoundError,
    StorageConnectionError,
    StorageError,
    ValidationError,
)
from .storage_factory import get_storage, resolve_backend

__all__ = [
    "ConfigurationError",
    "NotConnectedError",
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
    "ValidationError",
    "get_storage",
    "resolve_backend",
]
