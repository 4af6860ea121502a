"""
Storage factory - pick the storage backend from config
======================================================

This module centralizes selection of the storage backend (relational vs
document) so the rest of the app can stay ignorant of where data lives.
It is the one entry point handlers and scripts use to obtain an adapter.

- Reads the backend tag **at call time** (via `settings`) to avoid stale values in tests.
- Imports a backend module **only if** that backend is selected, so the
  MongoDB driver is not needed to run against PostgreSQL and vice versa.
- Returns a fresh, not-yet-connected adapter; connection settings are
  validated by the adapter's `connect()`.

Environment variables
---------------------
- LINKDIR_DATABASE_TYPE: "relational" (default) or "document"
  ("postgresql"/"postgres" and "mongodb"/"mongo" are accepted as aliases)
"""

import importlib
import logging
from typing import TYPE_CHECKING, Dict, Optional, Tuple

from ..config import settings
from .errors import ConfigurationError

if TYPE_CHECKING:  # base imports models, which imports this package
    from .base import BaseStorage

log = logging.getLogger(__name__)

# tag -> (module, class)
_BACKENDS: Dict[str, Tuple[str, str]] = {
    "relational": ("linkdir_platform.storage.postgres_storage", "PostgresStorage"),
    "document": ("linkdir_platform.storage.mongo_storage", "MongoStorage"),
}

_ALIASES: Dict[str, str] = {
    "postgresql": "relational",
    "postgres": "relational",
    "mongodb": "document",
    "mongo": "document",
}


def resolve_backend(backend: Optional[str] = None) -> str:
    """
    Normalize a backend tag (argument or LINKDIR_DATABASE_TYPE) to
    "relational" or "document".

    Raises:
        ConfigurationError: the tag names no known backend.
    """
    tag = (backend or settings.DATABASE_TYPE).strip().lower()
    tag = _ALIASES.get(tag, tag)
    if tag not in _BACKENDS:
        raise ConfigurationError(f"Unknown storage backend: {tag!r}")
    return tag


def get_storage(backend: Optional[str] = None, **kwargs) -> "BaseStorage":
    """
    Return a new, unconnected storage adapter.

    Parameters
    ----------
    backend : str, optional
        "relational" or "document". If omitted, reads LINKDIR_DATABASE_TYPE.
    kwargs : dict
        Passed to the adapter constructor: `dsn=` for relational,
        `url=` / `database=` for document, plus `timeout=`.

    Returns
    -------
    BaseStorage
    """
    tag = resolve_backend(backend)
    module_name, class_name = _BACKENDS[tag]
    storage_cls = getattr(importlib.import_module(module_name), class_name)
    log.info("Selected storage backend: %s", tag)
    return storage_cls(**kwargs)
