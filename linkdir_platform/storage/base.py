"""
Base storage interface for the Link Directory Platform.

Purpose:
    Define a small, stable contract that both storage backends
    (PostgreSQL and MongoDB) implement, so handlers and scripts never
    need to know which store holds the data.

Lifecycle:
    storage = get_storage()          # not yet connected
    await storage.connect()          # acquire pool / client once
    await storage.get_links()        # any number of CRUD calls
    await storage.disconnect()       # release; safe to call twice

Every operation is a coroutine and its own unit of work: there is no
transaction spanning calls and concurrent updates are last-write-wins.

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover` so coverage tools don't
    penalize the project for un-runnable abstract declarations.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Union

from ..models import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    LinkCreate,
    LinkItem,
    LinkUpdate,
)
from .errors import NotConnectedError

CategoryInput = Union[CategoryCreate, Mapping[str, Any]]
CategoryPatch = Union[CategoryUpdate, Mapping[str, Any]]
LinkInput = Union[LinkCreate, Mapping[str, Any]]
LinkPatch = Union[LinkUpdate, Mapping[str, Any]]


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    #: Tag this adapter is selected by in the factory.
    backend_name: str = ""

    # ---- Connection lifecycle --------------------------------------------

    @property
    @abstractmethod  # pragma: no cover
    def is_connected(self) -> bool:
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def connect(self) -> None:
        """
        Acquire backend resources (pool or client handle).

        Raises:
            ConfigurationError: the connection string is missing or malformed.
            StorageConnectionError: the backend is unreachable or rejected us.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def disconnect(self) -> None:
        """Release everything `connect` acquired. No-op when not connected."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def ensure_schema(self) -> None:
        """Idempotently create tables / indexes the backend relies on."""
        raise NotImplementedError

    # ---- Categories ------------------------------------------------------

    @abstractmethod  # pragma: no cover
    async def get_categories(self) -> List[Category]:
        """Return every category, ordered by creation date."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def add_category(self, category: CategoryInput) -> Category:
        """
        Persist a new category under a freshly generated id.

        Raises:
            ValidationError: `name` or `slug` missing/empty.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def update_category(self, category_id: str, changes: CategoryPatch) -> Category:
        """
        Merge the supplied fields into the stored category.

        Only explicitly supplied, non-None fields are written; `id` and
        `createdDate` can never be changed this way.

        Raises:
            NotFoundError: no category has this id.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def delete_category(self, category_id: str) -> None:
        """Remove the category. Deleting a missing id is not an error."""
        raise NotImplementedError

    # ---- Links -----------------------------------------------------------

    @abstractmethod  # pragma: no cover
    async def get_links(self) -> List[LinkItem]:
        """
        Return every link joined with its category (`categoryName` filled).

        Links whose `categoryId` matches no category are left out.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def add_link(self, link: LinkInput) -> LinkItem:
        """
        Persist a new link under a freshly generated id.

        Raises:
            ValidationError: `title`, `url` or `categoryId` missing/empty
                (relational backend also: unknown `categoryId`).
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def update_link(self, link_id: str, changes: LinkPatch) -> LinkItem:
        """
        Merge the supplied fields into the stored link.

        Raises:
            NotFoundError: no link has this id.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def delete_link(self, link_id: str) -> None:
        """Remove the link. Deleting a missing id is not an error."""
        raise NotImplementedError

    # ---- Shared helpers --------------------------------------------------

    def _require_connected(self) -> None:
        if not self.is_connected:
            raise NotConnectedError(
                f"{type(self).__name__} is not connected; call connect() first"
            )

    def __repr__(self) -> str:
        state = "connected" if self.is_connected else "disconnected"
        return f"<{type(self).__name__} {state}>"
