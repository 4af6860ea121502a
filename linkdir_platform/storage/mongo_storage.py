"""
MongoStorage - MongoDB-backed storage for the Link Directory Platform
=====================================================================

Document-store implementation of `BaseStorage`. Categories and links live in
two collections (`categories`, `links`) and are addressed by the
application-level `id` field; MongoDB's own `_id` is never exposed.

Key Design Points
-----------------
- **One client per adapter**: `connect()` creates a single `AsyncMongoClient`
  (which pools internally) and pings the server; every call reuses it.
- **Emulated join**: `get_links()` runs `$lookup` -> `$unwind` -> `$addFields`.
  `$unwind` drops links whose lookup matched nothing, which is how dangling
  `categoryId` references disappear from reads.
- **Advisory references**: `categoryId` is not checked on write.
- **Allow-listed updates**: `$set` only ever contains known mutable fields.

LLM Prompt Example:
    "Explain how an aggregation pipeline with $lookup and $unwind reproduces
    inner-join semantics over two MongoDB collections."
"""

import contextlib
import logging
from datetime import datetime
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from pymongo import ASCENDING, AsyncMongoClient, ReturnDocument
from pymongo.errors import ConfigurationError as MongoConfigurationError
from pymongo.errors import ConnectionFailure, PyMongoError

from ..config import settings
from ..models import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    LinkCreate,
    LinkItem,
    LinkUpdate,
    coerce,
    new_id,
)
from .base import BaseStorage, CategoryInput, CategoryPatch, LinkInput, LinkPatch
from .errors import (
    ConfigurationError,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)

log = logging.getLogger(__name__)

CATEGORIES = "categories"
LINKS = "links"

CATEGORY_UPDATABLE = ("name", "slug", "icon")
LINK_UPDATABLE = ("title", "url", "categoryId", "imageUrl", "aiHint", "description", "faviconUrl")

HIDE_ID = {"_id": 0}
SORT_ORDER = [("createdDate", ASCENDING), ("id", ASCENDING)]

LINKS_PIPELINE: List[Dict[str, Any]] = [
    {
        "$lookup": {
            "from": CATEGORIES,
            "localField": "categoryId",
            "foreignField": "id",
            "as": "category",
        }
    },
    {"$unwind": "$category"},
    {"$addFields": {"categoryName": "$category.name"}},
    {"$project": {"_id": 0, "category": 0}},
    {"$sort": dict(SORT_ORDER)},
]


def allowed_changes(updatable: Sequence[str], changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Keep only allow-listed, non-None fields for a `$set` document."""
    return {name: changes[name] for name in updatable if changes.get(name) is not None}


def _to_bson_millis(value: datetime) -> datetime:
    # BSON dates carry millisecond precision; trim so the returned record
    # matches what a later read gives back.
    return value.replace(microsecond=value.microsecond - value.microsecond % 1000)


@contextlib.contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    """Re-raise driver exceptions as storage-layer errors."""
    try:
        yield
    except ConnectionFailure as exc:
        log.warning("%s failed: MongoDB unavailable (%s)", action, type(exc).__name__)
        raise StorageConnectionError(f"{action}: MongoDB unavailable: {exc}") from exc
    except PyMongoError as exc:
        log.warning("%s failed: %s", action, type(exc).__name__)
        raise StorageError(f"{action} failed: {exc}") from exc


class MongoStorage(BaseStorage):
    """MongoDB implementation of the link-directory storage contract.

    Parameters
    ----------
    url : str, optional
        MongoDB connection URL. Defaults to LINKDIR_MONGODB_URL, resolved at `connect()`.
    database : str, optional
        Database name. Defaults to LINKDIR_MONGODB_DB ("navigation").
    timeout : float, optional
        Server selection timeout in seconds. Defaults to LINKDIR_DB_CONNECT_TIMEOUT.
    """

    backend_name = "document"

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        database: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.url = url
        self.database = database
        self.timeout = timeout
        self._client: Optional[AsyncMongoClient] = None
        self._db = None

    # ---- Connection lifecycle --------------------------------------------

    @property
    def is_connected(self) -> bool:
        return self._db is not None

    async def connect(self) -> None:
        if self._db is not None:
            return
        url = self.url or settings.MONGODB_URL
        if not url:
            raise ConfigurationError("MongoDB URL is not configured (env LINKDIR_MONGODB_URL)")
        name = self.database or settings.MONGODB_DB
        timeout_ms = int(float(self.timeout or settings.DB_CONNECT_TIMEOUT) * 1000)

        try:
            client = AsyncMongoClient(url, tz_aware=True, serverSelectionTimeoutMS=timeout_ms)
        except MongoConfigurationError as exc:
            raise ConfigurationError(f"Invalid MongoDB URL: {exc}") from exc

        try:
            await client.admin.command("ping")
        except PyMongoError as exc:
            await client.close()
            log.warning("MongoDB connection failed (%s)", type(exc).__name__)
            raise StorageConnectionError(f"Could not connect to MongoDB: {exc}") from exc

        self._client = client
        self._db = client[name]
        log.info("MongoDB connection established (database=%s)", name)

    async def disconnect(self) -> None:
        client, self._client, self._db = self._client, None, None
        if client is None:
            return
        await client.close()
        log.info("MongoDB connection closed")

    def _collection(self, name: str):
        self._require_connected()
        return self._db[name]

    async def ensure_schema(self) -> None:
        with _translate_errors("ensure_schema"):
            for name in (CATEGORIES, LINKS):
                await self._collection(name).create_index("id", unique=True)
            await self._collection(LINKS).create_index("categoryId")
        log.info("MongoDB indexes ensured")

    # ---- Shared CRUD helpers ---------------------------------------------

    async def _insert(self, collection: str, document: Dict[str, Any]) -> None:
        with _translate_errors(f"insert into {collection}"):
            # insert_one adds `_id` to the dict it is given
            await self._collection(collection).insert_one(dict(document))
        log.debug("Inserted %s document %s", collection, document["id"])

    async def _update(
        self, collection: str, record_id: str, changes: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        coll = self._collection(collection)
        with _translate_errors(f"update {collection}"):
            if not changes:
                return await coll.find_one({"id": record_id}, HIDE_ID)
            return await coll.find_one_and_update(
                {"id": record_id},
                {"$set": changes},
                projection=HIDE_ID,
                return_document=ReturnDocument.AFTER,
            )

    async def _delete(self, collection: str, record_id: str) -> None:
        with _translate_errors(f"delete from {collection}"):
            result = await self._collection(collection).delete_one({"id": record_id})
        log.debug("Deleted %s document %s (count=%d)", collection, record_id, result.deleted_count)

    # ---- Categories ------------------------------------------------------

    async def get_categories(self) -> List[Category]:
        coll = self._collection(CATEGORIES)
        with _translate_errors("get_categories"):
            documents = await coll.find({}, HIDE_ID).sort(SORT_ORDER).to_list()
        return [Category.model_validate(doc) for doc in documents]

    async def add_category(self, category: CategoryInput) -> Category:
        data = coerce(CategoryCreate, category)
        document = data.model_dump(by_alias=True)
        document["id"] = new_id()
        document["createdDate"] = _to_bson_millis(data.created_date)
        await self._insert(CATEGORIES, document)
        return Category.model_validate(document)

    async def update_category(self, category_id: str, changes: CategoryPatch) -> Category:
        patch = allowed_changes(CATEGORY_UPDATABLE, coerce(CategoryUpdate, changes).changes())
        document = await self._update(CATEGORIES, category_id, patch)
        if document is None:
            raise NotFoundError("Category", category_id)
        return Category.model_validate(document)

    async def delete_category(self, category_id: str) -> None:
        await self._delete(CATEGORIES, category_id)

    # ---- Links -----------------------------------------------------------

    async def get_links(self) -> List[LinkItem]:
        coll = self._collection(LINKS)
        with _translate_errors("get_links"):
            cursor = await coll.aggregate(LINKS_PIPELINE)
            documents = await cursor.to_list()
        return [LinkItem.model_validate(doc) for doc in documents]

    async def add_link(self, link: LinkInput) -> LinkItem:
        data = coerce(LinkCreate, link)
        document = data.model_dump(by_alias=True)
        document["id"] = new_id()
        document["createdDate"] = _to_bson_millis(data.created_date)
        await self._insert(LINKS, document)
        return LinkItem.model_validate(document)

    async def update_link(self, link_id: str, changes: LinkPatch) -> LinkItem:
        patch = allowed_changes(LINK_UPDATABLE, coerce(LinkUpdate, changes).changes())
        document = await self._update(LINKS, link_id, patch)
        if document is None:
            raise NotFoundError("Link", link_id)
        return LinkItem.model_validate(document)

    async def delete_link(self, link_id: str) -> None:
        await self._delete(LINKS, link_id)
