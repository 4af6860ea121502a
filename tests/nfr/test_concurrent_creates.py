"""
NFR: concurrent creates never collide on id.

Many add_category / add_link coroutines are scheduled at once on one adapter
(the in-memory double, MongoStorage over the pymongo double, PostgresStorage
over a dummy pool); every generated id must be distinct and every record
must come back on read.
Ids are random 128-bit values, so uniqueness does not depend on timing.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from doubles import DummyConnection, connected
from linkdir_platform.storage.mongo_storage import MongoStorage
from linkdir_platform.storage.postgres_storage import INSERT_CATEGORY

pytestmark = pytest.mark.nfr

N = 500


async def test_concurrent_category_creates_get_distinct_ids(memory_storage):
    await memory_storage.connect()

    created = await asyncio.gather(
        *(memory_storage.add_category({"name": f"C{i}", "slug": f"c-{i}"}) for i in range(N))
    )

    assert len({c.id for c in created}) == N
    assert len(await memory_storage.get_categories()) == N


async def test_concurrent_link_creates_are_all_joined(memory_storage):
    await memory_storage.connect()
    category = await memory_storage.add_category({"name": "Bulk", "slug": "bulk"})

    created = await asyncio.gather(
        *(
            memory_storage.add_link({"title": f"L{i}", "url": f"https://example.com/{i}", "categoryId": category.id})
            for i in range(N)
        )
    )

    links = await memory_storage.get_links()
    assert len({link.id for link in created}) == N
    assert {link.category_name for link in links} == {"Bulk"}


async def test_concurrent_creates_on_document_backend(fake_client):
    storage = MongoStorage("mongodb://fake:27017")
    await storage.connect()
    category = await storage.add_category({"name": "Bulk", "slug": "bulk"})

    created = await asyncio.gather(
        *(
            storage.add_link({"title": f"L{i}", "url": f"https://example.com/{i}", "categoryId": category.id})
            for i in range(N)
        )
    )

    links = await storage.get_links()
    assert len({link.id for link in created}) == N
    assert {link.id for link in links} == {link.id for link in created}
    assert {link.category_name for link in links} == {"Bulk"}


async def test_concurrent_creates_on_relational_backend_send_distinct_ids():
    row = {"id": "c1", "name": "C", "slug": "c", "createdDate": datetime.now(timezone.utc), "icon": None}
    conn = DummyConnection(results=[dict(row) for _ in range(N)])
    storage = connected(conn)

    await asyncio.gather(
        *(storage.add_category({"name": f"C{i}", "slug": f"c-{i}"}) for i in range(N))
    )

    inserted_ids = [params[0] for query, params in conn.executed]
    assert len(inserted_ids) == N
    assert len(set(inserted_ids)) == N
    assert all(query == INSERT_CATEGORY for query, _ in conn.executed)
