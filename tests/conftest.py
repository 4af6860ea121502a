"""
Global pytest fixtures for the Link Directory Platform test suite.

Responsibilities:
    - Provide an in-memory `BaseStorage` double for HTTP-level tests, so the
      API can be exercised without PostgreSQL or MongoDB
    - Route MongoStorage to an in-memory pymongo double (`fake_client`)
    - Provide a fresh FastAPI TestClient via the app factory, wired to that double
    - Keep the LINKDIR_* environment clean between tests

Why an app factory?
    Using `create_app(storage=...)` gives each test a fresh app and fresh
    storage state, eliminating cross-test flakiness.
"""

import pytest
from fastapi.testclient import TestClient

from doubles import FakeClient, InMemoryStorage
from linkdir_platform.storage import mongo_storage
from main import create_app


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Tests start from an unconfigured environment."""
    for name in (
        "LINKDIR_DATABASE_TYPE",
        "LINKDIR_DATABASE_URL",
        "LINKDIR_DB_SSLMODE",
        "LINKDIR_DB_POOL_MIN",
        "LINKDIR_DB_POOL_MAX",
        "LINKDIR_DB_CONNECT_TIMEOUT",
        "LINKDIR_MONGODB_URL",
        "LINKDIR_MONGODB_DB",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_client(monkeypatch):
    """Route `MongoStorage` to the in-memory pymongo double."""
    FakeClient.instances = []
    FakeClient.ping_error = None
    monkeypatch.setattr(mongo_storage, "AsyncMongoClient", FakeClient)
    return FakeClient


@pytest.fixture
def memory_storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def client(memory_storage):
    """
    Provide a TestClient over a fresh app wired to the in-memory double.

    Entering the client runs the app lifespan (connect on startup,
    disconnect on shutdown).
    """
    app = create_app(storage=memory_storage)
    with TestClient(app) as test_client:
        yield test_client
