import pytest

from linkdir_platform.storage import storage_factory
from linkdir_platform.storage.errors import ConfigurationError
from linkdir_platform.storage.mongo_storage import MongoStorage
from linkdir_platform.storage.postgres_storage import PostgresStorage


def test_get_storage_defaults_to_relational():
    storage = storage_factory.get_storage()
    assert isinstance(storage, PostgresStorage)
    assert storage.backend_name == "relational"


def test_get_storage_reads_env_at_call_time(monkeypatch):
    monkeypatch.setenv("LINKDIR_DATABASE_TYPE", "document")
    assert isinstance(storage_factory.get_storage(), MongoStorage)
    monkeypatch.setenv("LINKDIR_DATABASE_TYPE", "relational")
    assert isinstance(storage_factory.get_storage(), PostgresStorage)


@pytest.mark.parametrize(
    "tag, cls",
    [
        ("relational", PostgresStorage),
        ("postgresql", PostgresStorage),
        ("Postgres", PostgresStorage),
        ("document", MongoStorage),
        ("mongodb", MongoStorage),
        ("MONGO", MongoStorage),
    ],
)
def test_get_storage_accepts_tags_and_aliases(tag, cls):
    assert isinstance(storage_factory.get_storage(tag), cls)


def test_argument_wins_over_env(monkeypatch):
    monkeypatch.setenv("LINKDIR_DATABASE_TYPE", "relational")
    assert isinstance(storage_factory.get_storage("document"), MongoStorage)


def test_get_storage_returns_fresh_unconnected_instances():
    first = storage_factory.get_storage("relational")
    second = storage_factory.get_storage("relational")
    assert first is not second
    assert not first.is_connected


def test_get_storage_forwards_kwargs():
    storage = storage_factory.get_storage("document", url="mongodb://h", database="nav2")
    assert (storage.url, storage.database) == ("mongodb://h", "nav2")


def test_missing_dsn_is_reported_at_connect_not_construction():
    # construction must succeed; connect() is where configuration is checked
    storage = storage_factory.get_storage("relational")
    assert storage.dsn is None


def test_get_storage_unknown_backend(monkeypatch):
    monkeypatch.setenv("LINKDIR_DATABASE_TYPE", "nosuch")
    with pytest.raises(ConfigurationError, match="Unknown storage backend"):
        storage_factory.get_storage()


def test_unknown_backend_is_also_a_value_error():
    with pytest.raises(ValueError):
        storage_factory.resolve_backend("sqlite")
