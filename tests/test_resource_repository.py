import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from illabuilder.resource_repository import Resource, ResourceRepository
from illabuilder.util import RecordNotFoundError

BASE = datetime(2022, 8, 1, tzinfo=timezone.utc)


@pytest.fixture
def repo():
    conn = sqlite3.connect(":memory:")
    yield ResourceRepository(conn)
    conn.close()


def _resource(name, offset_days=0):
    stamp = BASE + timedelta(days=offset_days)
    return Resource(
        name=name,
        type=1,
        options={"host": "localhost", "port": "3306", "ssl": {"ssl": False}},
        created_at=stamp,
        created_by=1,
        updated_at=stamp,
        updated_by=1,
    )


def test_create_and_retrieve(repo):
    resource = _resource("db")
    resource_id = repo.create(resource)
    assert resource_id == resource.id
    assert repo.retrieve_by_id(resource_id) == resource


def test_retrieve_missing_raises(repo):
    with pytest.raises(RecordNotFoundError):
        repo.retrieve_by_id(1)


def test_delete(repo):
    resource = _resource("db")
    repo.create(resource)
    repo.delete(resource.id)
    assert repo.retrieve_all() == []
    with pytest.raises(RecordNotFoundError):
        repo.retrieve_by_id(resource.id)


def test_retrieve_all_keeps_creation_order(repo):
    a = _resource("a", 3)
    b = _resource("b", 1)
    repo.create(a)
    repo.create(b)
    assert repo.retrieve_all() == [a, b]


def test_retrieve_all_by_updated_time_is_newest_first(repo):
    for name, days in (("old", 0), ("new", 4), ("mid", 2)):
        repo.create(_resource(name, days))
    assert [r.name for r in repo.retrieve_all_by_updated_time()] == ["new", "mid", "old"]


def test_update_changes_name_and_options_only(repo):
    resource = _resource("db")
    repo.create(resource)
    later = BASE + timedelta(days=6)
    new_options = {"host": "db.example.com"}
    repo.update(Resource(id=resource.id, name="renamed", type=5, options=new_options,
                         updated_at=later, updated_by=3))
    stored = repo.retrieve_by_id(resource.id)
    assert stored.name == "renamed"
    assert stored.options == new_options
    assert stored.updated_at == later
    assert stored.updated_by == 3
    assert stored.type == resource.type
    assert stored.created_by == resource.created_by


def test_update_without_id_raises(repo):
    with pytest.raises(ValueError):
        repo.update(_resource("db"))