import sqlite3
import uuid
from datetime import datetime, timezone

import pytest

from illabuilder.user_repository import User, UserRepository
from illabuilder.util import RecordNotFoundError

STAMP = datetime(2022, 8, 1, tzinfo=timezone.utc)


@pytest.fixture
def repo():
    conn = sqlite3.connect(":memory:")
    yield UserRepository(conn)
    conn.close()


def _user(email="alice@example.com", nickname="alice"):
    return User(
        uid=uuid.uuid4(),
        nickname=nickname,
        password_digest="placeholder",
        email=email,
        language=1,
        is_subscribed=True,
        created_at=STAMP,
        updated_at=STAMP,
    )


def test_create_and_retrieve_by_id(repo):
    user = _user()
    user_id = repo.create_user(user)
    assert user_id == user.id
    assert repo.retrieve_by_id(user_id) == user


def test_fetch_by_email(repo):
    alice = _user()
    bob = _user(email="bob@example.com", nickname="bob")
    repo.create_user(alice)
    repo.create_user(bob)
    assert repo.fetch_user_by_email("bob@example.com") == bob


def test_fetch_by_unknown_email_raises(repo):
    with pytest.raises(RecordNotFoundError):
        repo.fetch_user_by_email("nobody@example.com")


def test_retrieve_missing_id_raises(repo):
    with pytest.raises(RecordNotFoundError):
        repo.retrieve_by_id(5)


def test_fetch_by_ukey_requires_both_parts(repo):
    user = _user()
    repo.create_user(user)
    assert repo.fetch_user_by_ukey(user.id, user.uid) == user
    with pytest.raises(RecordNotFoundError):
        repo.fetch_user_by_ukey(user.id, uuid.uuid4())
    with pytest.raises(RecordNotFoundError):
        repo.fetch_user_by_ukey(user.id + 1, user.uid)


def test_update_user_changes_only_editable_fields(repo):
    user = _user()
    repo.create_user(user)
    later = datetime(2022, 9, 1, tzinfo=timezone.utc)
    repo.update_user(
        User(
            id=user.id,
            nickname="alicia",
            email="other@example.com",
            language=2,
            updated_at=later,
        )
    )
    stored = repo.retrieve_by_id(user.id)
    assert stored.nickname == "alicia"
    assert stored.language == 2
    assert stored.updated_at == later
    assert stored.email == user.email
    assert stored.password_digest == user.password_digest
    assert stored.uid == user.uid
    assert stored.is_subscribed is True


def test_update_without_id_raises(repo):
    with pytest.raises(ValueError):
        repo.update_user(_user())