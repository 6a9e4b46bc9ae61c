"""Storage of users, backed by an SQLite connection."""

from __future__ import annotations

import sqlite3
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .action_repository import _insert, _require_id, _to_datetime, _update_columns
from .util import RecordNotFoundError

_TABLE = "users"
_COLUMNS = (
    "id",
    "uid",
    "nickname",
    "password_digest",
    "email",
    "language",
    "is_subscribed",
    "created_at",
    "updated_at",
)
_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uid TEXT NOT NULL,
    nickname VARCHAR(15) NOT NULL,
    password_digest VARCHAR(60) NOT NULL,
    email VARCHAR(255) NOT NULL,
    language SMALLINT NOT NULL,
    is_subscribed BOOLEAN NOT NULL DEFAULT 0,
    created_at TEXT,
    updated_at TEXT
)
"""


@dataclass
class User:
    """A stored user account."""

    id: int = 0
    uid: uuid.UUID = uuid.UUID(int=0)
    nickname: str = ""
    password_digest: str = ""
    email: str = ""
    language: int = 0
    is_subscribed: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def _columns(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "uid": str(self.uid),
            "nickname": self.nickname,
            "password_digest": self.password_digest,
            "email": self.email,
            "language": self.language,
            "is_subscribed": int(self.is_subscribed),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def _from_row(cls, row: tuple[Any, ...]) -> User:
        data = dict(zip(_COLUMNS, row))
        return cls(
            id=data["id"],
            uid=uuid.UUID(data["uid"]),
            nickname=data["nickname"],
            password_digest=data["password_digest"],
            email=data["email"],
            language=data["language"],
            is_subscribed=bool(data["is_subscribed"]),
            created_at=_to_datetime(data["created_at"]),
            updated_at=_to_datetime(data["updated_at"]),
        )


class UserRepository:
    """Creates, reads and updates users."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection
        with self._conn:
            self._conn.execute(_SCHEMA)

    def _first(self, where: str, params: tuple[Any, ...], what: str) -> User:
        row = self._conn.execute(
            f"SELECT {', '.join(_COLUMNS)} FROM {_TABLE} WHERE {where} ORDER BY id LIMIT 1",
            params,
        ).fetchone()
        if row is None:
            raise RecordNotFoundError(f"user {what} not found")
        return User._from_row(row)

    def create_user(self, user: User) -> int:
        """Store ``user``, set its id and return it."""
        columns = user._columns()
        user.id = _insert(self._conn, _TABLE, columns)
        return user.id

    def update_user(self, user: User) -> None:
        """Write the user's set nickname, password digest, language and stamp."""
        _require_id(user.id)
        _update_columns(
            self._conn,
            _TABLE,
            "id = ?",
            (user.id,),
            {
                "nickname": user.nickname,
                "password_digest": user.password_digest,
                "language": user.language,
                "updated_at": user.updated_at,
            },
        )

    def fetch_user_by_email(self, email: str) -> User:
        """Return the user with ``email``; raise RecordNotFoundError if absent."""
        return self._first("email = ?", (email,), repr(email))

    def retrieve_by_id(self, user_id: int) -> User:
        """Return the user with ``user_id``; raise RecordNotFoundError if absent."""
        return self._first("id = ?", (user_id,), str(user_id))

    def fetch_user_by_ukey(self, user_id: int, uid: uuid.UUID) -> User:
        """Return the user matching both ``user_id`` and ``uid``."""
        return self._first("uid = ? AND id = ?", (str(uid), user_id), f"{user_id}/{uid}")