"""Storage of apps, backed by an SQLite connection."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .action_repository import _insert, _require_id, _to_datetime, _update_columns

APP_EDIT_VERSION = 0  # the editable version of an app is always 0

_TABLE = "apps"
_COLUMNS = (
    "id",
    "name",
    "release_version",
    "mainline_version",
    "created_at",
    "created_by",
    "updated_at",
    "updated_by",
)
_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name VARCHAR,
    release_version INTEGER,
    mainline_version INTEGER,
    created_at TEXT,
    created_by INTEGER,
    updated_at TEXT,
    updated_by INTEGER
)
"""


@dataclass
class App:
    """A stored app."""

    id: int = 0
    name: str = ""
    release_version: int = 0
    mainline_version: int = 0
    created_at: datetime | None = None
    created_by: int = 0
    updated_at: datetime | None = None
    updated_by: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Return the app in its JSON field names."""
        return {
            "id": self.id,
            "name": self.name,
            "release_version": self.release_version,
            "mainline_version": self.mainline_version,
            "created_at": self.created_at,
            "created_by": self.created_by,
            "updated_at": self.updated_at,
            "updated_by": self.updated_by,
        }

    @classmethod
    def _from_row(cls, row: tuple[Any, ...]) -> App:
        data = dict(zip(_COLUMNS, row))
        return cls(
            id=data["id"],
            name=data["name"] or "",
            release_version=data["release_version"] or 0,
            mainline_version=data["mainline_version"] or 0,
            created_at=_to_datetime(data["created_at"]),
            created_by=data["created_by"] or 0,
            updated_at=_to_datetime(data["updated_at"]),
            updated_by=data["updated_by"] or 0,
        )


class AppRepository:
    """Creates, reads, updates and deletes apps."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection
        with self._conn:
            self._conn.execute(_SCHEMA)

    def _select(self, tail: str, params: tuple[Any, ...] = ()) -> list[App]:
        rows = self._conn.execute(
            f"SELECT {', '.join(_COLUMNS)} FROM {_TABLE} {tail}", params
        ).fetchall()
        return [App._from_row(row) for row in rows]

    def create(self, app: App) -> int:
        """Store ``app``, set its id and return it."""
        app.id = _insert(self._conn, _TABLE, app.to_dict())
        return app.id

    def delete(self, app_id: int) -> None:
        """Delete the app with ``app_id``, if any."""
        with self._conn:
            self._conn.execute(f"DELETE FROM {_TABLE} WHERE id = ?", (app_id,))

    def update(self, app: App) -> None:
        """Write the app's set name, versions and update stamp to storage."""
        _require_id(app.id)
        _update_columns(
            self._conn,
            _TABLE,
            "id = ?",
            (app.id,),
            {
                "name": app.name,
                "release_version": app.release_version,
                "mainline_version": app.mainline_version,
                "updated_by": app.updated_by,
                "updated_at": app.updated_at,
            },
        )

    def update_updated_at(self, app: App) -> None:
        """Write only the app's update stamp to storage."""
        _require_id(app.id)
        _update_columns(
            self._conn,
            _TABLE,
            "id = ?",
            (app.id,),
            {"updated_by": app.updated_by, "updated_at": app.updated_at},
        )

    def retrieve_all(self) -> list[App]:
        """Return every app."""
        return self._select("ORDER BY id")

    def retrieve_app_by_id(self, app_id: int) -> App | None:
        """Return the app with ``app_id``, or None when there is none."""
        found = self._select("WHERE id = ? ORDER BY id", (app_id,))
        return found[0] if found else None

    def retrieve_all_by_updated_time(self) -> list[App]:
        """Return every app, most recently updated first."""
        return self._select("ORDER BY updated_at DESC")