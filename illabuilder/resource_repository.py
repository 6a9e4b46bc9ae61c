"""Storage of data-source resources, backed by an SQLite connection."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .action_repository import (
    _insert,
    _require_id,
    _to_datetime,
    _to_json,
    _update_columns,
)
from .util import RecordNotFoundError

_TABLE = "resources"
_COLUMNS = (
    "id",
    "name",
    "type",
    "options",
    "created_at",
    "created_by",
    "updated_at",
    "updated_by",
)
_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name VARCHAR(200) NOT NULL,
    type SMALLINT NOT NULL,
    options TEXT,
    created_at TEXT,
    created_by INTEGER NOT NULL,
    updated_at TEXT,
    updated_by INTEGER NOT NULL
)
"""


@dataclass
class Resource:
    """A stored data-source resource."""

    id: int = 0
    name: str = ""
    type: int = 0
    options: Any = None
    created_at: datetime | None = None
    created_by: int = 0
    updated_at: datetime | None = None
    updated_by: int = 0

    def _columns(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "options": self.options,
            "created_at": self.created_at,
            "created_by": self.created_by,
            "updated_at": self.updated_at,
            "updated_by": self.updated_by,
        }

    @classmethod
    def _from_row(cls, row: tuple[Any, ...]) -> Resource:
        data = dict(zip(_COLUMNS, row))
        return cls(
            id=data["id"],
            name=data["name"],
            type=data["type"],
            options=_to_json(data["options"]),
            created_at=_to_datetime(data["created_at"]),
            created_by=data["created_by"],
            updated_at=_to_datetime(data["updated_at"]),
            updated_by=data["updated_by"],
        )


class ResourceRepository:
    """Creates, reads, updates and deletes resources."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection
        with self._conn:
            self._conn.execute(_SCHEMA)

    def _select(self, tail: str, params: tuple[Any, ...] = ()) -> list[Resource]:
        rows = self._conn.execute(
            f"SELECT {', '.join(_COLUMNS)} FROM {_TABLE} {tail}", params
        ).fetchall()
        return [Resource._from_row(row) for row in rows]

    def create(self, resource: Resource) -> int:
        """Store ``resource``, set its id and return it."""
        resource.id = _insert(self._conn, _TABLE, resource._columns())
        return resource.id

    def delete(self, resource_id: int) -> None:
        """Delete the resource with ``resource_id``, if any."""
        with self._conn:
            self._conn.execute(f"DELETE FROM {_TABLE} WHERE id = ?", (resource_id,))

    def update(self, resource: Resource) -> None:
        """Write the resource's set name, options and update stamp to storage."""
        _require_id(resource.id)
        _update_columns(
            self._conn,
            _TABLE,
            "id = ?",
            (resource.id,),
            {
                "name": resource.name,
                "options": resource.options,
                "updated_by": resource.updated_by,
                "updated_at": resource.updated_at,
            },
        )

    def retrieve_by_id(self, resource_id: int) -> Resource:
        """Return the resource with ``resource_id``; raise RecordNotFoundError if absent."""
        found = self._select("WHERE id = ?", (resource_id,))
        if not found:
            raise RecordNotFoundError(f"resource {resource_id} not found")
        return found[0]

    def retrieve_all(self) -> list[Resource]:
        """Return every resource."""
        return self._select("ORDER BY id")

    def retrieve_all_by_updated_time(self) -> list[Resource]:
        """Return every resource, most recently updated first."""
        return self._select("ORDER BY updated_at DESC")