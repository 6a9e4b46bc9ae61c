"""Storage of actions, backed by an SQLite connection."""

from __future__ import annotations

import json
import sqlite3
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from .util import RecordNotFoundError

_TABLE = "actions"
_COLUMNS = (
    "id",
    "app_ref_id",
    "version",
    "resource_ref_id",
    "name",
    "type",
    "trigger_mode",
    "transformer",
    "template",
    "created_at",
    "created_by",
    "updated_at",
    "updated_by",
)
_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    app_ref_id INTEGER NOT NULL,
    version INTEGER NOT NULL,
    resource_ref_id INTEGER NOT NULL,
    name VARCHAR(255) NOT NULL,
    type SMALLINT NOT NULL,
    trigger_mode VARCHAR(16) NOT NULL,
    transformer TEXT,
    template TEXT,
    created_at TEXT,
    created_by INTEGER NOT NULL,
    updated_at TEXT,
    updated_by INTEGER NOT NULL
)
"""


def _is_zero(value: Any) -> bool:
    """Tell whether ``value`` is an unset field, skipped by partial updates."""
    if value is None:
        return True
    if isinstance(value, (dict, list)):
        return False
    return not value


def _db_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, bool):
        return int(value)
    return value


def _to_datetime(value: str | None) -> datetime | None:
    return None if value is None else datetime.fromisoformat(value)


def _to_json(value: str | None) -> Any:
    return None if value is None else json.loads(value)


def _insert(conn: sqlite3.Connection, table: str, columns: Mapping[str, Any]) -> int:
    """Insert a row, letting the database choose the id when it is unset."""
    values = dict(columns)
    if _is_zero(values.get("id")):
        values.pop("id", None)
    names = ", ".join(values)
    marks = ", ".join("?" for _ in values)
    with conn:
        cursor = conn.execute(
            f"INSERT INTO {table} ({names}) VALUES ({marks})",
            [_db_value(v) for v in values.values()],
        )
    return int(values.get("id") or cursor.lastrowid)


def _update_columns(
    conn: sqlite3.Connection,
    table: str,
    where: str,
    params: tuple[Any, ...],
    columns: Mapping[str, Any],
) -> None:
    """Set the columns of ``columns`` whose values are set; unset ones are left alone."""
    changes = {name: value for name, value in columns.items() if not _is_zero(value)}
    if not changes:
        return
    assignments = ", ".join(f"{name} = ?" for name in changes)
    with conn:
        conn.execute(
            f"UPDATE {table} SET {assignments} WHERE {where}",
            [_db_value(v) for v in changes.values()] + [_db_value(p) for p in params],
        )


def _require_id(record_id: int) -> None:
    if not record_id:
        raise ValueError("WHERE conditions required: record has no primary key")


@dataclass
class Action:
    """A stored action of an app."""

    id: int = 0
    app: int = 0
    version: int = 0
    resource: int = 0
    name: str = ""
    type: int = 0
    trigger_mode: str = ""
    transformer: Any = None
    template: Any = None
    created_at: datetime | None = None
    created_by: int = 0
    updated_at: datetime | None = None
    updated_by: int = 0

    def _columns(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "app_ref_id": self.app,
            "version": self.version,
            "resource_ref_id": self.resource,
            "name": self.name,
            "type": self.type,
            "trigger_mode": self.trigger_mode,
            "transformer": self.transformer,
            "template": self.template,
            "created_at": self.created_at,
            "created_by": self.created_by,
            "updated_at": self.updated_at,
            "updated_by": self.updated_by,
        }

    @classmethod
    def _from_row(cls, row: tuple[Any, ...]) -> Action:
        data = dict(zip(_COLUMNS, row))
        return cls(
            id=data["id"],
            app=data["app_ref_id"],
            version=data["version"],
            resource=data["resource_ref_id"],
            name=data["name"],
            type=data["type"],
            trigger_mode=data["trigger_mode"],
            transformer=_to_json(data["transformer"]),
            template=_to_json(data["template"]),
            created_at=_to_datetime(data["created_at"]),
            created_by=data["created_by"],
            updated_at=_to_datetime(data["updated_at"]),
            updated_by=data["updated_by"],
        )


class ActionRepository:
    """Creates, reads, updates and deletes actions."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection
        with self._conn:
            self._conn.execute(_SCHEMA)

    def _select(self, where: str, params: tuple[Any, ...]) -> list[Action]:
        rows = self._conn.execute(
            f"SELECT {', '.join(_COLUMNS)} FROM {_TABLE} WHERE {where} ORDER BY id", params
        ).fetchall()
        return [Action._from_row(row) for row in rows]

    def create(self, action: Action) -> int:
        """Store ``action``, set its id and return it."""
        action.id = _insert(self._conn, _TABLE, action._columns())
        return action.id

    def delete(self, action_id: int) -> None:
        """Delete the action with ``action_id``, if any."""
        with self._conn:
            self._conn.execute(f"DELETE FROM {_TABLE} WHERE id = ?", (action_id,))

    def update(self, action: Action) -> None:
        """Write the action's set editable fields to storage."""
        _require_id(action.id)
        _update_columns(
            self._conn,
            _TABLE,
            "id = ?",
            (action.id,),
            {
                "resource_ref_id": action.resource,
                "type": action.type,
                "name": action.name,
                "trigger_mode": action.trigger_mode,
                "transformer": action.transformer,
                "template": action.template,
                "updated_by": action.updated_by,
                "updated_at": action.updated_at,
            },
        )

    def retrieve_by_id(self, action_id: int) -> Action:
        """Return the action with ``action_id``; raise RecordNotFoundError if absent."""
        found = self._select("id = ?", (action_id,))
        if not found:
            raise RecordNotFoundError(f"action {action_id} not found")
        return found[0]

    def retrieve_actions_by_app_version(self, app: int, version: int) -> list[Action]:
        """Return the actions of ``app`` at ``version``."""
        return self._select("app_ref_id = ? AND version = ?", (app, version))

    def delete_actions_by_app(self, app_id: int) -> None:
        """Delete every action of ``app_id``."""
        with self._conn:
            self._conn.execute(f"DELETE FROM {_TABLE} WHERE app_ref_id = ?", (app_id,))