"""Storage of key-value application state, backed by an SQLite connection."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .action_repository import _insert, _require_id, _to_datetime, _update_columns
from .treestate import APP_EDIT_VERSION
from .util import RecordNotFoundError

_TABLE = "kv_states"
_COLUMNS = (
    "id",
    "state_type",
    "app_ref_id",
    "version",
    "key",
    "value",
    "created_at",
    "created_by",
    "updated_at",
    "updated_by",
)
_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    state_type INTEGER,
    app_ref_id INTEGER,
    version INTEGER,
    key TEXT,
    value TEXT,
    created_at TEXT,
    created_by INTEGER,
    updated_at TEXT,
    updated_by INTEGER
)
"""


@dataclass
class KVState:
    """One stored key-value state entry of an app."""

    id: int = 0
    state_type: int = 0
    app_ref_id: int = 0
    version: int = 0
    key: str = ""
    value: str = ""
    created_at: datetime | None = None
    created_by: int = 0
    updated_at: datetime | None = None
    updated_by: int = 0

    def _columns(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "state_type": self.state_type,
            "app_ref_id": self.app_ref_id,
            "version": self.version,
            "key": self.key,
            "value": self.value,
            "created_at": self.created_at,
            "created_by": self.created_by,
            "updated_at": self.updated_at,
            "updated_by": self.updated_by,
        }

    @classmethod
    def _from_row(cls, row: tuple[Any, ...]) -> KVState:
        data = dict(zip(_COLUMNS, row))
        return cls(
            id=data["id"],
            state_type=data["state_type"] or 0,
            app_ref_id=data["app_ref_id"] or 0,
            version=data["version"] or 0,
            key=data["key"] or "",
            value=data["value"] or "",
            created_at=_to_datetime(data["created_at"]),
            created_by=data["created_by"] or 0,
            updated_at=_to_datetime(data["updated_at"]),
            updated_by=data["updated_by"] or 0,
        )


class KVStateRepository:
    """Creates, reads, updates and deletes key-value states."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection
        with self._conn:
            self._conn.execute(_SCHEMA)

    def _select(self, where: str, params: tuple[Any, ...]) -> list[KVState]:
        rows = self._conn.execute(
            f"SELECT {', '.join(_COLUMNS)} FROM {_TABLE} WHERE {where} ORDER BY id", params
        ).fetchall()
        return [KVState._from_row(row) for row in rows]

    def _delete(self, where: str, params: tuple[Any, ...]) -> None:
        with self._conn:
            self._conn.execute(f"DELETE FROM {_TABLE} WHERE {where}", params)

    def create(self, kv_state: KVState) -> None:
        """Store ``kv_state`` and set its id."""
        kv_state.id = _insert(self._conn, _TABLE, kv_state._columns())

    def delete(self, kv_state_id: int) -> None:
        """Delete the state with ``kv_state_id``, if any."""
        self._delete("id = ?", (kv_state_id,))

    def update(self, kv_state: KVState) -> None:
        """Write the state's set fields to storage."""
        _require_id(kv_state.id)
        _update_columns(
            self._conn,
            _TABLE,
            "id = ?",
            (kv_state.id,),
            {
                "state_type": kv_state.state_type,
                "app_ref_id": kv_state.app_ref_id,
                "version": kv_state.version,
                "key": kv_state.key,
                "value": kv_state.value,
                "updated_at": kv_state.updated_at,
                "updated_by": kv_state.updated_by,
            },
        )

    def retrieve_by_id(self, kv_state_id: int) -> KVState:
        """Return the state with ``kv_state_id``; raise RecordNotFoundError if absent."""
        found = self._select("id = ?", (kv_state_id,))
        if not found:
            raise RecordNotFoundError(f"kv state {kv_state_id} not found")
        return found[0]

    def retrieve_kv_states_by_version(self, version: int) -> list[KVState]:
        """Return every state at ``version``."""
        return self._select("version = ?", (version,))

    def retrieve_kv_states_by_key(self, key: str) -> list[KVState]:
        """Return every state stored under ``key``."""
        return self._select("key = ?", (key,))

    def retrieve_kv_states_by_app(
        self, app_ref_id: int, state_type: int, version: int
    ) -> list[KVState]:
        """Return the states of one type of an app at ``version``."""
        return self._select(
            "app_ref_id = ? AND state_type = ? AND version = ?",
            (app_ref_id, state_type, version),
        )

    def retrieve_edit_version_by_app_and_key(
        self, app_ref_id: int, state_type: int, key: str
    ) -> KVState:
        """Return the editable-version state under ``key``; raise RecordNotFoundError if absent."""
        found = self._select(
            "app_ref_id = ? AND state_type = ? AND version = ? AND key = ?",
            (app_ref_id, state_type, APP_EDIT_VERSION, key),
        )
        if not found:
            raise RecordNotFoundError(f"kv state {key!r} of app {app_ref_id} not found")
        return found[0]

    def retrieve_all_type_kv_states_by_app(self, app_ref_id: int, version: int) -> list[KVState]:
        """Return the states of every type of an app at ``version``."""
        return self._select("app_ref_id = ? AND version = ?", (app_ref_id, version))

    def delete_all_type_kv_states_by_app(self, app_ref_id: int) -> None:
        """Delete every state of an app."""
        self._delete("app_ref_id = ?", (app_ref_id,))

    def delete_all_kv_states_by_app_version_and_type(
        self, app_ref_id: int, version: int, state_type: int
    ) -> None:
        """Delete the states of one type of an app at ``version``."""
        self._delete(
            "app_ref_id = ? AND version = ? AND state_type = ?",
            (app_ref_id, version, state_type),
        )