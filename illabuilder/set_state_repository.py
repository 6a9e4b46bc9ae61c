"""Storage of set-valued application state, backed by an SQLite connection."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .action_repository import _insert, _require_id, _to_datetime, _update_columns
from .util import RecordNotFoundError

_TABLE = "set_states"
_COLUMNS = (
    "id",
    "state_type",
    "app_ref_id",
    "version",
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
    value TEXT,
    created_at TEXT,
    created_by INTEGER,
    updated_at TEXT,
    updated_by INTEGER
)
"""
_VALUE_MATCH = "app_ref_id = ? AND state_type = ? AND version = ? AND value = ?"


@dataclass
class SetState:
    """One member of a stored set state of an app."""

    id: int = 0
    state_type: int = 0
    app_ref_id: int = 0
    version: int = 0
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
            "value": self.value,
            "created_at": self.created_at,
            "created_by": self.created_by,
            "updated_at": self.updated_at,
            "updated_by": self.updated_by,
        }

    def _match_params(self) -> tuple[Any, ...]:
        return (self.app_ref_id, self.state_type, self.version, self.value)

    @classmethod
    def _from_row(cls, row: tuple[Any, ...]) -> SetState:
        data = dict(zip(_COLUMNS, row))
        return cls(
            id=data["id"],
            state_type=data["state_type"] or 0,
            app_ref_id=data["app_ref_id"] or 0,
            version=data["version"] or 0,
            value=data["value"] or "",
            created_at=_to_datetime(data["created_at"]),
            created_by=data["created_by"] or 0,
            updated_at=_to_datetime(data["updated_at"]),
            updated_by=data["updated_by"] or 0,
        )


class SetStateRepository:
    """Creates, reads, updates and deletes set states."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection
        with self._conn:
            self._conn.execute(_SCHEMA)

    def _select(self, where: str, params: tuple[Any, ...]) -> list[SetState]:
        rows = self._conn.execute(
            f"SELECT {', '.join(_COLUMNS)} FROM {_TABLE} WHERE {where} ORDER BY id", params
        ).fetchall()
        return [SetState._from_row(row) for row in rows]

    def _delete(self, where: str, params: tuple[Any, ...]) -> None:
        with self._conn:
            self._conn.execute(f"DELETE FROM {_TABLE} WHERE {where}", params)

    def create(self, set_state: SetState) -> None:
        """Store ``set_state`` and set its id."""
        set_state.id = _insert(self._conn, _TABLE, set_state._columns())

    def delete(self, set_state_id: int) -> None:
        """Delete the state with ``set_state_id``, if any."""
        self._delete("id = ?", (set_state_id,))

    def delete_by_value(self, set_state: SetState) -> None:
        """Delete every state holding the value of ``set_state``."""
        self._delete("value = ?", (set_state.value,))

    def update(self, set_state: SetState) -> None:
        """Write the state's set fields to storage."""
        _require_id(set_state.id)
        _update_columns(
            self._conn,
            _TABLE,
            "id = ?",
            (set_state.id,),
            {
                "state_type": set_state.state_type,
                "app_ref_id": set_state.app_ref_id,
                "version": set_state.version,
                "value": set_state.value,
                "updated_at": set_state.updated_at,
                "updated_by": set_state.updated_by,
            },
        )

    def update_by_value(self, before: SetState, after: SetState) -> None:
        """Write the set fields of ``after`` to the states matching ``before``.

        When ``after`` has an id, only that state is touched.
        """
        where = _VALUE_MATCH
        params = before._match_params()
        if after.id:
            where = f"id = ? AND {where}"
            params = (after.id, *params)
        columns = after._columns()
        columns.pop("id")
        _update_columns(self._conn, _TABLE, where, params, columns)

    def retrieve_by_id(self, set_state_id: int) -> SetState:
        """Return the state with ``set_state_id``; raise RecordNotFoundError if absent."""
        found = self._select("id = ?", (set_state_id,))
        if not found:
            raise RecordNotFoundError(f"set state {set_state_id} not found")
        return found[0]

    def retrieve_set_states_by_version(self, version: int) -> list[SetState]:
        """Return every state at ``version``."""
        return self._select("version = ?", (version,))

    def retrieve_by_value(self, set_state: SetState) -> SetState:
        """Return the first state matching app, type, version and value of ``set_state``."""
        found = self._select(_VALUE_MATCH, set_state._match_params())
        if not found:
            raise RecordNotFoundError(f"set state {set_state.value!r} not found")
        return found[0]

    def retrieve_set_states_by_app(
        self, app_ref_id: int, state_type: int, version: int
    ) -> list[SetState]:
        """Return the states of one type of an app at ``version``."""
        return self._select(
            "app_ref_id = ? AND state_type = ? AND version = ?",
            (app_ref_id, state_type, version),
        )

    def delete_all_type_set_states_by_app(self, app_ref_id: int) -> None:
        """Delete every state of an app."""
        self._delete("app_ref_id = ?", (app_ref_id,))