"""Storage of tree-shaped application state, backed by an SQLite connection."""

from __future__ import annotations

import sqlite3
from typing import Any

from .action_repository import _insert, _require_id, _to_datetime, _update_columns
from .treestate import APP_EDIT_VERSION, TreeState
from .util import RecordNotFoundError

_TABLE = "tree_states"
_COLUMNS = (
    "id",
    "state_type",
    "parent_node_ref_id",
    "children_node_ref_ids",
    "app_ref_id",
    "version",
    "name",
    "content",
    "created_at",
    "created_by",
    "updated_at",
    "updated_by",
)
_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    state_type INTEGER,
    parent_node_ref_id INTEGER,
    children_node_ref_ids TEXT,
    app_ref_id INTEGER,
    version INTEGER,
    name TEXT,
    content TEXT,
    created_at TEXT,
    created_by INTEGER,
    updated_at TEXT,
    updated_by INTEGER
)
"""


def _columns(tree_state: TreeState) -> dict[str, Any]:
    return {
        "id": tree_state.id,
        "state_type": int(tree_state.state_type),
        "parent_node_ref_id": tree_state.parent_node_ref_id,
        "children_node_ref_ids": tree_state.children_node_ref_ids,
        "app_ref_id": tree_state.app_ref_id,
        "version": tree_state.version,
        "name": tree_state.name,
        "content": tree_state.content,
        "created_at": tree_state.created_at,
        "created_by": tree_state.created_by,
        "updated_at": tree_state.updated_at,
        "updated_by": tree_state.updated_by,
    }


def _from_row(row: tuple[Any, ...]) -> TreeState:
    data = dict(zip(_COLUMNS, row))
    return TreeState(
        id=data["id"],
        state_type=data["state_type"] or 0,
        parent_node_ref_id=data["parent_node_ref_id"] or 0,
        children_node_ref_ids=data["children_node_ref_ids"] or "",
        app_ref_id=data["app_ref_id"] or 0,
        version=data["version"] or 0,
        name=data["name"] or "",
        content=data["content"] or "",
        created_at=_to_datetime(data["created_at"]),
        created_by=data["created_by"] or 0,
        updated_at=_to_datetime(data["updated_at"]),
        updated_by=data["updated_by"] or 0,
    )


class TreeStateRepository:
    """Creates, reads, updates and deletes tree states."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection
        with self._conn:
            self._conn.execute(_SCHEMA)

    def _select(self, where: str, params: tuple[Any, ...]) -> list[TreeState]:
        rows = self._conn.execute(
            f"SELECT {', '.join(_COLUMNS)} FROM {_TABLE} WHERE {where} ORDER BY id", params
        ).fetchall()
        return [_from_row(row) for row in rows]

    def create(self, tree_state: TreeState) -> int:
        """Store ``tree_state``, set its id and return it."""
        tree_state.id = _insert(self._conn, _TABLE, _columns(tree_state))
        return tree_state.id

    def delete(self, tree_state_id: int) -> None:
        """Delete the state with ``tree_state_id``, if any."""
        with self._conn:
            self._conn.execute(f"DELETE FROM {_TABLE} WHERE id = ?", (tree_state_id,))

    def update(self, tree_state: TreeState) -> None:
        """Write the state's set fields to storage."""
        _require_id(tree_state.id)
        columns = _columns(tree_state)
        for name in ("id", "created_at", "created_by"):
            columns.pop(name)
        _update_columns(self._conn, _TABLE, "id = ?", (tree_state.id,), columns)

    def retrieve_by_id(self, tree_state_id: int) -> TreeState:
        """Return the state with ``tree_state_id``; raise RecordNotFoundError if absent."""
        found = self._select("id = ?", (tree_state_id,))
        if not found:
            raise RecordNotFoundError(f"tree state {tree_state_id} not found")
        return found[0]

    def retrieve_tree_states_by_version(self, version: int) -> list[TreeState]:
        """Return every state at ``version``."""
        return self._select("version = ?", (version,))

    def retrieve_tree_states_by_name(self, name: str) -> list[TreeState]:
        """Return every state named ``name``."""
        return self._select("name = ?", (name,))

    def retrieve_tree_states_by_app(
        self, app_ref_id: int, state_type: int, version: int
    ) -> list[TreeState]:
        """Return the states of one type of an app at ``version``."""
        return self._select(
            "app_ref_id = ? AND state_type = ? AND version = ?",
            (app_ref_id, int(state_type), version),
        )

    def retrieve_edit_version_by_app_and_name(
        self, app_ref_id: int, state_type: int, name: str
    ) -> TreeState:
        """Return the editable-version state named ``name``; raise RecordNotFoundError if absent."""
        found = self._select(
            "app_ref_id = ? AND state_type = ? AND version = ? AND name = ?",
            (app_ref_id, int(state_type), APP_EDIT_VERSION, name),
        )
        if not found:
            raise RecordNotFoundError(f"tree state {name!r} of app {app_ref_id} not found")
        return found[0]

    def retrieve_all_type_tree_states_by_app(
        self, app_ref_id: int, version: int
    ) -> list[TreeState]:
        """Return the states of every type of an app at ``version``."""
        return self._select("app_ref_id = ? AND version = ?", (app_ref_id, version))

    def delete_all_type_tree_states_by_app(self, app_ref_id: int) -> None:
        """Delete every state of an app."""
        with self._conn:
            self._conn.execute(f"DELETE FROM {_TABLE} WHERE app_ref_id = ?", (app_ref_id,))