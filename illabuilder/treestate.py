"""Tree-shaped application state records."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum

from .component import ComponentNode, component_node_from_json
from .util import delete_element

APP_EDIT_VERSION = 0  # the editable version of an app is always 0
TREE_STATE_SUMMIT_ID = 0
TREE_STATE_SUMMIT_NAME = "root"


class StateType(IntEnum):
    """Kinds of stored application state."""

    INVALID = 0
    COMPONENTS = 1
    DEPENDENCIES = 2
    DRAG_SHADOW = 3
    DOTTED_LINE_SQUARE = 4
    DISPLAY_NAME = 5


def _dump_ids(ids: list[int]) -> str:
    return json.dumps(ids, separators=(",", ":"))


@dataclass
class TreeState:
    """One node of a stored component tree."""

    id: int = 0
    state_type: int = StateType.INVALID
    parent_node_ref_id: int = 0
    children_node_ref_ids: str = ""
    app_ref_id: int = 0
    version: int = 0
    name: str = ""
    content: str = ""
    created_at: datetime | None = None
    created_by: int = 0
    updated_at: datetime | None = None
    updated_by: int = 0

    def export_content_as_component_state(self) -> ComponentNode:
        """Parse the stored content as a component node."""
        return component_node_from_json(self.content)

    def export_children_node_ref_ids(self) -> list[int]:
        """Return the ids of this node's children."""
        try:
            ids = json.loads(self.children_node_ref_ids)
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid children node ref ids: {exc}") from exc
        if ids is None:
            return []
        if not isinstance(ids, list) or not all(
            isinstance(i, int) and not isinstance(i, bool) for i in ids
        ):
            raise ValueError("children node ref ids must be an array of integers")
        return ids

    def append_children_node_ref_id(self, node_id: int) -> None:
        """Add ``node_id`` to the end of the children ids."""
        ids = self.export_children_node_ref_ids()
        ids.append(node_id)
        self.children_node_ref_ids = _dump_ids(ids)

    def remove_children_node_ref_id(self, node_id: int) -> None:
        """Remove the first occurrence of ``node_id`` from the children ids."""
        ids = self.export_children_node_ref_ids()
        self.children_node_ref_ids = _dump_ids(delete_element(ids, node_id))