"""Component tree nodes and their JSON forms."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping

_STRING_FIELDS = {
    "displayName": "display_name",
    "parentNode": "parent_node",
    "showName": "show_name",
    "type": "type",
    "containerType": "container_type",
}
_BOOL_FIELDS = {
    "error": "error",
    "isDragging": "is_dragging",
    "verticalResize": "vertical_resize",
}
_FLOAT_FIELDS = {
    "h": "h",
    "w": "w",
    "minH": "min_h",
    "minW": "min_w",
    "unitW": "unit_w",
    "unitH": "unit_h",
    "x": "x",
    "y": "y",
    "z": "z",
}
_MAP_FIELDS = {"props": "props", "panelConfig": "panel_config"}

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number(value: float) -> int | float:
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return int(value)
    return value


def _normalize(value: Any) -> Any:
    """Prepare free-form data for output: sorted maps, compact numbers."""
    if isinstance(value, Mapping):
        return {str(key): _normalize(value[key]) for key in sorted(value, key=str)}
    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]
    if isinstance(value, float):
        return _number(value)
    return value


def _dump(obj: Any) -> str:
    text = json.dumps(obj, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    for char, escaped in _HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    return text


@dataclass
class ComponentNode:
    """One node of a component tree."""

    display_name: str = ""
    parent_node: str = ""
    show_name: str = ""
    error: bool = False
    is_dragging: bool = False
    children_node: list[ComponentNode | None] | None = None
    type: str = ""
    container_type: str = ""
    vertical_resize: bool = False
    h: float = 0.0
    w: float = 0.0
    min_h: float = 0.0
    min_w: float = 0.0
    unit_w: float = 0.0
    unit_h: float = 0.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    props: dict[str, Any] | None = None
    panel_config: dict[str, Any] | None = None

    def update_parent_node(self, parent: ComponentNode | None) -> None:
        """Record ``parent``'s display name as this node's parent."""
        if parent is not None:
            self.parent_node = parent.display_name

    def append_children_node(self, node: ComponentNode | None) -> None:
        """Append ``node`` to this node's children."""
        if self.children_node is None:
            self.children_node = []
        self.children_node.append(node)

    def to_dict(self) -> dict[str, Any]:
        """Return the node as a JSON-ready mapping in wire field order."""
        children = None
        if self.children_node is not None:
            children = [None if c is None else c.to_dict() for c in self.children_node]
        return {
            "displayName": self.display_name,
            "parentNode": self.parent_node,
            "showName": self.show_name,
            "error": self.error,
            "isDragging": self.is_dragging,
            "childrenNode": children,
            "type": self.type,
            "containerType": self.container_type,
            "verticalResize": self.vertical_resize,
            "h": _number(self.h),
            "w": _number(self.w),
            "minH": _number(self.min_h),
            "minW": _number(self.min_w),
            "unitW": _number(self.unit_w),
            "unitH": _number(self.unit_h),
            "x": _number(self.x),
            "y": _number(self.y),
            "z": _number(self.z),
            "props": _normalize(self.props),
            "panelConfig": _normalize(self.panel_config),
        }

    def serialize(self) -> str:
        """Return the full JSON form, relations included."""
        return _dump(self.to_dict())

    def serialize_for_database(self) -> str:
        """Return the JSON form without parent and children relations."""
        data = self.to_dict()
        data["parentNode"] = ""
        data["childrenNode"] = None
        return _dump(data)


@dataclass
class ComponentStateForUpdate:
    """A before/after pair describing a component update."""

    before: Any = None
    after: Any = None


def _node_from_mapping(data: Mapping[str, Any]) -> ComponentNode:
    node = ComponentNode()
    for key, value in data.items():
        if value is None:
            continue
        if key in _STRING_FIELDS:
            if not isinstance(value, str):
                raise ValueError(f"field {key!r} must be a string")
            setattr(node, _STRING_FIELDS[key], value)
        elif key in _BOOL_FIELDS:
            if not isinstance(value, bool):
                raise ValueError(f"field {key!r} must be a boolean")
            setattr(node, _BOOL_FIELDS[key], value)
        elif key in _FLOAT_FIELDS:
            if not _is_number(value):
                raise ValueError(f"field {key!r} must be a number")
            setattr(node, _FLOAT_FIELDS[key], float(value))
        elif key in _MAP_FIELDS:
            if not isinstance(value, dict):
                raise ValueError(f"field {key!r} must be an object")
            setattr(node, _MAP_FIELDS[key], value)
        elif key == "childrenNode":
            if not isinstance(value, list):
                raise ValueError("field 'childrenNode' must be an array")
            children: list[ComponentNode | None] = []
            for child in value:
                if child is None:
                    children.append(None)
                elif isinstance(child, dict):
                    children.append(_node_from_mapping(child))
                else:
                    raise ValueError("children nodes must be objects")
            node.children_node = children
    return node


def component_node_from_json(data: str | bytes) -> ComponentNode:
    """Parse a component node from its JSON text; raise ValueError when invalid."""
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8")
    parsed = json.loads(data)
    if parsed is None:
        return ComponentNode()
    if not isinstance(parsed, dict):
        raise ValueError("component node JSON must be an object")
    return _node_from_mapping(parsed)


def construct_component_state_for_update(data: Any) -> ComponentStateForUpdate:
    """Build an update pair from a decoded payload mapping."""
    if not isinstance(data, dict):
        raise ValueError(
            "ConstructComponentStateForUpdateByPayload() failed, please check payload syntax."
        )
    update = ComponentStateForUpdate()
    if "before" in data:
        update.before = data["before"]
    if "after" in data:
        update.after = data["after"]
    return update


def construct_component_node(data: Any) -> ComponentNode | None:
    """Build a node from a decoded payload; fields of the wrong type become empty.

    Returns None when ``data`` is not a mapping.
    """
    if not isinstance(data, dict):
        return None
    node = ComponentNode()
    for key, value in data.items():
        if key in _STRING_FIELDS:
            setattr(node, _STRING_FIELDS[key], value if isinstance(value, str) else "")
        elif key in _BOOL_FIELDS:
            setattr(node, _BOOL_FIELDS[key], value if isinstance(value, bool) else False)
        elif key in _FLOAT_FIELDS:
            setattr(node, _FLOAT_FIELDS[key], float(value) if _is_number(value) else 0.0)
        elif key in _MAP_FIELDS:
            setattr(node, _MAP_FIELDS[key], value if isinstance(value, dict) else None)
        elif key == "childrenNode" and isinstance(value, list):
            for child in value:
                node.append_children_node(construct_component_node(child))
    return node


def build_component_tree(
    tree_state: Any,
    tree_state_map: Mapping[int, Any],
    parent: ComponentNode | None,
) -> ComponentNode:
    """Assemble a component tree rooted at ``tree_state``.

    ``tree_state_map`` maps tree state ids to tree states; a missing child
    id raises ValueError.
    """
    node = tree_state.export_content_as_component_state()
    for child_id in tree_state.export_children_node_ref_ids():
        child_state = tree_state_map.get(child_id)
        if child_state is None:
            raise ValueError(
                f"TreeState relation has broken, can not find children node id: {child_id}"
            )
        node.append_children_node(build_component_tree(child_state, tree_state_map, node))
    node.update_parent_node(parent)
    return node