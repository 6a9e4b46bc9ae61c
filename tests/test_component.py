import json

import pytest

from illabuilder.component import (
    ComponentNode,
    build_component_tree,
    component_node_from_json,
    construct_component_node,
    construct_component_state_for_update,
)
from illabuilder.treestate import StateType, TreeState

NESTED_JSON = (
    '{"displayName":"cnode1","parentNode":"","showName":"","error":false,"isDragging":false,'
    '"childrenNode":[{"displayName":"cnode2","parentNode":"cnode1","showName":"","error":false,'
    '"isDragging":false,"childrenNode":[{"displayName":"cnode4","parentNode":"cnode2","showName":"",'
    '"error":false,"isDragging":false,"childrenNode":[{"displayName":"cnode5","parentNode":"cnode4",'
    '"showName":"","error":false,"isDragging":false,"childrenNode":null,"type":"","containerType":null,'
    '"verticalResize":false,"h":0,"w":0,"minH":0,"minW":0,"unitW":0,"unitH":0,"x":0,"y":0,"z":0,'
    '"props":null,"panelConfig":null}],"type":"","containerType":null,"verticalResize":false,"h":0,'
    '"w":0,"minH":0,"minW":0,"unitW":0,"unitH":0,"x":0,"y":0,"z":0,"props":null,"panelConfig":null}],'
    '"type":"","containerType":null,"verticalResize":false,"h":0,"w":0,"minH":0,"minW":0,"unitW":0,'
    '"unitH":0,"x":0,"y":0,"z":0,"props":null,"panelConfig":null},{"displayName":"cnode3",'
    '"parentNode":"cnode1","showName":"","error":false,"isDragging":false,"childrenNode":null,'
    '"type":"","containerType":null,"verticalResize":false,"h":0,"w":0,"minH":0,"minW":0,"unitW":0,'
    '"unitH":0,"x":0,"y":0,"z":0,"props":null,"panelConfig":null}],"type":"","containerType":null,'
    '"verticalResize":false,"h":0,"w":0,"minH":0,"minW":0,"unitW":0,"unitH":0,"x":0,"y":0,"z":0,'
    '"props":null,"panelConfig":null}'
)

TREE_RESULT = (
    '{"displayName":"cnode1","parentNode":"","showName":"","error":false,"isDragging":false,'
    '"childrenNode":[{"displayName":"cnode2","parentNode":"cnode1","showName":"","error":false,'
    '"isDragging":false,"childrenNode":[{"displayName":"cnode4","parentNode":"cnode2","showName":"",'
    '"error":false,"isDragging":false,"childrenNode":[{"displayName":"cnode5","parentNode":"cnode4",'
    '"showName":"","error":false,"isDragging":false,"childrenNode":null,"type":"","containerType":"",'
    '"verticalResize":false,"h":0,"w":0,"minH":0,"minW":0,"unitW":0,"unitH":0,"x":0,"y":0,"z":0,'
    '"props":null,"panelConfig":null}],"type":"","containerType":"","verticalResize":false,"h":0,'
    '"w":0,"minH":0,"minW":0,"unitW":0,"unitH":0,"x":0,"y":0,"z":0,"props":null,"panelConfig":null}],'
    '"type":"","containerType":"","verticalResize":false,"h":0,"w":0,"minH":0,"minW":0,"unitW":0,'
    '"unitH":0,"x":0,"y":0,"z":0,"props":null,"panelConfig":null},{"displayName":"cnode3",'
    '"parentNode":"cnode1","showName":"","error":false,"isDragging":false,"childrenNode":null,'
    '"type":"","containerType":"","verticalResize":false,"h":0,"w":0,"minH":0,"minW":0,"unitW":0,'
    '"unitH":0,"x":0,"y":0,"z":0,"props":null,"panelConfig":null}],"type":"","containerType":"",'
    '"verticalResize":false,"h":0,"w":0,"minH":0,"minW":0,"unitW":0,"unitH":0,"x":0,"y":0,"z":0,'
    '"props":null,"panelConfig":null}'
)

DATABASE_RESULT = (
    '{"displayName":"","parentNode":"","showName":"","error":false,"isDragging":false,'
    '"childrenNode":null,"type":"","containerType":"","verticalResize":false,"h":0,"w":0,'
    '"minH":0,"minW":0,"unitW":0,"unitH":0,"x":0,"y":0,"z":0,"props":null,"panelConfig":null}'
)


def test_component_node_from_json():
    node = component_node_from_json(NESTED_JSON.encode())
    assert node.display_name == "cnode1"
    assert [child.display_name for child in node.children_node] == ["cnode2", "cnode3"]
    assert node.children_node[0].children_node[0].children_node[0].display_name == "cnode5"
    assert node.container_type == ""


def test_component_node_from_json_rejects_wrong_type():
    with pytest.raises(ValueError):
        component_node_from_json('{"h": "tall"}')


def test_component_node_from_json_rejects_bad_json():
    with pytest.raises(ValueError):
        component_node_from_json("{not json")


def test_construct_component_node_by_map():
    raw = (
        '{    "displayName": "root",    "parentNode": "",    "showName": "",    "error": false,'
        '    "isDragging": false,    "childrenNode": [],    "type": "",    "containerType": null,'
        '    "verticalResize": false,    "h": 0,    "w": 0,    "minH": 0,    "minW": 0,    "x": 0,'
        '    "y": 0,    "z": 0,    "props": null,    "panelConfig": null}'
    )
    node = construct_component_node(json.loads(raw))
    assert node.display_name == "root"
    assert node.parent_node == ""
    assert node.show_name == ""
    assert node.error is False
    assert node.is_dragging is False
    assert node.children_node is None
    assert node.type == ""
    assert node.container_type == ""
    assert node.vertical_resize is False
    for value in (node.h, node.w, node.min_h, node.min_w, node.unit_w, node.unit_h, node.x, node.y, node.z):
        assert value == 0.0
    assert node.props is None
    assert node.panel_config is None


def test_construct_component_node_nested_children():
    node = construct_component_node(
        {"displayName": "a", "childrenNode": [{"displayName": "b"}, "junk"]}
    )
    assert node.children_node[0].display_name == "b"
    assert node.children_node[1] is None


def test_construct_component_node_non_mapping():
    assert construct_component_node(["not", "a", "map"]) is None


def test_update_parent_node():
    parent = ComponentNode(display_name="testDisplayName-01")
    node = ComponentNode()
    node.update_parent_node(parent)
    assert node.parent_node == "testDisplayName-01"


def test_update_parent_node_with_none_keeps_value():
    node = ComponentNode(parent_node="kept")
    node.update_parent_node(None)
    assert node.parent_node == "kept"


def test_append_children_node():
    node = ComponentNode()
    child = ComponentNode()
    node.append_children_node(child)
    assert node.children_node[0] is child


def test_serialization_round_trip():
    node = ComponentNode(display_name="test")
    text = node.serialize()
    assert json.loads(text)["displayName"] == "test"
    assert component_node_from_json(text) == node


def test_serialization_escapes_and_sorts_props():
    node = ComponentNode(props={"b": "<x>", "a": 1.5})
    assert '"props":{"a":1.5,"b":"\\u003cx\\u003e"}' in node.serialize()


def test_serialization_for_database():
    node = ComponentNode(parent_node="parent")
    child = ComponentNode(display_name="children")
    node.append_children_node(child)
    assert node.serialize_for_database() == DATABASE_RESULT
    assert node.parent_node == "parent"
    assert node.children_node[0] is child


def test_construct_component_state_for_update():
    update = construct_component_state_for_update({"before": {"x": 1}, "after": {"x": 2}})
    assert update.before == {"x": 1}
    assert update.after == {"x": 2}


def test_construct_component_state_for_update_rejects_non_mapping():
    with pytest.raises(ValueError, match="check payload syntax"):
        construct_component_state_for_update("nope")


def _tree_states():
    children = {1: [2, 3], 2: [4], 3: [], 4: [5], 5: []}
    return {
        node_id: TreeState(
            id=node_id,
            state_type=StateType.COMPONENTS,
            parent_node_ref_id=0,
            children_node_ref_ids=json.dumps(ids, separators=(",", ":")),
            content=ComponentNode(display_name=f"cnode{node_id}").serialize(),
        )
        for node_id, ids in children.items()
    }


def test_build_component_tree():
    states = _tree_states()
    tree = build_component_tree(states[1], states, None)
    assert tree.serialize() == TREE_RESULT


def test_build_component_tree_broken_relation():
    states = _tree_states()
    del states[3]
    with pytest.raises(ValueError, match="can not find children node id: 3"):
        build_component_tree(states[1], states, None)