import json

import pytest

from illabuilder.displayname import (
    DisplayNameStateForUpdate,
    construct_display_name_state_for_update,
    resolve_display_name,
    resolve_display_name_state,
)


def test_resolve_display_name():
    assert resolve_display_name("testDisplayName-01") == "testDisplayName-01"


def test_resolve_display_name_rejects_non_string():
    with pytest.raises(ValueError, match="check payload syntax"):
        resolve_display_name(12)


def test_resolve_display_name_state():
    names = ["testDisplayName-01", "testDisplayName-02", "testDisplayName-03"]
    assert resolve_display_name_state(list(names)) == names


def test_resolve_display_name_state_rejects_non_list():
    with pytest.raises(ValueError, match="check payload syntax"):
        resolve_display_name_state("testDisplayName-01")


def test_resolve_display_name_state_rejects_non_string_item():
    with pytest.raises(TypeError):
        resolve_display_name_state(["ok", 3])


def test_construct_display_name_state_for_update():
    payload = json.loads('{    "before":"image1",    "after":"image_1"}')
    result = construct_display_name_state_for_update(payload)
    assert result == DisplayNameStateForUpdate(before="image1", after="image_1")


def test_construct_display_name_state_for_update_rejects_non_mapping():
    with pytest.raises(ValueError, match="check payload syntax"):
        construct_display_name_state_for_update(["image1"])


def test_construct_display_name_state_for_update_rejects_bad_value():
    with pytest.raises(TypeError):
        construct_display_name_state_for_update({"before": 1, "after": "image_1"})