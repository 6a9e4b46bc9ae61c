"""Display-name payload handling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

DisplayNameState = list[str]


@dataclass
class DisplayNameStateForUpdate:
    """A before/after pair describing a display-name rename."""

    before: str = ""
    after: str = ""


def resolve_display_name(data: Any) -> str:
    """Return ``data`` when it is a display name string."""
    if not isinstance(data, str):
        raise ValueError("ResolveDisplayNameByPayload() failed, please check payload syntax.")
    return data


def resolve_display_name_state(data: Any) -> DisplayNameState:
    """Return the list of display names held in ``data``."""
    if not isinstance(data, list):
        raise ValueError("ConstructDisplayNameByMap() failed, please check payload syntax.")
    names: DisplayNameState = []
    for item in data:
        if not isinstance(item, str):
            raise TypeError(f"display name must be a string, got {type(item).__name__}")
        names.append(item)
    return names


def construct_display_name_state_for_update(data: Any) -> DisplayNameStateForUpdate:
    """Build a rename pair from a decoded payload mapping."""
    if not isinstance(data, dict):
        raise ValueError(
            "ConstructDisplayNameStateForUpdateByPayload() failed, please check payload syntax."
        )
    update = DisplayNameStateForUpdate()
    for key in ("before", "after"):
        if key in data:
            value = data[key]
            if not isinstance(value, str):
                raise TypeError(f"{key!r} must be a string, got {type(value).__name__}")
            setattr(update, key, value)
    return update