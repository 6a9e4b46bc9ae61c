"""Messages exchanged with websocket clients."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

OPTION_BROADCAST_ROOM = 1
BROADCAST_TYPE_SUFFIX = "/remote"


class Signal(IntEnum):
    """What a client message asks for."""

    PING = 0
    ENTER = 1
    LEAVE = 2
    CREATE_STATE = 3
    DELETE_STATE = 4
    UPDATE_STATE = 5
    MOVE_STATE = 6
    CREATE_OR_UPDATE_STATE = 7
    BROADCAST_ONLY = 8
    PUT_STATE = 9
    GLOBAL_BROADCAST_ONLY = 10


class Target(IntEnum):
    """Which state a client message acts on."""

    NOTHING = 0
    COMPONENTS = 1
    DEPENDENCIES = 2
    DRAG_SHADOW = 3
    DOTTED_LINE_SQUARE = 4
    DISPLAY_NAME = 5
    APPS = 6
    RESOURCE = 7
    ACTION = 8


@dataclass
class Broadcast:
    """A payload to be relayed to other clients."""

    type: str = ""
    payload: Any = None


@dataclass
class Message:
    """A decoded client message."""

    client_id: uuid.UUID
    signal: int = 0
    app_id: int = 0
    option: int = 0
    payload: list[Any] = field(default_factory=list)
    target: int = 0
    broadcast: Broadcast | None = None
    need_broadcast: bool = False

    def rewrite_broadcast(self) -> None:
        """Mark the broadcast type as coming from a remote client."""
        if self.need_broadcast and self.broadcast is not None:
            self.broadcast.type += BROADCAST_TYPE_SUFFIX


def _as_int(name: str, value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {name!r} must be an integer")
    return value


def _as_broadcast(value: Any) -> Broadcast | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValueError("field 'broadcast' must be an object")
    broadcast = Broadcast()
    for key, item in value.items():
        lowered = key.lower()
        if lowered == "type":
            if item is not None and not isinstance(item, str):
                raise ValueError("field 'broadcast.type' must be a string")
            broadcast.type = item or ""
        elif lowered == "payload":
            broadcast.payload = item
    return broadcast


def new_message(client_id: uuid.UUID, app_id: int, raw_message: str | bytes) -> Message:
    """Decode a client message, stamping it with the sender and app.

    Raises ValueError when the message is not valid JSON of the expected shape.
    """
    data = json.loads(raw_message)
    if data is not None and not isinstance(data, dict):
        raise ValueError("message must be a JSON object")

    message = Message(client_id=client_id)
    for key, value in (data or {}).items():
        lowered = key.lower()
        if lowered in ("signal", "option", "target"):
            setattr(message, lowered, _as_int(key, value))
        elif lowered == "payload":
            if value is not None and not isinstance(value, list):
                raise ValueError("field 'payload' must be an array")
            message.payload = value or []
        elif lowered == "broadcast":
            message.broadcast = _as_broadcast(value)

    message.client_id = client_id
    message.app_id = app_id
    message.need_broadcast = message.broadcast is not None
    return message