"""Replies sent to websocket clients."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from .component import _dump, _normalize
from .protocol import Broadcast


class ErrorCode(IntEnum):
    """Result codes carried by a feedback message."""

    OK = 0
    FAILED = 1
    NEED_ENTER = 2
    BROADCAST = 0
    PONG = 3
    LOGGEDIN = 0
    LOGIN_FAILED = 4
    CREATE_STATE_OK = 0
    CREATE_STATE_FAILED = 5
    DELETE_STATE_OK = 0
    DELETE_STATE_FAILED = 6
    UPDATE_STATE_OK = 0
    UPDATE_STATE_FAILED = 7
    MOVE_STATE_OK = 0
    MOVE_STATE_FAILED = 8
    CREATE_OR_UPDATE_STATE_OK = 0
    CREATE_OR_UPDATE_STATE_FAILED = 9
    CAN_NOT_MOVE_KVSTATE = 10
    CAN_NOT_MOVE_SETSTATE = 11


@dataclass
class Feedback:
    """A reply to one client message."""

    error_code: int = ErrorCode.OK
    error_message: str = ""
    broadcast: Broadcast | None = None
    data: Any = None

    def serialize(self) -> str:
        """Return the compact JSON form sent over the wire."""
        broadcast = None
        if self.broadcast is not None:
            broadcast = {
                "type": self.broadcast.type,
                "payload": _normalize(self.broadcast.payload),
            }
        return _dump(
            {
                "errorCode": int(self.error_code),
                "errorMessage": self.error_message,
                "broadcast": broadcast,
                "data": _normalize(self.data),
            }
        )