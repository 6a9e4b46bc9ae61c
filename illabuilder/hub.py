"""Websocket client registry, broadcasting and connection pumps."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Protocol

from .feedback import ErrorCode, Feedback
from .protocol import Message, new_message

WRITE_WAIT = 10.0
PONG_WAIT = 60.0
PING_PERIOD = PONG_WAIT * 9 / 10
MAX_MESSAGE_SIZE = 1048576
SEND_BUFFER_SIZE = 1024

DEFAULT_INSTANCE_ID = "SELF_HOST"
DEFAULT_APP_ID = 0
DASHBOARD_APP_ID = -1

_logger = logging.getLogger(__name__)


class Connection(Protocol):
    """The websocket operations the pumps rely on."""

    async def recv(self) -> str | bytes: ...

    async def send(self, data: str) -> None: ...

    async def ping(self) -> Any: ...

    async def close(self) -> None: ...


class Hub:
    """Keeps the connected clients and relays messages between them."""

    def __init__(self) -> None:
        self.clients: dict[uuid.UUID, Client] = {}
        self.broadcast: asyncio.Queue[str] = asyncio.Queue()
        self.on_message: asyncio.Queue[Message] = asyncio.Queue()
        self.unregister: asyncio.Queue[Client] = asyncio.Queue()
        self.tree_state_service: Any = None
        self.kv_state_service: Any = None
        self.set_state_service: Any = None
        self.app_service: Any = None
        self.resource_service: Any = None
        self.authenticator: Any = None

    def register(self, client: Client) -> None:
        """Add ``client`` to the connected clients."""
        self.clients[client.id] = client

    def broadcast_to_other_clients(self, message: Message, current_client: Client) -> None:
        """Relay the message's broadcast to the other clients of the same app."""
        if not message.need_broadcast:
            return
        data = Feedback(ErrorCode.BROADCAST, "", message.broadcast, None).serialize()
        for client in list(self.clients.values()):
            if client.id == current_client.id or client.app_id != current_client.app_id:
                continue
            client._enqueue(data)

    def broadcast_to_global(
        self, message: Message, current_client: Client, include_current_client: bool
    ) -> None:
        """Relay the message's broadcast to every client, whatever its app."""
        data = Feedback(ErrorCode.BROADCAST, "", message.broadcast, None).serialize()
        for client in list(self.clients.values()):
            if client.id == current_client.id and not include_current_client:
                continue
            client._enqueue(data)


def kick_client(hub: Hub, client: Client) -> None:
    """Close the client's outbound queue and drop it from the hub."""
    client._close_send()
    hub.clients.pop(client.id, None)


class Client:
    """One websocket connection attached to a hub."""

    def __init__(self, hub: Hub, conn: Connection, instance_id: str, app_id: int) -> None:
        self.id = uuid.uuid4()
        self.mapped_user_id = 0
        self.is_logged_in = False
        self.hub = hub
        self.conn = conn
        self.send: asyncio.Queue[str | None] = asyncio.Queue()
        self.instance_id = instance_id
        self.app_id = app_id
        self._closed = False

    def _enqueue(self, data: str) -> None:
        if self._closed:
            raise RuntimeError("send on closed client")
        if self.send.qsize() >= SEND_BUFFER_SIZE:
            _logger.warning("outbound buffer full for client %s, message dropped", self.id)
            return
        self.send.put_nowait(data)

    def _close_send(self) -> None:
        if not self._closed:
            self._closed = True
            self.send.put_nowait(None)

    def feedback(self, message: Message, error_code: int, error: BaseException | None) -> None:
        """Queue a reply to ``message`` for this client."""
        text = "" if error is None else str(error)
        self._enqueue(Feedback(error_code, text, message.broadcast, None).serialize())

    async def read_pump(self) -> None:
        """Read messages from the connection and hand them to the hub."""
        try:
            while True:
                try:
                    raw = await asyncio.wait_for(self.conn.recv(), PONG_WAIT)
                except Exception as exc:
                    _logger.debug("read from client %s ended: %s", self.id, exc)
                    break
                size = len(raw) if isinstance(raw, bytes) else len(raw.encode("utf-8"))
                if size > MAX_MESSAGE_SIZE:
                    _logger.warning("message from client %s exceeds size limit", self.id)
                    break
                if isinstance(raw, bytes):
                    raw = raw.replace(b"\n", b" ").strip()
                else:
                    raw = raw.replace("\n", " ").strip()
                try:
                    message = new_message(self.id, self.app_id, raw)
                except ValueError:
                    continue
                await self.hub.on_message.put(message)
        finally:
            await self.hub.unregister.put(self)
            await self.conn.close()

    async def write_pump(self) -> None:
        """Write queued replies to the connection and keep it alive with pings."""
        try:
            while True:
                try:
                    message = await asyncio.wait_for(self.send.get(), PING_PERIOD)
                except asyncio.TimeoutError:
                    try:
                        await asyncio.wait_for(self.conn.ping(), WRITE_WAIT)
                    except Exception:
                        return
                    continue
                if message is None:
                    return
                batch = [message]
                closing = False
                for _ in range(self.send.qsize()):
                    queued = self.send.get_nowait()
                    if queued is None:
                        closing = True
                        break
                    batch.append(queued)
                try:
                    await asyncio.wait_for(self.conn.send("\n".join(batch)), WRITE_WAIT)
                except Exception:
                    return
                if closing:
                    return
        finally:
            await self.conn.close()