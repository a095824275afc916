"""
Connection: обёртка над одной транспортной WS-сессией.
"""

import asyncio
import enum
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Set

from websockets.exceptions import ConnectionClosed

from .codec import OutboundMessage, encode
from .utils import format_peer


class ConnState(enum.Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class Connection:
    """
    Один подключённый пир.

    Отправка best-effort: если соединение не OPEN или транспорт закрылся во время
    записи, сообщение отбрасывается без повторов и очередей.
    """

    def __init__(self, transport):
        self.transport = transport
        self.id = str(uuid.uuid4())
        self.remote_address = format_peer(getattr(transport, "remote_address", None))
        self.created_at = datetime.now(timezone.utc)
        self.heartbeat: Optional[asyncio.Task] = None
        self._pending: Set[asyncio.Task] = set()

    def __repr__(self):
        return f"<Connection {self.id[:8]} {self.remote_address or '?'} {self.status().value}>"

    def status(self) -> ConnState:
        """
        Состояние на момент вызова. Может измениться сразу после чтения.
        """
        return ConnState[self.transport.state.name]

    @property
    def is_open(self) -> bool:
        return self.status() is ConnState.OPEN

    async def send(self, message: OutboundMessage) -> bool:
        """
        Отправить одно сообщение.

        :return: True, если кадр передан транспорту; False, если отброшен
        """
        if not self.is_open:
            logging.debug(f"[WS] drop {type(message).__name__} -> {self.remote_address}: {self.status().value}")
            return False
        data, _ = encode(message)
        try:
            await self.transport.send(data)
        except ConnectionClosed:
            logging.debug(f"[WS] drop {type(message).__name__} -> {self.remote_address}: закрыто при отправке")
            return False
        return True

    def send_nowait(self, message: OutboundMessage) -> bool:
        """
        Поставить отправку в фоновую задачу и сразу вернуться.
        Медленный пир не задерживает вызывающего (broadcast по остальным).

        :return: True, если соединение было OPEN и отправка запланирована
        """
        if not self.is_open:
            return False
        task = asyncio.create_task(self.send(message))
        self._pending.add(task)
        task.add_done_callback(self._send_done)
        return True

    def _send_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logging.error(f"[WS] Ошибка отправки {self.remote_address}: {exc}", exc_info=exc)

    async def send_ping(self, payload: Optional[bytes] = None) -> bool:
        """
        Транспортный ping. Pong не ждём, он придёт в on_control.
        """
        if not self.is_open:
            return False
        try:
            await self.transport.ping(payload)
        except ConnectionClosed:
            return False
        return True

    def cancel_heartbeat(self) -> None:
        task, self.heartbeat = self.heartbeat, None
        if task is not None and not task.done():
            task.cancel()
