"""
Registry: управление WebSocket-подписчиками и рассылка сообщений.
"""

import logging
from typing import Dict, List, Tuple

from .codec import OutboundMessage
from .connection import Connection
from .errors import RegistryError


class Registry:
    """
    Множество живых подключений процесса.

    Работает в одном event loop, поэтому без блокировок. broadcast() идёт по снимку,
    так что удаление во время рассылки безопасно.
    """

    def __init__(self, verbose: bool = False):
        self._members: Dict[str, Connection] = {}
        self.verbose = verbose

    def register(self, conn: Connection) -> None:
        """
        Зарегистрировать подключение.

        :raises RegistryError: если подключение с таким id уже зарегистрировано
        """
        if conn.id in self._members:
            logging.error(f"[WS] Повторная регистрация подключения {conn!r}")
            raise RegistryError(f"connection {conn.id} already registered")
        self._members[conn.id] = conn

    def deregister(self, conn: Connection) -> bool:
        """
        Удалить подключение. Повторное удаление ничего не делает.

        :return: True, если подключение было в реестре
        """
        conn.cancel_heartbeat()
        return self._members.pop(conn.id, None) is not None

    def snapshot(self) -> List[Connection]:
        return list(self._members.values())

    def size(self) -> int:
        return len(self._members)

    def __len__(self):
        return len(self._members)

    def __contains__(self, conn):
        return getattr(conn, "id", None) in self._members

    async def broadcast(self, message: OutboundMessage) -> Tuple[int, int]:
        """
        Разослать сообщение всем открытым подключениям.
        Каждая отправка идёт отдельной задачей, возврат не ждёт записи в сокеты.

        :param message: Исходящее сообщение
        :return: (отправлено открытым, всего в реестре)
        """
        members = self.snapshot()
        delivered = 0
        for conn in members:
            if conn.send_nowait(message):
                delivered += 1
        if self.verbose:
            logging.info(f"[WS] Broadcast delivered to {delivered}/{len(members)}")
        return delivered, len(members)
