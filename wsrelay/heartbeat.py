"""
Heartbeat: периодические проверки живости подключения и периодический broadcast.
Включаются только в режиме DEBUG_WS.
"""

import asyncio
import logging
from typing import Optional

from .codec import heartbeat, server_broadcast
from .connection import Connection
from .registry import Registry

diag = logging.getLogger("ws_diag")


async def _heartbeat_loop(conn: Connection, interval: float):
    try:
        while True:
            await asyncio.sleep(interval)
            if not conn.is_open:
                break
            await conn.send(heartbeat())
            diag.info(f"> HEARTBEAT to {conn.remote_address}")
            # pong от клиента придёт в on_control, по нему видно задержку
            await conn.send_ping()
    except Exception as e:
        logging.error(f"[WS] Heartbeat остановлен {conn.remote_address}: {e}", exc_info=True)


def start_heartbeat(conn: Connection, interval: float) -> asyncio.Task:
    """
    Запустить heartbeat для подключения.

    Задача хранится в conn.heartbeat и отменяется при удалении из реестра.
    Если соединение уже не OPEN на очередном тике, задача завершается сама.

    :param conn: Подключение
    :param interval: Интервал, секунды
    """
    conn.cancel_heartbeat()
    conn.heartbeat = asyncio.create_task(
        _heartbeat_loop(conn, interval), name=f"heartbeat-{conn.id[:8]}"
    )
    return conn.heartbeat


class BroadcastScheduler:
    """
    Один на процесс: раз в interval секунд рассылает server_broadcast с числом клиентов.
    """

    def __init__(self, registry: Registry, interval: float):
        self.registry = registry
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="server-broadcast")
        logging.info(f"[WS] Периодический broadcast каждые {self.interval:g}s")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.registry.broadcast(server_broadcast(self.registry.size()))
            except Exception as e:
                logging.error(f"[WS] Ошибка периодического broadcast: {e}", exc_info=True)
