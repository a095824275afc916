"""
ProtocolHandler: конечный автомат одного подключения (Connecting -> Open -> Closed).

- при подключении: регистрация в реестре и приветствие
- текстовый кадр: ответ {"type": "echo", "payload": <текст как есть>}
- бинарный кадр: эхо теми же байтами, без обёртки
- ping/pong: только логируются (pong на ping отвечает сам транспорт)
- close/error: удаление из реестра и отмена heartbeat, ровно один раз
"""

import logging
from functools import partial
from typing import Optional

from websockets.exceptions import ConnectionClosedError

from .codec import (
    Binary, Close, Echo, Error, InboundFrame, Ping, Pong, RawBinary, Text, Welcome,
    decode, decode_close,
)
from .config import Settings, settings as default_settings
from .connection import Connection
from .heartbeat import start_heartbeat
from .registry import Registry
from .utils import preview_buffer

diag = logging.getLogger("ws_diag")


class ProtocolHandler:
    """
    Обработка событий подключений. Общего состояния, кроме реестра, не держит.
    """

    def __init__(self, registry: Optional[Registry] = None, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.registry = registry if registry is not None else Registry(verbose=self.settings.DEBUG_WS)

    def _preview(self, data: bytes) -> str:
        return preview_buffer(data, self.settings.DEBUG_PREVIEW)

    async def on_connect(self, conn: Connection) -> None:
        self.registry.register(conn)
        logging.info(f"[WS] CONNECT {conn.remote_address} | total={self.registry.size()}")
        await conn.send(Welcome(self.settings.WELCOME_MSG))
        if self.settings.DEBUG_WS:
            start_heartbeat(conn, self.settings.heartbeat_interval)

    async def on_frame(self, conn: Connection, frame: InboundFrame) -> None:
        """
        Обработать один входящий кадр. Кадры одного подключения приходят по порядку.
        """
        if isinstance(frame, Text):
            diag.info(f"< TXT from {conn.remote_address} :: {frame.text}")
            await conn.send(Echo(frame.text))
        elif isinstance(frame, Binary):
            diag.info(f"< BIN from {conn.remote_address} :: {self._preview(frame.data)}")
            await conn.send(RawBinary(frame.data))
        elif isinstance(frame, (Ping, Pong)):
            self.on_control(conn, frame)
        elif isinstance(frame, Close):
            self.on_close(conn, frame.code, frame.reason)
        elif isinstance(frame, Error):
            self.on_error(conn, frame.cause)
        else:
            raise TypeError(f"Неизвестный кадр: {frame!r}")

    def on_control(self, conn: Connection, frame) -> None:
        kind = "PING" if isinstance(frame, Ping) else "PONG"
        diag.info(f"< {kind} from {conn.remote_address} :: {self._preview(frame.data)}")

    def on_close(self, conn: Connection, code: Optional[int] = None, reason=None) -> bool:
        """
        Закрытие подключения.

        :return: True, если подключение было удалено из реестра этим вызовом
        """
        close = decode_close(code, reason)
        removed = self.registry.deregister(conn)
        logging.info(
            f'[WS] CLOSE {conn.remote_address} :: code={close.code} reason="{close.reason}" '
            f"| total={self.registry.size()}"
        )
        return removed

    def on_error(self, conn: Connection, cause) -> bool:
        """
        Транспортная ошибка. Считается закрытием, процесс не роняет.
        """
        logging.error(f"[WS] ERROR {conn.remote_address} :: {cause}")
        return self.registry.deregister(conn)

    async def serve(self, transport) -> None:
        """
        Обработка одного WebSocket-клиента от подключения до закрытия.
        """
        conn = Connection(transport)
        if hasattr(transport, "control_listener"):
            transport.control_listener = partial(self.on_control, conn)
        try:
            await self.on_connect(conn)
            async for message in transport:
                await self.on_frame(conn, decode(message, isinstance(message, bytes)))
        except ConnectionClosedError as exc:
            self.on_error(conn, exc)
        except Exception as exc:
            logging.error(f"[WS] Критическая ошибка {conn.remote_address}: {exc}", exc_info=True)
            self.on_error(conn, exc)
        finally:
            if hasattr(transport, "control_listener"):
                transport.control_listener = None
            self.on_close(conn, getattr(transport, "close_code", None), getattr(transport, "close_reason", None))
