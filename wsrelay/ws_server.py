"""
WebSocket сервер: HTTP health-check на "/" и upgrade на WS_PATH.
"""

import asyncio
import logging
import time
from http import HTTPStatus
from typing import Optional
from urllib.parse import urlsplit

from websockets.asyncio.server import ServerConnection, serve
from websockets.frames import Frame, Opcode

from .codec import Ping, Pong
from .handler import ProtocolHandler
from .heartbeat import BroadcastScheduler


class RelayConnection(ServerConnection):
    """
    ServerConnection, который сообщает о входящих PING/PONG.

    Ответ pong на ping по-прежнему отправляет сама библиотека.
    """

    control_listener = None

    def process_event(self, event) -> None:
        super().process_event(event)
        if self.control_listener is None or not isinstance(event, Frame):
            return
        if event.opcode is Opcode.PING:
            self.control_listener(Ping(bytes(event.data)))
        elif event.opcode is Opcode.PONG:
            self.control_listener(Pong(bytes(event.data)))


def make_process_request(ws_path: str):
    def process_request(connection, request):
        connection.http_started = time.monotonic()
        path = urlsplit(request.path).path
        if path == "/":
            return connection.respond(HTTPStatus.OK, "OK")
        if path != ws_path:
            return connection.respond(HTTPStatus.NOT_FOUND, "Not Found")
        return None
    return process_request


def process_response(connection, request, response):
    started = getattr(connection, "http_started", None)
    elapsed = int((time.monotonic() - started) * 1000) if started is not None else 0
    logging.info(f"[HTTP] GET {request.path} -> {response.status_code} ({elapsed}ms)")
    return None


def create_server(handler: ProtocolHandler, host: Optional[str] = None, port: Optional[int] = None):
    """
    Собрать сервер (async context manager) для обработчика.
    """
    cfg = handler.settings
    return serve(
        handler.serve,
        host if host is not None else cfg.HOST,
        port if port is not None else cfg.PORT,
        process_request=make_process_request(cfg.WS_PATH),
        process_response=process_response,
        create_connection=RelayConnection,
        # живость проверяет heartbeat в режиме DEBUG_WS
        ping_interval=None,
    )


async def run_ws_server(port: Optional[int] = None, host: Optional[str] = None,
                        handler: Optional[ProtocolHandler] = None,
                        ready: Optional[asyncio.Future] = None):
    """
    Запуск WS-сервера. Работает до отмены.

    :param ready: Future, в который кладётся фактический порт после старта
    """
    handler = handler or ProtocolHandler()
    cfg = handler.settings
    scheduler = BroadcastScheduler(handler.registry, cfg.broadcast_interval) if cfg.DEBUG_WS else None
    async with create_server(handler, host, port) as server:
        bound_port = server.sockets[0].getsockname()[1] if server.sockets else port
        logging.info(f"HTTP+WS слушаем порт {bound_port}")
        logging.info(f"WS endpoint: ws://<host>:{bound_port}{cfg.WS_PATH}")
        logging.info(f"Debug: DEBUG_WS={'ON' if cfg.DEBUG_WS else 'OFF'}, PREVIEW={cfg.DEBUG_PREVIEW} bytes")
        if scheduler is not None:
            scheduler.start()
        if ready is not None and not ready.done():
            ready.set_result(bound_port)
        try:
            await asyncio.Future()
        finally:
            if scheduler is not None:
                await scheduler.stop()
