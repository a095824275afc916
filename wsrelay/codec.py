"""
Кодек кадров: входящие сырые данные -> InboundFrame, исходящие сообщения -> кадр на проводе.

Текстовые исходящие сообщения сериализуются в JSON-объект с полем-дискриминатором "type".
Бинарное эхо (RawBinary) уходит без обёртки, байт в байт.
"""

import json
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .utils import ts

# Код закрытия "no status received" (RFC 6455, 7.4.1)
CLOSE_NO_STATUS = 1005

# --- входящие кадры ---

@dataclass(frozen=True)
class Text:
    text: str

@dataclass(frozen=True)
class Binary:
    data: bytes

@dataclass(frozen=True)
class Ping:
    data: bytes = b""

@dataclass(frozen=True)
class Pong:
    data: bytes = b""

@dataclass(frozen=True)
class Close:
    code: int
    reason: str = ""

@dataclass(frozen=True)
class Error:
    cause: str

InboundFrame = Union[Text, Binary, Ping, Pong, Close, Error]

# --- исходящие сообщения ---

@dataclass(frozen=True)
class Welcome:
    msg: str

@dataclass(frozen=True)
class Echo:
    payload: str

@dataclass(frozen=True)
class Heartbeat:
    t: str

@dataclass(frozen=True)
class ServerBroadcast:
    t: str
    clients: int

@dataclass(frozen=True)
class RawBinary:
    data: bytes

OutboundMessage = Union[Welcome, Echo, Heartbeat, ServerBroadcast, RawBinary]


def decode(raw, is_binary: bool) -> InboundFrame:
    """
    Преобразует полезную нагрузку кадра данных в Text или Binary.

    :param raw: str или bytes-подобный объект от транспорта
    :param is_binary: True, если транспорт пометил кадр как бинарный
    """
    if is_binary:
        if isinstance(raw, str):
            return Binary(raw.encode("utf-8"))
        return Binary(bytes(raw))
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return Text(bytes(raw).decode("utf-8", "replace"))
    return Text(raw)


def decode_close(code: Optional[int], reason) -> Close:
    """
    Собирает Close из кода и причины закрытия.
    Причина, которую нельзя прочитать как текст, становится пустой строкой.
    """
    if code is None:
        code = CLOSE_NO_STATUS
    if isinstance(reason, str):
        return Close(code, reason)
    if isinstance(reason, (bytes, bytearray, memoryview)):
        try:
            return Close(code, bytes(reason).decode("utf-8"))
        except UnicodeDecodeError:
            pass
    return Close(code, "")


def encode(message: OutboundMessage) -> Tuple[Union[str, bytes], bool]:
    """
    Сериализует исходящее сообщение ровно в один кадр.

    :return: (данные, is_binary)
    """
    if isinstance(message, RawBinary):
        return message.data, True
    if isinstance(message, Welcome):
        obj = {"type": "welcome", "msg": message.msg}
    elif isinstance(message, Echo):
        obj = {"type": "echo", "payload": message.payload}
    elif isinstance(message, Heartbeat):
        obj = {"type": "heartbeat", "t": message.t}
    elif isinstance(message, ServerBroadcast):
        obj = {"type": "server_broadcast", "t": message.t, "clients": message.clients}
    else:
        raise TypeError(f"Неизвестный тип сообщения: {type(message).__name__}")
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":")), False


def heartbeat() -> Heartbeat:
    return Heartbeat(t=ts())


def server_broadcast(clients: int) -> ServerBroadcast:
    return ServerBroadcast(t=ts(), clients=clients)
