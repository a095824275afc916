"""
Утилитарные функции (временные метки, превью бинарных данных).
"""

from datetime import datetime, timezone

def ts() -> str:
    """
    Текущее время UTC в ISO-8601 с миллисекундами: 2024-01-01T12:00:00.000Z
    """
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"

def preview_buffer(buf: bytes, max_bytes: int = 128) -> str:
    """
    Короткое hex-превью бинарного кадра для логов.

    :param buf: Данные кадра
    :param max_bytes: Максимум байт в превью
    :return: Строка вида "4 bytes: de ad be ef"
    """
    length = len(buf)
    hexstr = bytes(buf[:max_bytes]).hex(" ")
    shown = f" (showing {max_bytes})" if length > max_bytes else ""
    return f"{length} bytes{shown}: {hexstr}"

def format_peer(address) -> str:
    """
    Преобразует адрес пира (host, port[, ...]) в строку host:port ([host]:port для IPv6).
    Пустая строка, если адрес неизвестен.
    """
    if not address:
        return ""
    if isinstance(address, str):
        return address
    host, port = address[0], address[1]
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"
