"""
wsrelay: WebSocket релей с эхо и broadcast.
"""

from .connection import Connection, ConnState
from .errors import RegistryError, RelayError
from .handler import ProtocolHandler
from .registry import Registry

__all__ = [
    "Connection",
    "ConnState",
    "ProtocolHandler",
    "Registry",
    "RegistryError",
    "RelayError",
]
