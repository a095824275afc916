import pytest
from websockets.exceptions import ConnectionClosedOK
from websockets.protocol import State

from wsrelay.config import Settings
from wsrelay.connection import Connection
from wsrelay.handler import ProtocolHandler
from wsrelay.registry import Registry


class FakeTransport:
    """In-memory stand-in for a websockets ServerConnection."""

    def __init__(self, remote_address=("127.0.0.1", 50000)):
        self.state = State.OPEN
        self.remote_address = remote_address
        self.sent = []
        self.pings = []
        self.close_code = None
        self.close_reason = None

    async def send(self, data):
        if self.state is not State.OPEN:
            raise ConnectionClosedOK(None, None)
        self.sent.append(data)

    async def ping(self, data=None):
        if self.state is not State.OPEN:
            raise ConnectionClosedOK(None, None)
        self.pings.append(data)

    def close(self, code=1000, reason=""):
        self.state = State.CLOSED
        self.close_code = code
        self.close_reason = reason


@pytest.fixture
def make_transport():
    return FakeTransport


@pytest.fixture
def make_conn():
    def factory(port=50000):
        return Connection(FakeTransport(("127.0.0.1", port)))
    return factory


@pytest.fixture
def settings():
    return Settings(WELCOME_MSG="hello there", DEBUG_WS=False, DEBUG_PREVIEW=4)


@pytest.fixture
def registry():
    return Registry()


@pytest.fixture
def handler(registry, settings):
    return ProtocolHandler(registry, settings)
