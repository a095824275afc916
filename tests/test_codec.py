import json

import pytest

from wsrelay.codec import (
    Binary, Close, Echo, Heartbeat, RawBinary, ServerBroadcast, Text, Welcome,
    decode, decode_close, encode, heartbeat, server_broadcast,
)


def test_decode_text_and_binary():
    assert decode("hi", False) == Text("hi")
    assert decode(b"\xde\xad", True) == Binary(b"\xde\xad")
    assert decode(bytearray(b"ab"), True) == Binary(b"ab")


def test_decode_text_bytes_never_fails():
    assert decode(b"caf\xc3\xa9", False) == Text("café")
    assert decode(b"\xff", False) == Text("\ufffd")


def test_decode_close_reason_fallback():
    assert decode_close(1000, "bye") == Close(1000, "bye")
    assert decode_close(1001, b"going away") == Close(1001, "going away")
    assert decode_close(1002, b"\xff\xfe") == Close(1002, "")
    assert decode_close(None, None) == Close(1005, "")


@pytest.mark.parametrize("message, expected", [
    (Welcome("hi"), {"type": "welcome", "msg": "hi"}),
    (Echo("{not json"), {"type": "echo", "payload": "{not json"}),
    (Heartbeat("2024-01-01T00:00:00.000Z"), {"type": "heartbeat", "t": "2024-01-01T00:00:00.000Z"}),
    (ServerBroadcast("2024-01-01T00:00:00.000Z", 2),
     {"type": "server_broadcast", "t": "2024-01-01T00:00:00.000Z", "clients": 2}),
])
def test_encode_json_messages(message, expected):
    data, is_binary = encode(message)
    assert is_binary is False
    assert isinstance(data, str)
    assert json.loads(data) == expected


def test_encode_binary_passthrough():
    payload = bytes(range(256))
    data, is_binary = encode(RawBinary(payload))
    assert is_binary is True
    assert data is payload


def test_encode_unknown_message():
    with pytest.raises(TypeError):
        encode(Text("inbound frames are not outbound messages"))


def test_timestamped_helpers():
    hb = heartbeat()
    assert hb.t.endswith("Z") and "T" in hb.t
    sb = server_broadcast(3)
    assert sb.clients == 3
