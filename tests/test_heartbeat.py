import asyncio
import json
import logging

import pytest

from wsrelay.heartbeat import BroadcastScheduler, start_heartbeat


def types_sent(conn):
    return [json.loads(item)["type"] for item in conn.transport.sent if isinstance(item, str)]


async def test_heartbeat_sends_message_and_ping(make_conn):
    conn = make_conn()
    task = start_heartbeat(conn, 0.01)
    await asyncio.sleep(0.05)
    conn.cancel_heartbeat()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert types_sent(conn).count("heartbeat") >= 2
    assert len(conn.transport.pings) >= 2


async def test_heartbeat_stops_after_close(make_conn):
    conn = make_conn()
    task = start_heartbeat(conn, 0.01)
    await asyncio.sleep(0.025)
    conn.transport.close()
    sent_at_close = len(conn.transport.sent)
    await asyncio.wait_for(task, timeout=1)
    assert task.done() and not task.cancelled()
    assert len(conn.transport.sent) == sent_at_close


async def test_deregister_cancels_heartbeat(registry, make_conn):
    conn = make_conn()
    registry.register(conn)
    task = start_heartbeat(conn, 10)
    registry.deregister(conn)
    with pytest.raises(asyncio.CancelledError):
        await task
    assert conn.heartbeat is None


async def test_broadcast_scheduler(registry, make_conn):
    a, b = make_conn(1), make_conn(2)
    registry.register(a)
    registry.register(b)
    scheduler = BroadcastScheduler(registry, 0.01)
    scheduler.start()
    assert scheduler.running
    await asyncio.sleep(0.05)
    await scheduler.stop()
    assert not scheduler.running

    for conn in (a, b):
        messages = [json.loads(item) for item in conn.transport.sent]
        assert messages
        assert all(m["type"] == "server_broadcast" and m["clients"] == 2 for m in messages)


async def test_broadcast_scheduler_stop_without_start(registry):
    await BroadcastScheduler(registry, 1).stop()


async def test_heartbeat_transport_failure_is_logged(make_conn, caplog):
    caplog.set_level(logging.ERROR)
    conn = make_conn()

    async def broken_send(data):
        raise OSError("reset")

    conn.transport.send = broken_send
    task = start_heartbeat(conn, 0.01)
    await asyncio.wait_for(task, timeout=1)

    assert task.exception() is None
    assert "Heartbeat остановлен 127.0.0.1:50000: reset" in caplog.text
