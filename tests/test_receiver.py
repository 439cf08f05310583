import asyncio
import logging

import pytest

from ssdp_discovery_protocol import (
    SHUTDOWN,
    SsdpNotification,
    SsdpReceiver,
    SsdpSearchRequest,
    build_notify,
    build_search,
    drain_queue,
)


def notify_bytes(target):
    return build_notify("239.255.255.250", 1900, "http://h:1/description", target,
                        f"uuid:r::{target}", "S/1 UPnP/1.0 K/1").raw_data


def test_receive_loop_survives_garbage(udp_socket, caplog):
    listen_sock = udp_socket()
    sender = udp_socket()
    records = []
    receiver = SsdpReceiver(log=lambda level, message: records.append((level, message)))

    async def scenario():
        receiver.start(listen_sock)
        addr = listen_sock.getsockname()
        sender.sendto(b"GARBAGE * HTTP/1.1\r\n\r\n", addr)
        sender.sendto(b"\xff\xfe\x00", addr)
        sender.sendto(notify_bytes("upnp:rootdevice"), addr)
        sender.sendto(build_search("239.255.255.250", 1900, "ssdp:all", 1).raw_data, addr)
        first = await asyncio.wait_for(receiver.queue.get(), 2)
        second = await asyncio.wait_for(receiver.queue.get(), 2)
        alive = receiver.alive
        await receiver.stop()
        return first, second, alive

    with caplog.at_level(logging.WARNING, logger="ssdp_discovery_protocol"):
        first, second, alive = asyncio.run(scenario())

    assert alive
    assert isinstance(first, SsdpNotification)
    assert first.type == "upnp:rootdevice"
    assert first.src_addr == sender.getsockname()
    assert isinstance(second, SsdpSearchRequest)
    assert not receiver.alive
    assert any("GARBAGE" in r.getMessage() for r in caplog.records)
    sender_host, sender_port = sender.getsockname()
    assert (logging.DEBUG, f"SSDP recv NOTIFY {sender_host}:{sender_port} upnp:rootdevice") in records
    assert (logging.DEBUG, f"SSDP recv M-SEARCH {sender_host}:{sender_port} ssdp:all") in records


def test_start_is_idempotent_and_stop_resets_queue(udp_socket):
    listen_sock = udp_socket()
    sender = udp_socket()
    receiver = SsdpReceiver()

    async def scenario():
        task = receiver.start(listen_sock)
        assert receiver.start(listen_sock) is task
        sender.sendto(notify_bytes("upnp:rootdevice"), listen_sock.getsockname())
        while receiver.queue.empty():
            await asyncio.sleep(0.01)
        old_queue = receiver.queue
        await receiver.stop()
        return task, old_queue

    task, old_queue = asyncio.run(scenario())
    assert task.cancelled()
    assert receiver.task is None
    assert receiver.queue is not old_queue
    assert receiver.queue.empty()


def test_stop_without_start_is_a_no_op():
    asyncio.run(SsdpReceiver().stop())


def test_drain_queue_keeps_order_and_drops_sentinel():
    queue = asyncio.Queue()
    first = SsdpNotification(raw_data=notify_bytes("a:1"))
    second = SsdpNotification(raw_data=notify_bytes("b:2"))
    queue.put_nowait(first)
    queue.put_nowait(SHUTDOWN)
    queue.put_nowait(second)
    assert drain_queue(queue) == [first, second]
    assert queue.empty()


def test_fatal_read_error_queues_shutdown_and_is_raised_by_stop(udp_socket):
    listen_sock = udp_socket()
    receiver = SsdpReceiver()

    async def network_down(sock, nbytes):
        raise OSError("Network is down")

    async def scenario():
        asyncio.get_running_loop().sock_recvfrom = network_down
        receiver.start(listen_sock)
        item = await asyncio.wait_for(receiver.queue.get(), 2)
        with pytest.raises(OSError, match="Network is down"):
            await receiver.stop()
        return item

    assert asyncio.run(scenario()) is SHUTDOWN
    assert receiver.task is None
    assert not receiver.alive
