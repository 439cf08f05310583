#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SsdpReceiver -- the background task that reads datagrams from the shared SSDP
socket, classifies them, and hands them to consumers through an unbounded
asyncio.Queue.
"""

from __future__ import annotations

import asyncio
import logging
import socket
from enum import Enum

from ssdp_discovery_protocol.internal_types import *
from .pkg_logging import logger
from .constants import RECV_BUFFER_SIZE
from .codec import SsdpMessage, classify

class _Shutdown(Enum):
    SHUTDOWN = 'shutdown'

    def __repr__(self) -> str:
        return 'SHUTDOWN'

SHUTDOWN = _Shutdown.SHUTDOWN
"""Queued to tell a consumer to stop consuming. It is never a message."""

QueueItem = Union[SsdpMessage, _Shutdown]

def new_queue() -> asyncio.Queue[QueueItem]:
    """Returns a fresh, empty, unbounded handoff queue."""
    return asyncio.Queue()

def drain_queue(queue: asyncio.Queue[QueueItem]) -> List[SsdpMessage]:
    """Removes and returns everything currently in queue, in FIFO order, without blocking.
       The shutdown sentinel is dropped."""
    results: List[SsdpMessage] = []
    while True:
        try:
            item = queue.get_nowait()
        except asyncio.QueueEmpty:
            break
        if item is not SHUTDOWN:
            results.append(item)  # type: ignore[arg-type]
    return results

class SsdpReceiver:
    """
    Owns the receive task and the handoff queue for one SsdpEngine.

    At most one receive task runs at a time; start() returns the running task if there
    is one. stop() cancels the task and replaces the queue, so nothing received during
    one operation is seen by the next.
    """

    queue: asyncio.Queue[QueueItem]
    """The queue that received messages are delivered to."""

    task: Optional[asyncio.Task[None]] = None
    """The running receive task, if any."""

    log: Callable[[int, str], None]
    """Where debug traffic summaries are reported."""

    def __init__(self, log: Optional[Callable[[int, str], None]]=None):
        self.queue = new_queue()
        self.log = logger.log if log is None else log

    @property
    def alive(self) -> bool:
        return self.task is not None and not self.task.done()

    def start(self, sock: socket.socket) -> asyncio.Task[None]:
        """Starts reading from sock in a background task, unless a receive task is already running."""
        if self.task is not None and not self.task.done():
            return self.task
        sock.setblocking(False)
        self.task = asyncio.create_task(self._run(sock, self.queue))
        return self.task

    async def stop(self) -> None:
        """Cancels the receive task and resets the queue.

        If the task had already ended with an error, the error is raised after cleanup.
        """
        task = self.task
        self.task = None
        self.queue = new_queue()
        if task is None:
            return
        if not task.done():
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def handle_datagram(self, data: bytes, addr: HostAndPort, queue: asyncio.Queue[QueueItem]) -> SsdpMessage:
        """Classifies one datagram, logs it, and puts it on queue."""
        message = classify(data, src_addr=(addr[0], addr[1]))
        self.log(logging.DEBUG, f"SSDP recv {message.method} {addr[0]}:{addr[1]} {message.info}")
        queue.put_nowait(message)
        return message

    async def _run(self, sock: socket.socket, queue: asyncio.Queue[QueueItem]) -> None:
        loop = asyncio.get_running_loop()
        logger.info(f"SSDP receive task starting on {sock.getsockname()}")
        try:
            while True:
                try:
                    data, addr = await loop.sock_recvfrom(sock, RECV_BUFFER_SIZE)
                except (ConnectionRefusedError, ConnectionResetError) as e:
                    # ICMP errors from an earlier sendto; the socket is still usable
                    logger.debug(f"Ignoring transient receive error: {e}")
                    continue
                except OSError as e:
                    logger.info(f"SSDP receive task exiting with socket error: {e}")
                    # wake up any consumer blocked on the queue
                    queue.put_nowait(SHUTDOWN)
                    raise
                try:
                    self.handle_datagram(data, addr, queue)
                except Exception as e:
                    logger.warning(f"Dropping datagram from {addr}, raw=[{data!r}]: {e}", exc_info=True)
        except asyncio.CancelledError:
            logger.debug("SSDP receive task cancelled; exiting")
            raise
