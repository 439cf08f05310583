#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SsdpEngine -- Simple Service Discovery Protocol for the UPnP Device Architecture.

Only the discovery portions of SSDP are handled. An engine can:

  1. Listen for NOTIFY announcements from devices (discover)
  2. Multicast M-SEARCH requests and collect the responses that arrive within a timeout (search)
  3. Advertise a local device tree with periodic NOTIFYs and answer M-SEARCH requests for it (advertise)
  4. Announce that a local device tree is going away (byebye)

Usage:
    engine = SsdpEngine()
    responses = await engine.search(('device', 'MediaServer:1'))
    notifications = await engine.discover()
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import re
import socket
from enum import Enum

from ssdp_discovery_protocol.internal_types import *
from .pkg_logging import logger
from .constants import (
    SSDP_MULTICAST_ADDRESS,
    SSDP_PORT,
    SSDP_TTL,
    SSDP_TIMEOUT,
    NOTIFY_INTERVAL,
    DEVICE_SCHEMA_PREFIX,
    SERVICE_SCHEMA_PREFIX,
    ROOT_DEVICE_TARGET,
    ALL_TARGET,
  )
from .ssdp_datagram import SsdpDatagram
from .codec import SsdpMessage
from .notification import build_notify, build_byebye
from .response import build_response
from .search import SsdpSearchRequest, build_search
from .device import RootDeviceView, Advertisable, server_string, unique_service_name
from .receiver import SsdpReceiver, QueueItem, SHUTDOWN, drain_queue
from .ssdp_socket import open_multicast_socket, close_socket
from .util import get_local_ip_addresses

UdpSocket = socket.socket

SEARCH_TASK_SHUTDOWN_TIME = 1.0
"""How long (in seconds) the search task is given to exit after SHUTDOWN is queued before it is cancelled."""

DiscoverCallback = Callable[[SsdpMessage], Optional[Awaitable[None]]]
"""Called with each message received by discover(). May be a coroutine function."""

class SearchTargetKind(str, Enum):
    ROOT = 'root'
    DEVICE = 'device'
    SERVICE = 'service'

SearchTarget = Union[str, SearchTargetKind, Tuple[str, str]]
"""A search target accepted by SsdpEngine.search(). See resolve_search_target()."""

_verbatim_target_re = re.compile(r'^(urn|uuid|ssdp):')

def resolve_search_target(target: Any) -> Optional[str]:
    """Translates a search target into the ST value to send.

      'root'                        -> 'upnp:rootdevice'
      ('device', 'type:version')    -> 'urn:schemas-upnp-org:device:type:version'
      ('service', 'type:version')   -> 'urn:schemas-upnp-org:service:type:version'
      'urn:...', 'uuid:...', 'ssdp:...' are sent as given

    Returns None for anything else.
    """
    if isinstance(target, str):
        if target == SearchTargetKind.ROOT:
            return ROOT_DEVICE_TARGET
        if _verbatim_target_re.match(target):
            return target
        return None
    if isinstance(target, (tuple, list)) and len(target) == 2:
        kind, type_and_version = target
        if isinstance(type_and_version, str):
            if kind == SearchTargetKind.DEVICE:
                return f"{DEVICE_SCHEMA_PREFIX}:{type_and_version}"
            if kind == SearchTargetKind.SERVICE:
                return f"{SERVICE_SCHEMA_PREFIX}:{type_and_version}"
    return None

def is_device_target(target: str) -> bool:
    """Returns True if target is a standard device type URN, e.g. urn:schemas-upnp-org:device:MediaServer:1."""
    prefix = DEVICE_SCHEMA_PREFIX + ':'
    return target.startswith(prefix) and len(target) > len(prefix)

def description_location(host: str, port: int) -> str:
    """The URL at which the device description is served on host."""
    return f"http://{host}:{port}/description"

class SsdpEngine:
    """
    An SSDP discovery engine.

    Each operating mode (discover, search, advertise, byebye) opens the shared multicast
    socket if there is none, and closes it before returning, whether it returns normally,
    raises, or is cancelled. The receive task is likewise started on demand and stopped
    on the way out, so no socket, task or queued message outlives the call.

    Configuration attributes may be changed between calls, but not while a mode is running.
    """

    broadcast: str = SSDP_MULTICAST_ADDRESS
    """The multicast address that searches and notifications are sent to and received on."""

    port: int = SSDP_PORT
    """The port used for SSDP searching and listening."""

    ttl: int = SSDP_TTL
    """The multicast and unicast TTL (hops) for SSDP packets."""

    timeout: float = SSDP_TIMEOUT
    """The time (in seconds) to wait for responses. Also sent as MX in searches."""

    notify_interval: float = NOTIFY_INTERVAL
    """The time (in seconds) between rounds of alive NOTIFYs while advertising."""

    log_sink: Optional[LogSink]
    """Called with (level, message) for protocol traffic. None disables it."""

    socket: Optional[UdpSocket] = None
    """The shared socket, while a mode is running. May be preset, e.g. by tests."""

    receiver: SsdpReceiver
    """The receive task and the handoff queue."""

    notify_task: Optional[asyncio.Task[None]] = None
    """The task that periodically sends NOTIFYs for advertise()."""

    search_task: Optional[asyncio.Task[None]] = None
    """The task that answers search requests for advertise()."""

    def __init__(
            self,
            ttl: int=SSDP_TTL,
            broadcast: str=SSDP_MULTICAST_ADDRESS,
            port: int=SSDP_PORT,
            timeout: float=SSDP_TIMEOUT,
            notify_interval: float=NOTIFY_INTERVAL,
            log_sink: Optional[LogSink]=logger.log,
          ) -> None:
        self.ttl = ttl
        self.broadcast = broadcast
        self.port = port
        self.timeout = timeout
        self.notify_interval = notify_interval
        self.log_sink = log_sink
        self.receiver = SsdpReceiver(log=self.log)

    def log(self, level: int, message: str) -> None:
        if self.log_sink is None:
            return
        self.log_sink(level, message)

    # ======================= socket and receive task

    def new_socket(self) -> UdpSocket:
        """Creates a socket for multicast send and receive with the current configuration."""
        return open_multicast_socket(self.broadcast, self.port, self.ttl)

    def _ensure_socket(self) -> UdpSocket:
        if self.socket is None:
            self.socket = self.new_socket()
        # a preset socket may still be blocking; the event loop requires non-blocking
        self.socket.setblocking(False)
        return self.socket

    def _close_socket(self) -> None:
        close_socket(self.socket)
        self.socket = None

    @property
    def queue(self) -> asyncio.Queue[QueueItem]:
        """The handoff queue that the receive task currently delivers to."""
        return self.receiver.queue

    @property
    def listening(self) -> bool:
        return self.receiver.alive

    def listen(self) -> asyncio.Task[None]:
        """Starts the receive task on the shared socket, unless it is already running."""
        return self.receiver.start(self._ensure_socket())

    async def stop_listening(self) -> None:
        """Stops the receive task and discards anything still queued."""
        await self.receiver.stop()

    async def _shutdown(self) -> None:
        try:
            await self.stop_listening()
        finally:
            self._close_socket()

    # ======================= senders

    async def _send(self, datagram: SsdpDatagram) -> None:
        sock = self._ensure_socket()
        # Waits for the socket to become writable if the send buffer is full
        await asyncio.get_running_loop().sock_sendto(sock, datagram.raw_data, (self.broadcast, self.port))

    async def send_notify(self, location: str, target: str, obj: Advertisable, root_device: RootDeviceView) -> None:
        """Builds and sends an ssdp:alive NOTIFY for target."""
        usn = unique_service_name(target, obj, root_device)
        notify = build_notify(self.broadcast, self.port, location, target, usn, server_string(root_device))
        self.log(logging.DEBUG, f"SSDP sent NOTIFY {target}")
        await self._send(notify)

    async def send_notify_byebye(self, target: str, obj: Advertisable, root_device: RootDeviceView) -> None:
        """Builds and sends an ssdp:byebye NOTIFY for target."""
        usn = unique_service_name(target, obj, root_device)
        notify = build_byebye(self.broadcast, self.port, target, usn)
        self.log(logging.DEBUG, f"SSDP sent byebye {target}")
        await self._send(notify)

    async def send_response(self, location: str, target: str, usn: str, root_device: RootDeviceView) -> None:
        """Builds and sends a response to an M-SEARCH for target."""
        response = build_response(location, target, usn, server_string(root_device))
        self.log(logging.DEBUG, f"SSDP sent M-SEARCH OK {target}")
        await self._send(response)

    async def send_search(self, target: str) -> None:
        """Builds and sends an M-SEARCH request looking for target."""
        search = build_search(self.broadcast, self.port, target, self.timeout)
        self.log(logging.DEBUG, f"SSDP sent M-SEARCH {target}")
        await self._send(search)

    async def send_alive_notifications(self, root_device: RootDeviceView, port: int, hosts: Iterable[str]) -> None:
        """Sends one round of alive NOTIFYs for the whole device tree, from each host."""
        for host in hosts:
            location = description_location(host, port)
            await self.send_notify(location, ROOT_DEVICE_TARGET, root_device, root_device)
            for device in root_device.devices:
                await self.send_notify(location, device.name, device, root_device)
                await self.send_notify(location, device.type_urn, device, root_device)
            for service in root_device.services:
                await self.send_notify(location, service.type_urn, service, root_device)

    async def send_byebye_notifications(self, root_device: RootDeviceView, hosts: Iterable[str]) -> None:
        """Sends byebye NOTIFYs for the whole device tree, once per host."""
        for host in hosts:
            await self.send_notify_byebye(ROOT_DEVICE_TARGET, root_device, root_device)
            for device in root_device.devices:
                await self.send_notify_byebye(device.name, device, root_device)
                await self.send_notify_byebye(device.type_urn, device, root_device)
            for service in root_device.services:
                await self.send_notify_byebye(service.type_urn, service, root_device)

    async def respond_to_search(
            self,
            search: SsdpSearchRequest,
            root_device: RootDeviceView,
            port: int,
            hosts: Iterable[str],
          ) -> None:
        """Sends the responses, if any, that the advertised device tree owes to search."""
        target = search.target
        if target is not None and is_device_target(target):
            devices = [ d for d in root_device.devices if d.type_urn == target ]
            for device in devices:
                for host in hosts:
                    usn = unique_service_name(target, device, root_device)
                    await self.send_response(description_location(host, port), target, usn, root_device)
        elif target == ROOT_DEVICE_TARGET:
            for host in hosts:
                usn = unique_service_name(target, root_device, root_device)
                await self.send_response(description_location(host, port), target, usn, root_device)
        else:
            self.log(logging.WARNING, f"Unhandled target {target}")

    # ======================= operating modes

    async def search(self, *targets: SearchTarget) -> List[SsdpMessage]:
        """Sends M-SEARCH requests looking for targets, waits `timeout` seconds for
           responses, then returns everything received, in the order received.

           Supply no arguments to search for all devices and services. Targets that
           resolve_search_target() does not recognize are skipped.
        """
        try:
            self._ensure_socket()
            if len(targets) == 0:
                await self.send_search(ALL_TARGET)
            else:
                for target in targets:
                    resolved = resolve_search_target(target)
                    if resolved is None:
                        logger.debug(f"Skipping unrecognized search target {target!r}")
                        continue
                    await self.send_search(resolved)

            self.listen()
            await asyncio.sleep(self.timeout)
            return drain_queue(self.queue)
        finally:
            await self._shutdown()

    async def discover(self, callback: Optional[DiscoverCallback]=None) -> List[SsdpMessage]:
        """Listens for SSDP traffic, NOTIFY broadcasts in particular.

        If callback is given, it is called with each message as it is received, and
        discover() does not return until it is cancelled. Otherwise, discover() waits
        `timeout` seconds and returns all messages received in that time.
        """
        try:
            self._ensure_socket()
            self.listen()
            if callback is None:
                await asyncio.sleep(self.timeout)
                return drain_queue(self.queue)

            queue = self.queue
            while True:
                message = await queue.get()
                if message is SHUTDOWN:
                    break
                result = callback(message)  # type: ignore[arg-type]
                if inspect.isawaitable(result):
                    await result
            return []
        finally:
            await self._shutdown()

    async def advertise(self, root_device: RootDeviceView, port: int, hosts: Optional[Iterable[str]]=None) -> None:
        """Advertises root_device until cancelled.

        Every `notify_interval` seconds, alive NOTIFYs are sent for the root device, each
        embedded device (by name and by type) and each service, with a LOCATION of
        http://<host>:<port>/description for each host. Search requests for upnp:rootdevice
        or for the type of an embedded device are answered once per host.

        hosts defaults to the non-loopback IPv4 addresses of this host.
        """
        host_list = self._resolve_hosts(hosts)
        queue: Optional[asyncio.Queue[QueueItem]] = None
        try:
            self._ensure_socket()
            self.notify_task = asyncio.create_task(self._run_notify_task(root_device, port, host_list))
            receive_task = self.listen()
            queue = self.queue
            self.search_task = asyncio.create_task(self._run_search_task(root_device, port, host_list, queue))

            done, _ = await asyncio.wait(
                [self.notify_task, self.search_task, receive_task],
                return_when=asyncio.FIRST_COMPLETED
              )
            for task in done:
                # A receive task failure is raised by stop_listening() below
                if task is not receive_task:
                    task.result()
        finally:
            if queue is not None:
                queue.put_nowait(SHUTDOWN)
            await self._stop_search_task()
            try:
                await self.stop_listening()
            finally:
                await self._cancel_task(self.notify_task, "notify")
                self._close_socket()

    async def byebye(self, root_device: RootDeviceView, hosts: Optional[Iterable[str]]=None) -> None:
        """Announces that root_device, its embedded devices and its services are going away.

        This is a pure send operation; no receive task is started.
        """
        host_list = self._resolve_hosts(hosts)
        try:
            await self.send_byebye_notifications(root_device, host_list)
        finally:
            self._close_socket()

    # ======================= advertise tasks

    async def _run_notify_task(self, root_device: RootDeviceView, port: int, hosts: List[str]) -> None:
        logger.info(f"SSDP notify task starting, notifying every {self.notify_interval} seconds")
        try:
            while True:
                await self.send_alive_notifications(root_device, port, hosts)
                await asyncio.sleep(self.notify_interval)
        except asyncio.CancelledError:
            logger.debug("SSDP notify task cancelled; exiting")
            raise
        except BaseException as e:
            logger.info(f"SSDP notify task exiting with exception: {e}")
            raise

    async def _run_search_task(
            self,
            root_device: RootDeviceView,
            port: int,
            hosts: List[str],
            queue: asyncio.Queue[QueueItem],
          ) -> None:
        logger.info("SSDP search task starting")
        try:
            while True:
                message = await queue.get()
                if message is SHUTDOWN:
                    break
                if not isinstance(message, SsdpSearchRequest):
                    continue
                await self.respond_to_search(message, root_device, port, hosts)
        except asyncio.CancelledError:
            logger.debug("SSDP search task cancelled; exiting")
            raise
        except BaseException as e:
            logger.info(f"SSDP search task exiting with exception: {e}")
            raise
        logger.debug("SSDP search task exiting")

    async def _stop_search_task(self) -> None:
        task = self.search_task
        if task is None:
            return
        if not task.done():
            await asyncio.wait([task], timeout=SEARCH_TASK_SHUTDOWN_TIME)
        await self._cancel_task(task, "search")

    async def _cancel_task(self, task: Optional[asyncio.Task[None]], name: str) -> None:
        if task is None:
            return
        if not task.done():
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.warning(f"Exception while cancelling {name} task: {e}")

    def _resolve_hosts(self, hosts: Optional[Iterable[str]]) -> List[str]:
        if hosts is None:
            host_list = get_local_ip_addresses(include_loopback=False)
            if len(host_list) == 0:
                logger.warning("No non-loopback IPv4 addresses found; nothing will be advertised")
        else:
            host_list = list(hosts)
        return host_list
