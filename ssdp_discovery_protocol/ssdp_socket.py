#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Creation and teardown of the single UDP socket that SsdpEngine uses both to
multicast SSDP datagrams and to receive them.
"""

from __future__ import annotations

import socket

from ssdp_discovery_protocol.internal_types import *
from .pkg_logging import logger
from .exceptions import SsdpSocketError
from .constants import SSDP_MULTICAST_ADDRESS, SSDP_PORT, SSDP_TTL

def open_multicast_socket(
        broadcast: str=SSDP_MULTICAST_ADDRESS,
        port: int=SSDP_PORT,
        ttl: int=SSDP_TTL,
      ) -> socket.socket:
    """Creates a non-blocking UDP socket that is a member of the `broadcast` multicast
       group on all interfaces, does not loop back its own multicasts, sends with the
       given TTL, and is bound to 0.0.0.0:`port`.

       Raises SsdpSocketError if any step fails; the partially created socket is closed.
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
    except OSError as e:
        raise SsdpSocketError(f"Unable to create UDP socket: {e}") from e
    try:
        mreq = socket.inet_aton(broadcast) + socket.inet_aton('0.0.0.0')
        logger.debug(f"Joining multicast group {broadcast}; mreq={mreq!r}")
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, mreq)
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_LOOP, 0)
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, ttl)
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_TTL, ttl)
        sock.bind(('0.0.0.0', port))
        sock.setblocking(False)
    except OSError as e:
        close_socket(sock)
        raise SsdpSocketError(f"Unable to set up multicast socket for {broadcast}:{port}: {e}") from e
    logger.debug(f"Opened multicast socket {sock.getsockname()} for {broadcast}:{port}, ttl={ttl}")
    return sock

def close_socket(sock: Optional[socket.socket]) -> None:
    """Closes sock. Closing None or an already closed socket is a no-op."""
    if sock is None or sock.fileno() == -1:
        return
    try:
        sock.close()
    except OSError as e:
        logger.error(f"Error closing socket {sock}: {e}")
