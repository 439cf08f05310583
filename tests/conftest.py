import socket

import pytest

from ssdp_discovery_protocol import (
    SsdpEngine,
    SsdpRootDevice,
    SsdpDevice,
    SsdpService,
)


@pytest.fixture
def udp_socket():
    """Factory for unicast UDP sockets bound to an ephemeral loopback port."""
    created = []

    def make():
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.bind(("127.0.0.1", 0))
        created.append(sock)
        return sock

    yield make
    for sock in created:
        sock.close()


@pytest.fixture
def observer(udp_socket):
    """Stands in for the multicast group: everything the engine sends arrives here."""
    return udp_socket()


@pytest.fixture
def engine_socket(udp_socket):
    return udp_socket()


@pytest.fixture
def log_records():
    return []


@pytest.fixture
def engine(engine_socket, observer, log_records):
    def sink(level, message):
        log_records.append((level, message))

    ssdp = SsdpEngine(
        broadcast="127.0.0.1",
        port=observer.getsockname()[1],
        timeout=0.2,
        log_sink=sink,
    )
    ssdp.socket = engine_socket
    return ssdp


@pytest.fixture
def root_device():
    return SsdpRootDevice(
        "uuid:root-0001",
        "urn:schemas-upnp-org:device:MediaServer:1",
        "1.0",
        devices=[
            SsdpDevice("uuid:dev-0002", "urn:schemas-upnp-org:device:MediaRenderer:1"),
            SsdpDevice("uuid:dev-0003", "urn:schemas-upnp-org:device:Printer:1"),
        ],
        services=[
            SsdpService("urn:schemas-upnp-org:service:ContentDirectory:1"),
        ],
        kind="AcmeMediaServer",
    )


@pytest.fixture
def collect():
    """Returns a function that reads every datagram arriving on a socket until it has been quiet for `quiet` seconds."""

    def collect_datagrams(sock, quiet=0.3):
        sock.setblocking(True)
        sock.settimeout(quiet)
        results = []
        while True:
            try:
                data, _ = sock.recvfrom(65507)
            except socket.timeout:
                break
            results.append(data)
        return results

    return collect_datagrams
