import socket

import pytest

from ssdp_discovery_protocol import SsdpError, SsdpSocketError, close_socket, open_multicast_socket
from ssdp_discovery_protocol import ssdp_socket


class FakeSocket:
    def __init__(self, *args, fail_on=None):
        self.args = args
        self.options = []
        self.bound_to = None
        self.blocking = True
        self.closed = False
        self.fail_on = fail_on

    def setsockopt(self, level, option, value):
        if self.fail_on == option:
            raise OSError("No such device")
        self.options.append((level, option, value))

    def bind(self, addr):
        if self.fail_on == "bind":
            raise OSError("Address already in use")
        self.bound_to = addr

    def setblocking(self, flag):
        self.blocking = flag

    def getsockname(self):
        return self.bound_to

    def fileno(self):
        return -1 if self.closed else 42

    def close(self):
        self.closed = True


@pytest.fixture
def fake_sockets(monkeypatch):
    created = []

    def install(fail_on=None):
        def factory(*args):
            sock = FakeSocket(*args, fail_on=fail_on)
            created.append(sock)
            return sock
        monkeypatch.setattr(ssdp_socket.socket, "socket", factory)
        return created

    return install


def test_open_configures_membership_loop_ttl_and_bind(fake_sockets):
    created = fake_sockets()
    sock = open_multicast_socket("239.255.255.250", 1900, 4)
    assert sock is created[0]
    assert sock.options == [
        (socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, socket.inet_aton("239.255.255.250") + socket.inet_aton("0.0.0.0")),
        (socket.IPPROTO_IP, socket.IP_MULTICAST_LOOP, 0),
        (socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, 4),
        (socket.IPPROTO_IP, socket.IP_TTL, 4),
    ]
    assert sock.bound_to == ("0.0.0.0", 1900)
    assert sock.blocking is False


@pytest.mark.parametrize("fail_on", [socket.IP_ADD_MEMBERSHIP, socket.IP_TTL, "bind"])
def test_open_failure_closes_socket_and_raises(fake_sockets, fail_on):
    created = fake_sockets(fail_on=fail_on)
    with pytest.raises(SsdpSocketError) as excinfo:
        open_multicast_socket("239.255.255.250", 1900, 4)
    assert isinstance(excinfo.value, OSError)
    assert isinstance(excinfo.value, SsdpError)
    assert isinstance(excinfo.value.__cause__, OSError)
    assert created[0].closed


def test_open_rejects_bad_group_address(fake_sockets):
    created = fake_sockets()
    with pytest.raises(SsdpSocketError):
        open_multicast_socket("not-an-address", 1900, 4)
    assert created[0].closed


def test_close_is_idempotent(udp_socket):
    sock = udp_socket()
    close_socket(sock)
    assert sock.fileno() == -1
    close_socket(sock)
    close_socket(None)
