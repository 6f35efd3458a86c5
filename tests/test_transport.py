# Area: Transport Tests
"""Tests for UdpTransport over the loopback interface."""

import socket
import time

import pytest

from spring_autohost.errors import TransportError
from spring_autohost.transport import UdpTransport


def receive_within(transport, timeout=2.0, size=4096):
    """Poll the non-blocking transport until a datagram arrives."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        data = transport.receive(size)
        if data:
            return data
        time.sleep(0.01)
    return b""


@pytest.fixture
def udp():
    transport = UdpTransport()
    transport.open("127.0.0.1", 0)
    yield transport
    transport.close()


@pytest.fixture
def server():
    """Plays the game server side of the link."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    yield sock
    sock.close()


class TestUdpTransport:
    """Tests for UdpTransport."""

    def test_open_and_close(self):
        transport = UdpTransport()
        assert not transport.is_open
        transport.open("127.0.0.1", 0)
        assert transport.is_open
        assert transport.local_address[0] == "127.0.0.1"
        transport.close()
        assert not transport.is_open
        assert transport.local_address is None

    def test_receive_when_nothing_pending(self, udp):
        assert udp.receive(4096) == b""

    def test_receive_records_peer(self, udp, server):
        server.sendto(bytes([0]), udp.local_address)
        assert receive_within(udp) == bytes([0])
        assert udp.peer == server.getsockname()

    def test_reply_goes_to_last_peer(self, udp, server):
        server.sendto(bytes([0]), udp.local_address)
        receive_within(udp)
        assert udp.send(b"/say hello") is True
        data, _ = server.recvfrom(4096)
        assert data == b"/say hello"

    def test_send_without_peer_fails(self, udp):
        assert udp.send(b"hello") is False

    def test_send_when_closed_fails(self):
        assert UdpTransport().send(b"hello") is False

    def test_receive_when_closed_raises(self):
        with pytest.raises(TransportError):
            UdpTransport().receive(4096)

    def test_port_in_use(self, udp):
        other = UdpTransport()
        host, port = udp.local_address
        with pytest.raises(TransportError, match=f"{host}:{port}"):
            other.open(host, port)
        assert not other.is_open
