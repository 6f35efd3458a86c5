# Area: Tests
"""Shared fixtures: in-memory transport and datagram builders."""

import logging
import struct
from collections import deque

import pytest

from spring_autohost.errors import TransportError


class FakeTransport:
    """In-memory stand-in for UdpTransport."""

    def __init__(self, open_error=None):
        self.datagrams = deque()
        self.sent = []
        self.calls = []
        self.open_error = open_error
        self._open = False

    @property
    def is_open(self):
        return self._open

    def open(self, host, port):
        self.calls.append(("open", host, port))
        if self.open_error:
            raise TransportError(self.open_error)
        self._open = True

    def receive(self, size):
        self.calls.append(("receive", size))
        return self.datagrams.popleft() if self.datagrams else b""

    def send(self, data):
        self.calls.append(("send", data))
        self.sent.append(data)
        return True

    def close(self):
        self.calls.append(("close",))
        self._open = False

    def feed(self, *datagrams):
        self.datagrams.extend(datagrams)


TEAM_STATS = struct.Struct("<I12f7I")


def team_stats_payload(frame=900):
    """80-byte TeamStatistics block with recognisable values."""
    floats = [float(i) for i in range(1, 13)]
    ints = list(range(1, 8))
    return TEAM_STATS.pack(frame, *floats, *ints)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture(autouse=True)
def reset_package_logger():
    """setup_logging() detaches the package logger; put it back for caplog."""
    yield
    pkg_logger = logging.getLogger("spring_autohost")
    for handler in list(pkg_logger.handlers):
        handler.close()
    pkg_logger.handlers.clear()
    pkg_logger.propagate = True
    pkg_logger.setLevel(logging.NOTSET)
