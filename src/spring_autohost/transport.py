# Area: Transport
"""
spring_autohost.transport — UDP endpoint for the autohost link
===============================================================

The game server sends autohost datagrams to a local UDP port and
reads chat lines sent back from that port. UdpTransport wraps a
non-blocking socket bound to the loopback interface; anything
implementing the Transport protocol can stand in for it (tests).
"""

from __future__ import annotations
import logging
import socket
from typing import Optional, Protocol, Tuple

from .errors import TransportError

logger = logging.getLogger("spring_autohost.transport")


class Transport(Protocol):
    """Protocol for datagram endpoints used by AutoHostInterface."""

    @property
    def is_open(self) -> bool:
        ...

    def open(self, host: str, port: int) -> None:
        """Bind the endpoint. Raises TransportError on failure."""
        ...

    def receive(self, size: int) -> bytes:
        """Return one pending datagram, or b"" if none is waiting."""
        ...

    def send(self, data: bytes) -> bool:
        """Best-effort send to the game server."""
        ...

    def close(self) -> None:
        ...


class UdpTransport:
    """
    Non-blocking UDP endpoint.

    Replies go to the address the last datagram came from, which is
    the game server once it has sent anything.
    """

    def __init__(self):
        self._sock: Optional[socket.socket] = None
        self.peer: Optional[Tuple[str, int]] = None

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    @property
    def local_address(self) -> Optional[Tuple[str, int]]:
        return self._sock.getsockname() if self._sock is not None else None

    def open(self, host: str, port: int) -> None:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind((host, port))
            sock.setblocking(False)
        except OSError as e:
            sock.close()
            raise TransportError(f"Unable to listen on {host}:{port} ({e})") from e
        self._sock = sock
        self.peer = None

    def receive(self, size: int) -> bytes:
        if self._sock is None:
            raise TransportError("Transport not open")
        try:
            data, address = self._sock.recvfrom(size)
        except (BlockingIOError, InterruptedError):
            return b""
        except OSError as e:
            # e.g. ICMP port unreachable reported on the next recv
            logger.warning(f"Receive failed: {e}")
            return b""
        self.peer = address
        return data

    def send(self, data: bytes) -> bool:
        if self._sock is None:
            return False
        if self.peer is None:
            logger.warning("No game server address known yet, dropping outgoing datagram")
            return False
        try:
            self._sock.sendto(data, self.peer)
        except OSError as e:
            logger.warning(f"Send to {self.peer[0]}:{self.peer[1]} failed: {e}")
            return False
        return True

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
        self._sock = None
        self.peer = None
