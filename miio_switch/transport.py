#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
UdpTransport -- a short-lived, connected UDP socket to a single miIO device.

A transport is opened for exactly one exchange (one datagram sent, at most one
received) and closed again. It is a context manager so that the socket is
released on every exit path:

    with UdpTransport(host, port, connect_timeout) as transport:
        transport.set_timeout(io_timeout)
        transport.send(packet)
        reply = transport.receive(max_size)

All methods raise OSError (including socket.timeout) on failure; callers map
those onto the exceptions of the protocol phase they are in.
"""

from __future__ import annotations

import socket

from .internal_types import *
from .pkg_logging import logger

class UdpTransport(ContextManager['UdpTransport']):
    host: str
    port: int
    sock: Optional[socket.socket] = None
    """The connected datagram socket; None once closed."""

    def __init__(self, host: str, port: int, connect_timeout: float):
        """Resolve host and connect a datagram socket to (host, port).

        connect_timeout bounds the connect phase; it remains the socket timeout
        until set_timeout() is called. Raises OSError if host cannot be resolved,
        including names the IDNA codec rejects.
        """
        self.host = host
        self.port = port
        try:
            addrinfo = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)[0]
        except UnicodeError as e:
            # IDNA rejects malformed names such as "bad..host" before any lookup
            raise OSError(f"cannot resolve host {host!r}: {e}") from e
        address_family, sock_type, proto, _, sockaddr = addrinfo
        sock = socket.socket(address_family, sock_type, proto)
        try:
            sock.settimeout(connect_timeout)
            sock.connect(sockaddr)
        except BaseException:
            sock.close()
            raise
        self.sock = sock
        logger.debug(f"Opened {self}")

    def set_timeout(self, timeout: float) -> None:
        """Sets the deadline for each subsequent send/receive."""
        self._get_sock().settimeout(timeout)

    def send(self, data: bytes) -> None:
        logger.debug(f"Sending {len(data)} bytes via {self}")
        self._get_sock().send(data)

    def receive(self, max_size: int) -> bytes:
        """Blocks until one datagram arrives or the timeout expires."""
        data = self._get_sock().recv(max_size)
        logger.debug(f"Received {len(data)} bytes via {self}")
        return data

    def close(self) -> None:
        sock = self.sock
        if not sock is None:
            self.sock = None
            sock.close()
            logger.debug(f"Closed UdpTransport to {self.host}:{self.port}")

    def _get_sock(self) -> socket.socket:
        if self.sock is None:
            raise OSError(f"{self} is closed")
        return self.sock

    def __enter__(self) -> UdpTransport:
        return self

    def __exit__(
            self,
            exc_type: Optional[type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType]
          ) -> bool:
        self.close()
        return False

    def __str__(self) -> str:
        state = "closed" if self.sock is None else "open"
        return f"UdpTransport({self.host}:{self.port}, {state})"

    def __repr__(self) -> str:
        return str(self)
