"""Non-blocking TCP client driven by explicit polling."""

from __future__ import annotations

import errno
import ipaddress
import os
import select
import socket
from typing import Callable, Optional

RECV_SIZE = 4096

_PENDING = {
    code
    for code in (
        errno.EINPROGRESS,
        errno.EWOULDBLOCK,
        errno.EALREADY,
        errno.EAGAIN,
        getattr(errno, "WSAEWOULDBLOCK", None),
    )
    if code is not None
}


class TcpClient:
    """A TCP client whose work is done by calling :meth:`poll` repeatedly.

    Callbacks: ``on_connect()`` once the connection is established,
    ``on_read(data)`` for received bytes, and ``on_close()`` when the
    connection fails or the server closes it. A callback left as ``None``
    is skipped.
    """

    def __init__(
        self,
        on_connect: Optional[Callable[[], None]] = None,
        on_read: Optional[Callable[[bytes], None]] = None,
        on_close: Optional[Callable[[], None]] = None,
    ) -> None:
        self.on_connect: Optional[Callable[[], None]] = on_connect
        self.on_read: Optional[Callable[[bytes], None]] = on_read
        self.on_close: Optional[Callable[[], None]] = on_close
        self._sock: Optional[socket.socket] = None
        self._connected = False

    def __enter__(self) -> "TcpClient":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    @property
    def connected(self) -> bool:
        """Whether the connection to the server is established."""
        return self._sock is not None and self._connected

    @property
    def is_open(self) -> bool:
        """Whether the client holds a socket, connected or still connecting."""
        return self._sock is not None

    def connect(self, ip: str, port: int) -> None:
        """Start connecting to a server; completion is reported by on_connect."""
        if self._sock is not None:
            raise RuntimeError("client already has a connection")
        ipaddress.IPv4Address(ip)
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
        sock.setblocking(False)
        self._connected = False
        err = sock.connect_ex((ip, port))
        if err == 0:
            self._sock = sock
            self._connected = True
            self._notify_connect()
            return
        if err in _PENDING:
            self._sock = sock
            return
        sock.close()
        raise OSError(err, os.strerror(err))

    def close(self) -> None:
        """Close the connection without calling on_close."""
        if self._sock is not None:
            self._sock.close()
            self._sock = None
        self._connected = False

    def send(self, data: bytes) -> None:
        """Send all of data to the server."""
        if self._sock is None:
            raise RuntimeError("client is not connected")
        self._sock.sendall(data)

    def poll(self) -> bool:
        """Handle whatever is ready without waiting; returns whether the client is still open."""
        sock = self._sock
        if sock is None:
            return False
        pending = not self._connected
        extra = [sock] if pending else []
        readable, writable, errored = select.select([sock], extra, extra, 0)
        if not (readable or writable or errored):
            return True
        if pending and (errored or writable):
            failure = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
            if errored or failure:
                self._drop()
                self._notify_close()
            else:
                self._connected = True
                self._notify_connect()
            return self.is_open
        try:
            data = sock.recv(RECV_SIZE)
        except BlockingIOError:
            return True
        except OSError:
            data = b""
        if data:
            if self.on_read is not None:
                self.on_read(data)
        else:
            self._drop()
            self._notify_close()
        return self.is_open

    def _notify_connect(self) -> None:
        if self.on_connect is not None:
            self.on_connect()

    def _notify_close(self) -> None:
        if self.on_close is not None:
            self.on_close()

    def _drop(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None
        self._connected = False