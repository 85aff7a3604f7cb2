"""Non-blocking TCP server driven by explicit polling."""

from __future__ import annotations

import ipaddress
import select
import socket
from typing import Callable, Optional

BACKLOG = 100
RECV_SIZE = 4096

ConnectionCallback = Callable[[int], None]
ReadCallback = Callable[[int, bytes], None]
CloseCallback = Callable[[int], None]


class TcpServer:
    """A TCP server whose work is done by calling :meth:`poll` repeatedly.

    Each accepted client is identified by an integer peer id. The callbacks
    receive that id: ``on_connection(peer)``, ``on_read(peer, data)`` and
    ``on_close(peer)``. A callback left as ``None`` is skipped.
    """

    def __init__(
        self,
        on_connection: Optional[ConnectionCallback] = None,
        on_read: Optional[ReadCallback] = None,
        on_close: Optional[CloseCallback] = None,
    ) -> None:
        self.on_connection: Optional[ConnectionCallback] = on_connection
        self.on_read: Optional[ReadCallback] = on_read
        self.on_close: Optional[CloseCallback] = on_close
        self._listener: Optional[socket.socket] = None
        self._clients: dict[int, socket.socket] = {}

    def __enter__(self) -> "TcpServer":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    @property
    def address(self) -> tuple[str, int]:
        """The local (ip, port) the server listens on."""
        if self._listener is None:
            raise RuntimeError("server is not listening")
        return self._listener.getsockname()

    @property
    def peers(self) -> frozenset[int]:
        """Ids of the clients currently connected."""
        return frozenset(self._clients)

    def listen(self, ip: str, port: int) -> None:
        """Start listening on an IPv4 address and port."""
        if self._listener is not None:
            raise RuntimeError("server is already listening")
        ipaddress.IPv4Address(ip)
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
        try:
            sock.setblocking(False)
            sock.bind((ip, port))
            sock.listen(BACKLOG)
        except OSError:
            sock.close()
            raise
        self._listener = sock

    def close(self) -> None:
        """Stop listening and drop every client without calling on_close."""
        if self._listener is not None:
            self._listener.close()
            self._listener = None
        for sock in self._clients.values():
            sock.close()
        self._clients.clear()

    def send(self, peer: int, data: bytes) -> int:
        """Send data to a client; returns the number of bytes sent."""
        return self._client(peer).send(data)

    def disconnect(self, peer: int) -> None:
        """Close the connection to a client without calling on_close."""
        sock = self._client(peer)
        del self._clients[peer]
        sock.close()

    def poll(self) -> int:
        """Handle whatever is ready without waiting; returns the number of ready sockets."""
        listener = self._listener
        if listener is None:
            raise RuntimeError("server is not listening")
        watched = {sock: peer for peer, sock in self._clients.items()}
        readable, _, _ = select.select([listener, *watched], [], [], 0)
        for sock in readable:
            if sock is listener:
                if self._listener is listener:
                    self._accept(listener)
            else:
                peer = watched[sock]
                if self._clients.get(peer) is sock:
                    self._receive(peer, sock)
        return len(readable)

    def _client(self, peer: int) -> socket.socket:
        try:
            return self._clients[peer]
        except KeyError:
            raise KeyError(f"unknown peer {peer}") from None

    def _accept(self, listener: socket.socket) -> None:
        try:
            conn, _ = listener.accept()
        except OSError:
            return
        conn.setblocking(False)
        peer = conn.fileno()
        self._clients[peer] = conn
        if self.on_connection is not None:
            self.on_connection(peer)

    def _receive(self, peer: int, sock: socket.socket) -> None:
        try:
            data = sock.recv(RECV_SIZE)
        except BlockingIOError:
            return
        except OSError:
            data = b""
        if data:
            if self.on_read is not None:
                self.on_read(peer, data)
            return
        sock.close()
        del self._clients[peer]
        if self.on_close is not None:
            self.on_close(peer)


def create_server(
    on_connection: Optional[ConnectionCallback],
    on_read: Optional[ReadCallback],
    on_close: Optional[CloseCallback],
) -> TcpServer:
    """Create a server with its callbacks set."""
    return TcpServer(on_connection=on_connection, on_read=on_read, on_close=on_close)