# minitcp

minitcp is a small TCP networking library for IPv4. It runs in a single
thread and is driven by polling. Every socket is non-blocking. Your own loop
calls `poll()`, and each call checks for activity once with a zero timeout.
Events are delivered to callbacks that you supply. A callback left as `None`
is skipped.

## Server

`minitcp.server.TcpServer` accepts clients and gives each one an integer
peer id. The callbacks receive that id:

- `on_connection(peer)` when a client is accepted
- `on_read(peer, data)` when bytes arrive from a client
- `on_close(peer)` when a client closes its side or its connection fails

```python
from minitcp.server import create_server

def on_connection(peer):
    print("connected:", peer)

def on_read(peer, data):
    server.send(peer, data)  # echo back

def on_close(peer):
    print("closed:", peer)

server = create_server(on_connection, on_read, on_close)
server.listen("127.0.0.1", 8088)
while True:
    server.poll()
```

- `listen(ip, port)` binds the server to an IPv4 address and starts listening, with a backlog of 100. Give the port as a plain integer. An invalid address raises `ValueError`. A bind failure raises `OSError`. Calling it twice raises `RuntimeError`.
- `poll()` accepts pending clients and reads up to 4096 bytes from each ready client. It returns the number of sockets that were ready. It raises `RuntimeError` if the server is not listening.
- `send(peer, data)` sends bytes to a client and returns how many bytes were sent.
- `disconnect(peer)` closes one client without calling `on_close`.
- `send` and `disconnect` raise `KeyError` for an unknown peer.
- `close()` stops listening and closes every client without calling `on_close`.
- `address` is the local `(ip, port)` the server is bound to.
- `peers` is the set of connected peer ids.
- `TcpServer` can be used as a context manager; leaving the block closes it.

## Client

`minitcp.client.TcpClient` connects to a server in the background. Its
callbacks are:

- `on_connect()` once the connection is established
- `on_read(data)` for received bytes, up to 4096 per poll
- `on_close()` when the connection attempt fails or the server closes the connection

```python
from minitcp.client import TcpClient

client = TcpClient(on_read=lambda data: client.send(data))
client.connect("127.0.0.1", 8088)
while client.poll():
    pass
```

- `connect(ip, port)` starts a non-blocking connection. An error that does not mean the connection is still in progress raises `OSError`. Calling it while a socket is already open raises `RuntimeError`.
- `poll()` returns `False` once the client no longer has a socket.
- `send(data)` writes all of `data`. It raises `RuntimeError` when the client has no socket.
- `close()` disconnects without calling `on_close`.
- `connected` tells whether the connection is established.
- `is_open` tells whether the client holds a socket at all.
- `TcpClient` can be used as a context manager.

## What it does not do

The package is a library only. It installs no command-line program, and it
ships no ready-made echo server or client loop. Loops like the examples above
are yours to write. It supports IPv4 only and uses `select`, so it is not
meant for large numbers of connections.

## Tests

```
pip install -e .[test]
pytest
```