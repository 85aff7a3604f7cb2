import socket
import time

import pytest

from minitcp.client import TcpClient


def poll_until(client, condition, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not condition():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached in time")
        client.poll()
        time.sleep(0.001)


@pytest.fixture
def listener():
    sock = socket.create_server(("127.0.0.1", 0))
    sock.settimeout(5)
    yield sock
    sock.close()


@pytest.fixture
def events():
    return {"connect": [], "read": [], "close": []}


@pytest.fixture
def client(events):
    cli = TcpClient(
        on_connect=lambda: events["connect"].append(True),
        on_read=events["read"].append,
        on_close=lambda: events["close"].append(True),
    )
    yield cli
    cli.close()


@pytest.fixture
def session(listener, client, events):
    client.connect("127.0.0.1", listener.getsockname()[1])
    conn, _ = listener.accept()
    conn.settimeout(5)
    poll_until(client, lambda: events["connect"])
    yield conn
    conn.close()


def test_connect_reports_once(client, events, session):
    assert events["connect"] == [True]
    assert client.connected
    assert client.is_open


def test_receives_server_data(client, events, session):
    session.sendall(b"hello")
    poll_until(client, lambda: sum(len(d) for d in events["read"]) >= 5)
    assert b"".join(events["read"]) == b"hello"


def test_send_reaches_server(client, session):
    client.send(b"abc")
    assert session.recv(16) == b"abc"


def test_server_close_reports_close(client, events, session):
    session.close()
    poll_until(client, lambda: events["close"])
    assert len(events["close"]) == 1
    assert not client.is_open
    assert client.poll() is False


def test_close_does_not_report(client, events, session):
    client.close()
    assert client.poll() is False
    assert events["close"] == []
    assert session.recv(16) == b""


def test_send_without_connection_raises(client):
    with pytest.raises(RuntimeError):
        client.send(b"x")


def test_poll_on_fresh_client_is_false(client):
    assert client.poll() is False


def test_connect_twice_raises(client, listener):
    client.connect("127.0.0.1", listener.getsockname()[1])
    with pytest.raises(RuntimeError):
        client.connect("127.0.0.1", listener.getsockname()[1])


def test_invalid_ip_raises(client):
    with pytest.raises(ValueError):
        client.connect("999.1.1.1", 80)
    assert not client.is_open


def test_refused_connection_reports_close():
    with socket.socket() as probe:
        probe.bind(("127.0.0.1", 0))
        port = probe.getsockname()[1]
    outcome = []
    cli = TcpClient(
        on_connect=lambda: outcome.append("connect"),
        on_close=lambda: outcome.append("close"),
    )
    try:
        cli.connect("127.0.0.1", port)
    except ConnectionRefusedError:
        outcome.append("close")
    else:
        poll_until(cli, lambda: outcome, timeout=10)
    assert outcome == ["close"]
    assert not cli.is_open