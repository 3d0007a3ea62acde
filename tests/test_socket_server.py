"""JSON-lines command server over a real loopback socket."""

import json
import socket

import pytest

from marker_display.client import MarkerClient
from marker_display.config import ServerConfig
from marker_display.core.marker import make_marker
from marker_display.server import MarkerDisplayServer
from marker_display.transport.socket_server import JsonLineServer


@pytest.fixture
def server():
    requests = []

    def dispatch(request):
        requests.append(request)
        return {"status": "success", "echo": request}

    server = JsonLineServer("127.0.0.1", 0, dispatch)
    server.start()
    server.requests = requests
    yield server
    server.stop()


def exchange(sock, payload: bytes, replies: int):
    sock.sendall(payload)
    reader = sock.makefile("r", encoding="utf-8")
    return [json.loads(reader.readline()) for _ in range(replies)]


def test_one_reply_per_line(server):
    with socket.create_connection(server.address, timeout=5.0) as sock:
        replies = exchange(sock, b'{"action": "a"}\n\n{"action": "b"}\n', 2)

    assert [r["echo"]["action"] for r in replies] == ["a", "b"]


def test_request_split_across_writes(server):
    with socket.create_connection(server.address, timeout=5.0) as sock:
        sock.sendall(b'{"action": ')
        replies = exchange(sock, b'"late"}\n', 1)

    assert replies[0]["echo"] == {"action": "late"}


def test_invalid_json_gets_error_and_connection_survives(server):
    with socket.create_connection(server.address, timeout=5.0) as sock:
        replies = exchange(sock, b'not json\n{"action": "ok"}\n', 2)

    assert replies[0]["status"] == "error"
    assert "Invalid JSON" in replies[0]["message"]
    assert replies[1]["status"] == "success"
    assert server.requests == [{"action": "ok"}]


def test_bind_failure_raises(server):
    clash = JsonLineServer("127.0.0.1", server.address[1], lambda r: r)
    # SO_REUSEADDR does not allow two listeners on Linux
    with pytest.raises(OSError):
        clash.start()


class TestClientAgainstServer:

    @pytest.fixture
    def display(self):
        display = MarkerDisplayServer(ServerConfig(socket_host="127.0.0.1", socket_port=0),
                                      headless=True)
        display.commands.start()
        yield display
        display.shutdown()

    def test_publish_and_read_back(self, display):
        host, port = display.commands.address
        with MarkerClient(host, port) as client:
            assert client.is_connected
            client.set_transform("map", "robot", translation=[2.0, 0.0, 0.0])
            reply = client.publish_marker(make_marker(
                "demo", 1, "LINE_STRIP", frame_id="robot",
                points=[(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)]))
            assert reply["subscribers"] == 1

            display.node.bus.wait_idle()
            lines = client.get_lines()

        assert not client.is_connected
        assert lines["count"] == 1
        assert (lines["lines"][0]["x1"], lines["lines"][0]["x2"]) == pytest.approx((2.0, 3.0))

    def test_unreachable_server_returns_none(self):
        probe = socket.socket()
        probe.bind(("127.0.0.1", 0))
        port = probe.getsockname()[1]
        probe.close()

        client = MarkerClient("127.0.0.1", port, timeout=1.0)
        assert client.connect() is False
        assert client.list_topics() is None
