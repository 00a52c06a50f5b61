"""
Listener bootstrap: binding, bind failures, and handing the socket to uvicorn.
"""
import socket

import pytest

from echoserver.base.config import EchoServerConfig
from echoserver.errors import EchoServerError, ErrorCode
from echoserver.server import api


@pytest.fixture
def occupied_port():
    """A loopback port some other socket is already listening on."""
    blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    blocker.bind(("127.0.0.1", 0))
    blocker.listen(1)
    yield blocker.getsockname()[1]
    blocker.close()


class TestBindSocket:

    def test_binds_ephemeral_port(self):
        sock = api.bind_socket("127.0.0.1", 0)
        try:
            host, port = sock.getsockname()
            assert host == "127.0.0.1"
            assert port > 0
        finally:
            sock.close()

    def test_port_in_use(self, occupied_port):
        with pytest.raises(EchoServerError) as exc_info:
            api.bind_socket("127.0.0.1", occupied_port)
        err = exc_info.value
        assert err.code is ErrorCode.SERVER_BIND_FAILED
        assert err.http_status == 503
        assert err.details["port"] == occupied_port
        assert err.details["host"] == "127.0.0.1"
        assert isinstance(err.__cause__, OSError)


class FakeServer:
    instances = []

    def __init__(self, config):
        self.config = config
        self.sockets = None
        FakeServer.instances.append(self)

    def run(self, sockets=None):
        self.sockets = sockets


@pytest.fixture
def fake_uvicorn(monkeypatch):
    FakeServer.instances = []
    monkeypatch.setattr(api.uvicorn, "Server", FakeServer)
    return FakeServer


class TestServe:

    def test_bind_failure_aborts_before_serving(self, occupied_port, fake_uvicorn):
        with pytest.raises(EchoServerError) as exc_info:
            api.serve(port=occupied_port, host="127.0.0.1")
        assert exc_info.value.code is ErrorCode.SERVER_BIND_FAILED
        assert fake_uvicorn.instances == []

    def test_hands_bound_socket_to_uvicorn(self, fake_uvicorn):
        api.serve(config=EchoServerConfig(api_port=0))

        (server,) = fake_uvicorn.instances
        (sock,) = server.sockets
        # Closed again once run() returns
        assert sock.fileno() == -1
        assert server.config.log_level == "info"

    def test_explicit_port_overrides_config(self, fake_uvicorn, monkeypatch):
        bound = []
        real_bind = api.bind_socket

        def spy(host, port):
            bound.append((host, port))
            return real_bind(host, 0)

        monkeypatch.setattr(api, "bind_socket", spy)
        api.serve(port=9123, host="127.0.0.1", config=EchoServerConfig(api_port=8080))
        assert bound == [("127.0.0.1", 9123)]

    def test_debug_raises_uvicorn_log_level(self, fake_uvicorn):
        api.serve(config=EchoServerConfig(api_port=0, debug=True))
        assert fake_uvicorn.instances[0].config.log_level == "debug"
