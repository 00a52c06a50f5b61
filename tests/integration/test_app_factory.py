"""
App factory wiring: error rendering, debug-only docs, lifespan logging.
"""
import logging

from fastapi.testclient import TestClient

from echoserver.base.config import EchoServerConfig
from echoserver.errors import EchoServerError, ErrorCode
from echoserver.server.api import app, create_app


def test_module_app_serves_default_routes():
    with TestClient(app) as client:
        assert client.get("/").content == b"Hello world!"


def test_echoserver_error_renders_as_json(caplog):
    application = create_app()

    @application.get("/boom")
    async def boom():
        raise EchoServerError(
            ErrorCode.SYSTEM_INTERNAL_ERROR,
            "Something broke",
            details={"where": "boom"},
        )

    with caplog.at_level(logging.ERROR, logger="echoserver.server.api"):
        with TestClient(application) as client:
            resp = client.get("/boom")

    assert resp.status_code == 500
    assert resp.json() == {
        "code": "SYSTEM_001",
        "message": "Something broke",
        "details": {"where": "boom"},
        "http_status": 500,
    }
    assert "SYSTEM_001: Something broke" in caplog.text


def test_docs_only_in_debug():
    with TestClient(create_app(EchoServerConfig(debug=True))) as client:
        assert client.get("/openapi.json").status_code == 200
        assert client.get("/docs").status_code == 200


def test_lifespan_logs_start_and_stop(caplog):
    with caplog.at_level(logging.INFO, logger="echoserver.server.api"):
        with TestClient(create_app()):
            pass
    assert "starting (CORS origins: http://localhost:3000)" in caplog.text
    assert "shutting down" in caplog.text
