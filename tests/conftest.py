"""Pytest configuration for echoserver."""
import os

import pytest

from echoserver.base.config import EchoServerConfig, set_config


def pytest_configure():
    # Tests must not pick up a developer's ECHOSERVER_* overrides.
    for name in list(os.environ):
        if name.startswith("ECHOSERVER_"):
            del os.environ[name]


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Every test starts from the default config and a clean environment."""
    for name in list(os.environ):
        if name.startswith("ECHOSERVER_"):
            monkeypatch.delenv(name)
    set_config(EchoServerConfig())
    yield
    set_config(None)


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from echoserver.server.api import create_app

    with TestClient(create_app()) as test_client:
        yield test_client
