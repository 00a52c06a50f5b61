"""
Router initialization module.

Exports all API routers for echoserver.
"""
from echoserver.server.routers import echo, greetings

__all__ = [
    "echo",
    "greetings",
]
