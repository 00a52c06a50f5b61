# echoserver/server/api.py
# FastAPI application, CORS policy and uvicorn bootstrap

from __future__ import annotations

import logging
import socket
from contextlib import asynccontextmanager
from typing import Dict, Iterable, Optional
from urllib.parse import urlparse

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from echoserver import __version__
from echoserver.base.config import CorsConfig, EchoServerConfig, get_config
from echoserver.errors import EchoServerError, handle_error
from echoserver.server.routers import echo, greetings

logger = logging.getLogger(__name__)


# ============================================================================
# CORS
# ============================================================================

def is_origin_allowed(origin: Optional[str], allowed_patterns: Iterable[str]) -> bool:
    """
    Check if an origin matches any of the allowed patterns.

    Patterns support:
    - Exact matches: "http://localhost:3000"
    - Wildcard ports: "http://localhost:*" matches any port on localhost

    Args:
        origin: The Origin header value to validate
        allowed_patterns: Iterable of allowed origin patterns (tuple, list, etc.)

    Returns:
        True if origin matches any pattern, False otherwise
    """
    if not origin:
        return False

    parsed = urlparse(origin)
    origin_netloc = parsed.netloc

    for pattern in allowed_patterns:
        parsed_pattern = urlparse(pattern)

        # Scheme must match exactly
        if parsed.scheme != parsed_pattern.scheme:
            continue

        pattern_netloc = parsed_pattern.netloc
        if pattern_netloc.endswith(":*"):
            # Match hostname, ignore port
            pattern_host = pattern_netloc[:-2]
            if origin_netloc == pattern_host or origin_netloc.startswith(f"{pattern_host}:"):
                return True
        elif origin_netloc == pattern_netloc:
            return True

    return False


class CORSPolicyMiddleware(BaseHTTPMiddleware):
    """
    Apply the CORS policy to every request.

    Preflights are answered here and never reach the router. Other requests
    are always served; only responses to an allowed origin get the CORS
    headers, so browsers block script access for everyone else.
    """

    def __init__(self, app, policy: CorsConfig):
        super().__init__(app)
        self.policy = policy
        self._methods = {m.upper() for m in policy.allowed_methods}
        self._headers = {h.lower() for h in policy.allowed_headers}

    def cors_headers(self, origin: str) -> Dict[str, str]:
        return {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Methods": ", ".join(self.policy.allowed_methods),
            "Access-Control-Allow-Headers": ", ".join(self.policy.allowed_headers),
            "Access-Control-Max-Age": str(self.policy.max_age),
            "Vary": "Origin",
        }

    def preflight_allowed(self, request: Request, origin: str) -> bool:
        if not is_origin_allowed(origin, self.policy.allowed_origins):
            return False

        method = request.headers.get("access-control-request-method", "").strip().upper()
        if method not in self._methods:
            return False

        requested = request.headers.get("access-control-request-headers", "")
        for header in requested.split(","):
            header = header.strip().lower()
            if header and header not in self._headers:
                return False
        return True

    async def dispatch(self, request, call_next):
        origin = request.headers.get("origin")

        is_preflight = (
            request.method == "OPTIONS"
            and origin
            and "access-control-request-method" in request.headers
        )
        if is_preflight:
            if self.preflight_allowed(request, origin):
                return Response(status_code=200, headers=self.cors_headers(origin))
            logger.info(
                f"[CORS] Rejected preflight from {origin} "
                f"(method={request.headers.get('access-control-request-method')}, "
                f"headers={request.headers.get('access-control-request-headers', '')})"
            )
            return Response(status_code=403)

        response = await call_next(request)
        if origin and is_origin_allowed(origin, self.policy.allowed_origins):
            response.headers.update(self.cors_headers(origin))
        return response


# ============================================================================
# Exception Handlers
# ============================================================================

async def echoserver_error_handler(request: Request, exc: EchoServerError):
    """Render EchoServerError as its JSON form with the mapped status."""
    logger.error(f"[API] {exc.code.value}: {exc.message}", extra={"details": exc.details})
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict()
    )


async def not_found_handler(request: Request, exc: StarletteHTTPException):
    """
    Fold "method not allowed" into "not found".

    A known path with the wrong method is just another unmatched
    (method, path) pair and answers 404 like any other.
    """
    if exc.status_code == 405:
        exc = StarletteHTTPException(status_code=404)
    return await http_exception_handler(request, exc)


# ============================================================================
# App Factory
# ============================================================================

def create_app(config: Optional[EchoServerConfig] = None) -> FastAPI:
    """Build the application from config (the global one when omitted)."""
    cfg = config or get_config()

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info(f"[API] echoserver {__version__} starting (CORS origins: {', '.join(cfg.cors.allowed_origins)})")
        yield
        logger.info("[API] echoserver shutting down")

    # Interactive docs would add routes; only expose them while debugging.
    # No slash redirects: "/hey/" is unmatched like any other path.
    application = FastAPI(
        title="echoserver",
        description="Greeting and echo endpoints behind a single-origin CORS policy",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if cfg.debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if cfg.debug else None,
        redirect_slashes=False,
    )

    application.add_exception_handler(EchoServerError, echoserver_error_handler)
    application.add_exception_handler(StarletteHTTPException, not_found_handler)
    application.add_middleware(CORSPolicyMiddleware, policy=cfg.cors)

    application.include_router(greetings.router)
    application.include_router(echo.router)
    return application


app = create_app()


# ============================================================================
# Listener
# ============================================================================

def bind_socket(host: str, port: int) -> socket.socket:
    """
    Bind the listening socket up front.

    Raises:
        EchoServerError: SERVER_BIND_FAILED when the address is taken,
            unavailable, or not permitted
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError as exc:
        sock.close()
        error = handle_error(exc, context=f"Could not bind {host}:{port}")
        error.details.update({"host": host, "port": port})
        raise error from exc
    sock.set_inheritable(True)
    return sock


def serve(
    port: Optional[int] = None,
    host: Optional[str] = None,
    config: Optional[EchoServerConfig] = None,
) -> None:
    """Bind and run until interrupted. Bind failures abort before serving."""
    cfg = config or get_config()
    bind_host = host or cfg.api_host
    bind_port = cfg.api_port if port is None else port

    sock = bind_socket(bind_host, bind_port)
    actual_port = sock.getsockname()[1]
    logger.info(f"[API] echoserver listening on http://{bind_host}:{actual_port}")

    server = uvicorn.Server(
        uvicorn.Config(
            create_app(cfg),
            log_level="debug" if cfg.debug else cfg.log.level.lower(),
        )
    )
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()


if __name__ == "__main__":
    serve()
