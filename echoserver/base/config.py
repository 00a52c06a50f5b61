# ============================================================================
# echoserver/base/config.py
# Application Configuration Management
# ============================================================================
#
# PURPOSE:
# Every setting the server uses lives here: where it binds, which browser
# origins may read its responses, and how it logs. Defaults reproduce the
# fixed behavior (127.0.0.1:8080, origin http://localhost:3000), so an empty
# environment changes nothing.
#
# KEY CONCEPTS:
# 1. Frozen dataclasses: settings cannot change once the server is running
# 2. Environment Variables: ECHOSERVER_* overrides, read once
# 3. Singleton: one config shared by the app, the CLI and the tests
#
# ============================================================================

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

from echoserver.errors import EchoServerError, ErrorCode, handle_error

logger = logging.getLogger(__name__)

ENV_PREFIX = "ECHOSERVER_"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ============================================================================
# CORS Configuration
# ============================================================================
# Which browser origins may read our responses, and what a preflight grants.

@dataclass(frozen=True)
class CorsConfig:
    # Exact origins, or "scheme://host:*" to accept any port on a host
    allowed_origins: tuple = ("http://localhost:3000",)

    # Methods and request headers a preflight may ask for
    allowed_methods: tuple = ("GET", "POST")
    allowed_headers: tuple = ("Content-Type",)

    # How long browsers may cache a preflight answer (seconds)
    max_age: int = 3600


# ============================================================================
# Logging Configuration
# ============================================================================

@dataclass(frozen=True)
class LogConfig:
    level: str = "INFO"

    # %(name)s is the module that logged (e.g. "echoserver.server.api")
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    # Console only unless a file path is given
    file_path: Optional[Path] = None

    # Rotation: 10 MB per file, 5 old files kept
    max_file_size_mb: int = 10
    backup_count: int = 5


# ============================================================================
# Master Configuration Container
# ============================================================================

@dataclass(frozen=True)
class EchoServerConfig:
    cors: CorsConfig = field(default_factory=CorsConfig)
    log: LogConfig = field(default_factory=LogConfig)

    debug: bool = False

    # 127.0.0.1 = only reachable from this machine
    api_host: str = "127.0.0.1"
    api_port: int = 8080

    def validate(self) -> "EchoServerConfig":
        """
        Reject settings the server cannot start with.

        Returns:
            self, so callers can chain ``EchoServerConfig(...).validate()``

        Raises:
            EchoServerError: CONFIG_INVALID naming the offending field
        """
        if not 1 <= self.api_port <= 65535:
            raise EchoServerError(
                ErrorCode.CONFIG_INVALID,
                f"Port out of range: {self.api_port}",
                details={"field": "api_port", "value": self.api_port},
            )
        if not self.api_host:
            raise EchoServerError(
                ErrorCode.CONFIG_INVALID,
                "Host must not be empty",
                details={"field": "api_host"},
            )
        if self.cors.max_age < 0:
            raise EchoServerError(
                ErrorCode.CONFIG_INVALID,
                f"CORS max age must not be negative: {self.cors.max_age}",
                details={"field": "cors.max_age", "value": self.cors.max_age},
            )
        for origin in self.cors.allowed_origins:
            parsed = urlparse(origin)
            if not parsed.scheme or not parsed.netloc:
                raise EchoServerError(
                    ErrorCode.CONFIG_INVALID,
                    f"Allowed origin must look like scheme://host[:port]: {origin!r}",
                    details={"field": "cors.allowed_origins", "value": origin},
                )
        if self.log.level.upper() not in _LOG_LEVELS:
            raise EchoServerError(
                ErrorCode.CONFIG_INVALID,
                f"Unknown log level: {self.log.level}",
                details={"field": "log.level", "value": self.log.level},
            )
        return self

    @classmethod
    def from_env(cls) -> "EchoServerConfig":
        """Build a validated config from ECHOSERVER_* environment variables."""
        origins_str = os.getenv(f"{ENV_PREFIX}ALLOWED_ORIGINS", "")
        # "http://a.com, http://b.com" -> ("http://a.com", "http://b.com")
        origins = tuple(o.strip() for o in origins_str.split(",") if o.strip())

        cors = CorsConfig(
            allowed_origins=origins or CorsConfig.allowed_origins,
            max_age=_env_int("CORS_MAX_AGE", 3600),
        )

        log_file = os.getenv(f"{ENV_PREFIX}LOG_FILE")
        log = LogConfig(
            level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO"),
            file_path=Path(log_file).expanduser() if log_file else None,
        )

        return cls(
            cors=cors,
            log=log,
            debug=os.getenv(f"{ENV_PREFIX}DEBUG", "false").lower() == "true",
            api_host=os.getenv(f"{ENV_PREFIX}API_HOST", "127.0.0.1"),
            api_port=_env_int("API_PORT", 8080),
        ).validate()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(f"{ENV_PREFIX}{name}")
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise handle_error(exc, context=f"{ENV_PREFIX}{name} must be an integer") from exc


# ============================================================================
# Global Configuration Singleton
# ============================================================================

_config: Optional[EchoServerConfig] = None


def get_config() -> EchoServerConfig:
    """
    Get the global configuration instance.

    Loaded from the environment on first use, then reused.
    """
    global _config
    if _config is None:
        _config = EchoServerConfig.from_env()
    return _config


def set_config(config: Optional[EchoServerConfig]) -> None:
    """
    Replace the global configuration (mainly used for testing).

    Passing None forces the next get_config() to re-read the environment.
    """
    global _config
    _config = config


def setup_logging(config: Optional[EchoServerConfig] = None) -> None:
    """
    Configure Python's logging system based on our settings.

    Call this once at application startup.
    """
    cfg = config or get_config()

    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if cfg.log.file_path is not None:
        from logging.handlers import RotatingFileHandler
        cfg.log.file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            cfg.log.file_path,
            maxBytes=cfg.log.max_file_size_mb * 1024 * 1024,
            backupCount=cfg.log.backup_count,
        )
        handlers.append(file_handler)

    level = "DEBUG" if cfg.debug else cfg.log.level.upper()
    logging.basicConfig(
        level=getattr(logging, level),
        format=cfg.log.format,
        handlers=handlers,
        force=True,  # Replace any existing logging configuration
    )
