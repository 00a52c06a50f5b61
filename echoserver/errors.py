"""Structured errors for echoserver."""
#
# PURPOSE:
# Gives every failure the server can surface a stable code, a message and an
# HTTP status, so startup problems and request failures read the same way in
# logs and in JSON responses.
#
# ERROR CODE FORMAT:
# - CONFIG_XXX: Configuration errors (bad env values, out of range settings)
# - SERVER_XXX: Listener and routing errors
# - SYSTEM_XXX: Everything else
#
# USAGE:
#   from echoserver.errors import EchoServerError, ErrorCode
#
#   raise EchoServerError(
#       ErrorCode.SERVER_BIND_FAILED,
#       "Could not bind 127.0.0.1:8080",
#       details={"host": "127.0.0.1", "port": 8080}
#   )
#
import json
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    # Config Errors
    CONFIG_INVALID = "CONFIG_001"
    CONFIG_PARSE_ERROR = "CONFIG_002"

    # Server Errors
    SERVER_BIND_FAILED = "SERVER_001"

    # System Errors
    SYSTEM_INTERNAL_ERROR = "SYSTEM_001"


class EchoServerError(Exception):
    """
    Base exception for echoserver with structured error information.

    Attributes:
        code: ErrorCode enum value (e.g., "SERVER_001")
        message: Human-readable error message
        details: Optional dictionary with additional context
        http_status: Suggested HTTP status code for API responses
    """

    HTTP_STATUS_MAP: Dict[ErrorCode, int] = {
        ErrorCode.CONFIG_INVALID: 500,
        ErrorCode.CONFIG_PARSE_ERROR: 500,
        ErrorCode.SERVER_BIND_FAILED: 503,      # Service Unavailable
        ErrorCode.SYSTEM_INTERNAL_ERROR: 500,
    }

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        http_status: Optional[int] = None
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.http_status = http_status or self.HTTP_STATUS_MAP.get(code, 500)

        # Code first so grepping logs for "SERVER_001" finds it
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "http_status": self.http_status
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EchoServerError":
        """
        Deserialize error from dictionary.

        Args:
            data: Dictionary with code, message, details, http_status

        Returns:
            EchoServerError instance
        """
        code = ErrorCode(data["code"])
        message = data["message"]
        details = data.get("details", {})
        http_status = data.get("http_status")
        return cls(code, message, details, http_status)


# ============================================================================
# Convenience Functions
# ============================================================================

def handle_error(error: Exception, context: Optional[str] = None) -> EchoServerError:
    """
    Convert a generic exception to an EchoServerError.

    Args:
        error: The original exception
        context: Optional context string (e.g., "while binding listener")

    Returns:
        EchoServerError with appropriate code and message
    """
    if isinstance(error, EchoServerError):
        return error

    error_type = type(error).__name__

    # The listening socket is the only OS resource this server touches
    if isinstance(error, OSError):
        code = ErrorCode.SERVER_BIND_FAILED
    elif isinstance(error, ValueError):
        code = ErrorCode.CONFIG_PARSE_ERROR
    else:
        code = ErrorCode.SYSTEM_INTERNAL_ERROR

    message = str(error)
    if context:
        message = f"{context}: {message}"

    return EchoServerError(
        code=code,
        message=message,
        details={
            "original_type": error_type,
            "original_message": str(error)
        }
    )


__all__ = ["ErrorCode", "EchoServerError", "handle_error"]
