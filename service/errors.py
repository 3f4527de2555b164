"""Error types raised by the HTTP layer and their OpenAI-shaped bodies."""
from __future__ import annotations

from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base error carrying the HTTP status and the OpenAI error ``type``."""

    status: int = 500
    error_type: str = "server_error"

    def __init__(self, message: str, *, param: Optional[str] = None, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.param = param
        self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return error_body(self.message, self.error_type, param=self.param, code=self.code)


class RequestValidationError(ServiceError, ValueError):
    """Raised when a request body violates the API contract."""

    status = 400
    error_type = "invalid_request_error"


class AuthenticationError(ServiceError):
    """Raised when the bearer token is missing or wrong."""

    status = 401
    error_type = "invalid_request_error"

    def __init__(self, message: str) -> None:
        super().__init__(message, code="invalid_api_key")


class RequestTimeoutError(ServiceError):
    """Raised when synthesis takes longer than ``request_timeout_secs``."""

    status = 504
    error_type = "timeout_error"


def error_body(
    message: str,
    error_type: str,
    *,
    param: Optional[str] = None,
    code: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "error": {
            "message": message,
            "type": error_type,
            "param": param,
            "code": code,
        }
    }
