"""Bearer-token authentication for the ``/v1`` endpoints."""
from __future__ import annotations

from typing import Callable, Optional

from fastapi import Request

from .errors import AuthenticationError

DEFAULT_API_KEY = "sk-mock-openai-api-key-12345"
BEARER_PREFIX = "Bearer "

MISSING_KEY_MESSAGE = (
    "You didn't provide an API key. You need to provide your API key in an "
    "Authorization header using Bearer auth (i.e. Authorization: Bearer YOUR_KEY)."
)
BEARER_REQUIRED_MESSAGE = (
    "You must provide the API key using Bearer authentication "
    "(i.e. Authorization: Bearer YOUR_KEY)."
)
INCORRECT_KEY_MESSAGE = "Incorrect API key provided: ***."


def extract_api_key(authorization: Optional[str]) -> str:
    """Return the token carried by an ``Authorization`` header value."""
    if not authorization:
        raise AuthenticationError(MISSING_KEY_MESSAGE)
    if not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError(BEARER_REQUIRED_MESSAGE)
    return authorization[len(BEARER_PREFIX):]


def require_api_key(api_key: str = DEFAULT_API_KEY) -> Callable[[Request], None]:
    """Build a FastAPI dependency rejecting requests without ``api_key``."""

    def dependency(request: Request) -> None:
        token = extract_api_key(request.headers.get("authorization"))
        if token != api_key:
            raise AuthenticationError(INCORRECT_KEY_MESSAGE)

    return dependency
