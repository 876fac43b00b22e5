"""Authentication helpers for the HTTP gateway.

Authorization is described by one of three immutable variants and turned into
a fixed set of request headers once, when the gateway is built.
"""

import base64
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from ...errors import UnsupportedAuthorizationError


class BasicAuth(BaseModel):
    """HTTP Basic authentication."""

    model_config = ConfigDict(frozen=True)

    type: Literal["Basic"] = "Basic"
    username: str
    password: str


class BearerAuth(BaseModel):
    """HTTP Bearer token authentication."""

    model_config = ConfigDict(frozen=True)

    type: Literal["Bearer"] = "Bearer"
    token: str


class ApiKeyAuth(BaseModel):
    """API key sent as a request header."""

    model_config = ConfigDict(frozen=True)

    type: Literal["ApiKey"] = "ApiKey"
    key: str
    value: str


Authorization = Union[BasicAuth, BearerAuth, ApiKeyAuth]


def build_auth_headers(authorization: Optional[Any]) -> Dict[str, str]:
    """Converts an authorization config to the headers sent on every request.

    Args:
        authorization: One of the authorization variants, or None

    Returns:
        Dictionary of headers

    Raises:
        UnsupportedAuthorizationError: For any other kind of configuration
    """
    if authorization is None:
        return {}

    if isinstance(authorization, BasicAuth):
        credentials = f"{authorization.username}:{authorization.password}"
        encoded = base64.b64encode(credentials.encode()).decode()
        return {"Authorization": f"Basic {encoded}"}

    if isinstance(authorization, BearerAuth):
        return {"Authorization": f"Bearer {authorization.token}"}

    if isinstance(authorization, ApiKeyAuth):
        return {authorization.key: authorization.value}

    auth_type = getattr(authorization, "type", None) or type(authorization).__name__
    raise UnsupportedAuthorizationError(f"Unsupported authorization type: {auth_type}")


def parse_authorization(value: str) -> Authorization:
    """Parse the ``<Type>/<credential>`` command-line form.

    Supported forms are ``Basic/username:password``, ``Bearer/token`` and
    ``ApiKey/key:value``.

    Raises:
        ValueError: If the string is not of the form ``<Type>/<credential>``
        UnsupportedAuthorizationError: If the type is unknown
    """
    auth_type, sep, credential = value.partition("/")
    if not sep or not auth_type or not credential:
        raise ValueError("Invalid authorization format")

    if auth_type == "Bearer":
        return BearerAuth(token=credential)

    if auth_type in ("Basic", "ApiKey"):
        first, sep, second = credential.partition(":")
        if not sep or not first:
            raise ValueError("Invalid authorization format")
        if auth_type == "Basic":
            return BasicAuth(username=first, password=second)
        return ApiKeyAuth(key=first, value=second)

    raise UnsupportedAuthorizationError(f"Unsupported authorization type: {auth_type}")
