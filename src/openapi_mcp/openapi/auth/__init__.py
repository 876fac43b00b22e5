"""Authorization variants and header helpers."""

from .auth_helpers import (
    ApiKeyAuth,
    Authorization,
    BasicAuth,
    BearerAuth,
    build_auth_headers,
    parse_authorization,
)

__all__ = [
    "ApiKeyAuth",
    "Authorization",
    "BasicAuth",
    "BearerAuth",
    "build_auth_headers",
    "parse_authorization",
]
