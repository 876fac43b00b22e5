"""Exceptions raised by openapi-mcp."""


class OpenAPIMCPError(Exception):
    """Base class for all openapi-mcp errors."""


class FileSystemError(OpenAPIMCPError):
    """The OpenAPI spec directory could not be read."""


class ParseError(OpenAPIMCPError):
    """An OpenAPI document could not be parsed or dereferenced."""


class UnsupportedAuthorizationError(OpenAPIMCPError):
    """The authorization configuration is of an unknown type."""


class UnsupportedMethodError(OpenAPIMCPError):
    """An API descriptor declares an HTTP method the gateway cannot send."""


class ToolNotFoundError(OpenAPIMCPError):
    """A call-tool request named a tool that is not in the catalog."""


class DownstreamRequestError(OpenAPIMCPError):
    """The HTTP call behind a tool failed."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class CapabilityNotSupportedError(OpenAPIMCPError):
    """A handler was invoked for a capability the server did not declare."""


class ResourceNotFoundError(OpenAPIMCPError):
    """A read-resource request named a resource the server does not serve."""
