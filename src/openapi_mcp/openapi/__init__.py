"""OpenAPI handling module for openapi-mcp."""

from .http import HttpGateway, interpolate_url
from .models import (
    ApiDescriptor,
    ContentType,
    HttpFailure,
    HttpMethod,
    HttpResult,
    HttpSuccess,
    InputSchema,
    MultipartPayload,
    PropertySchema,
    ToolDefinition,
)
from .spec import SpecRecord, load_specs
from .tools import ToolFilters, compile_tools

__all__ = [
    "ApiDescriptor",
    "ContentType",
    "HttpFailure",
    "HttpGateway",
    "HttpMethod",
    "HttpResult",
    "HttpSuccess",
    "InputSchema",
    "MultipartPayload",
    "PropertySchema",
    "SpecRecord",
    "ToolDefinition",
    "ToolFilters",
    "compile_tools",
    "interpolate_url",
    "load_specs",
]
