"""
Name: MCP Configuration classes.
Description: Configuration types for the OpenAPI MCP server, kept apart from the server module to avoid circular imports.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..constants import (
    DEFAULT_ARRAY_REPEAT_HOSTS,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_SERVER_NAME,
    DEFAULT_SERVER_VERSION,
)
from ..openapi.tools import ToolFilters


class ServerInfo(BaseModel):
    """Identity and declared capabilities of the MCP server."""

    name: str = DEFAULT_SERVER_NAME
    version: str = DEFAULT_SERVER_VERSION
    capabilities: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    instructions: Optional[str] = None


class OpenAPIMCPServerConfiguration(BaseModel):
    """Configuration for an OpenAPI MCP server."""

    server: ServerInfo = Field(default_factory=ServerInfo)
    openapi_dir: str
    filters: ToolFilters = Field(default_factory=ToolFilters)
    # Checked when the gateway is built so unsupported types fail there
    authorization: Optional[Any] = None
    array_repeat_hosts: List[str] = Field(
        default_factory=lambda: list(DEFAULT_ARRAY_REPEAT_HOSTS)
    )
    timeout: float = DEFAULT_HTTP_TIMEOUT

