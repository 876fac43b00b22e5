"""
Name: openapi-mcp package.
Description: Defines the package version and exposes the OpenAPI MCP server so that REST APIs described by OpenAPI documents can be served as MCP tools.
"""

__version__ = "0.1.0"

from .mcp.config import OpenAPIMCPServerConfiguration
from .mcp.server import OpenAPIMCPServer

__all__ = ["OpenAPIMCPServer", "OpenAPIMCPServerConfiguration"]
