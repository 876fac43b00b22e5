"""MCP server for compiled OpenAPI tools."""

from .config import OpenAPIMCPServerConfiguration, ServerInfo
from .extension import ServerExtension
from .registry import AdditionalTool, ToolHandler, ToolRegistry
from .server import OpenAPIMCPServer

__all__ = [
    "AdditionalTool",
    "OpenAPIMCPServer",
    "OpenAPIMCPServerConfiguration",
    "ServerExtension",
    "ServerInfo",
    "ToolHandler",
    "ToolRegistry",
]
