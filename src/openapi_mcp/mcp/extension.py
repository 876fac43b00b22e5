"""Customization points of the OpenAPI MCP server.

A ServerExtension is handed to the server at construction. The server calls
it to prepare request bodies, post-process responses, register extra tools,
resources and prompts after the catalogs are loaded, and to serve resource
and prompt reads.
"""

from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional

import mcp.types as types
from mcp.server.lowlevel.helper_types import ReadResourceContents

from ..openapi.models import ApiDescriptor, HttpResult, ToolDefinition

if TYPE_CHECKING:
    from .server import OpenAPIMCPServer


class ServerExtension:
    """Default extension: leaves bodies and responses untouched."""

    def prepare_body(
        self, tool: ToolDefinition, api: ApiDescriptor, body: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Prepare the body for the API call.

        Args:
            tool: The tool being called
            api: The API descriptor of the tool
            body: The raw arguments from the request

        Returns:
            The body sent downstream
        """
        return body

    def prepare_response(
        self, result: HttpResult, response: types.CallToolResult
    ) -> types.CallToolResult:
        """Prepare the response sent back to the client.

        Args:
            result: The HTTP result of the API call
            response: The response built from the result

        Returns:
            The response returned to the client
        """
        return response

    async def extend_capabilities(self, server: "OpenAPIMCPServer"):
        """Register additional tools, resources or prompts after loading."""

    async def read_resource(
        self, server: "OpenAPIMCPServer", uri: str
    ) -> Iterable[ReadResourceContents]:
        raise NotImplementedError(
            "read_resource must be implemented to handle resources reading"
        )

    async def get_prompt(
        self,
        server: "OpenAPIMCPServer",
        name: str,
        arguments: Optional[Dict[str, str]] = None,
    ) -> types.GetPromptResult:
        raise NotImplementedError(
            "get_prompt must be implemented to handle prompts reading"
        )
