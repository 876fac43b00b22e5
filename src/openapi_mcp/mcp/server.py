"""
Name: MCP Server.
Description: Serves the compiled OpenAPI tools over the Model Context Protocol. Loads and compiles the spec directory, registers protocol handlers for the declared capabilities, and dispatches tool calls to the HTTP gateway or to custom handlers.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server

from ..errors import (
    CapabilityNotSupportedError,
    DownstreamRequestError,
    ToolNotFoundError,
)
from ..openapi.http import HttpGateway, interpolate_url
from ..openapi.models import ApiDescriptor, HttpResult, ToolDefinition
from ..openapi.spec import load_specs
from ..openapi.tools import ApiCatalog, ToolCatalog, compile_tools
from .config import OpenAPIMCPServerConfiguration
from .extension import ServerExtension
from .registry import ToolHandler


class OpenAPIMCPServer:
    """MCP server exposing OpenAPI operations as tools."""

    def __init__(
        self,
        configuration: OpenAPIMCPServerConfiguration,
        extension: Optional[ServerExtension] = None,
        gateway: Optional[HttpGateway] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the server.

        Args:
            configuration: Server configuration
            extension: Customization hooks, defaults to a no-op extension
            gateway: HTTP gateway, built from the configuration if omitted
            logger: Logger scoped to this server

        Raises:
            UnsupportedAuthorizationError: If the configured authorization is unknown
        """
        self.configuration = configuration
        self.extension = extension or ServerExtension()
        self.logger = logger or logging.getLogger(__name__).getChild(
            configuration.server.name
        )

        # Tools are always offered
        self.capabilities: Dict[str, Dict[str, Any]] = {
            "tools": {},
            **configuration.server.capabilities,
        }

        self.gateway = gateway or HttpGateway(
            authorization=configuration.authorization,
            array_repeat_hosts=configuration.array_repeat_hosts,
            timeout=configuration.timeout,
            logger=self.logger.getChild("http"),
        )

        self.server = Server(
            configuration.server.name,
            version=configuration.server.version,
            instructions=configuration.server.instructions,
        )

        self.tools: ToolCatalog = {}
        self.apis: ApiCatalog = {}
        self.handlers: Dict[str, ToolHandler] = {}
        self.resources: List[types.Resource] = []
        self.prompts: Dict[str, types.Prompt] = {}
        self._handlers_registered = False

    async def load(self):
        """Load the spec directory and build the tool catalogs."""
        specs = await load_specs(self.configuration.openapi_dir)
        self.tools, self.apis = compile_tools(specs, self.configuration.filters)
        self.handlers = {}
        self.resources = []
        self.prompts = {}
        await self.extension.extend_capabilities(self)
        self.logger.info(f"Loaded {len(self.tools)} tools")

    def setup_handlers(self):
        """Register the protocol handlers of every declared capability."""
        if self._handlers_registered:
            return

        if self.has_capability("resources"):

            @self.server.list_resources()
            async def list_resources() -> List[types.Resource]:
                return self.list_resources()

            @self.server.read_resource()
            async def read_resource(uri) -> Iterable[ReadResourceContents]:
                return await self.handle_read_resource(str(uri))

        if self.has_capability("prompts"):

            @self.server.list_prompts()
            async def list_prompts() -> List[types.Prompt]:
                return self.list_prompts()

            @self.server.get_prompt()
            async def get_prompt(
                name: str, arguments: Optional[Dict[str, str]]
            ) -> types.GetPromptResult:
                return await self.handle_get_prompt(name, arguments)

        @self.server.list_tools()
        async def list_tools() -> List[types.Tool]:
            return self.list_tools()

        # Arguments are checked downstream, after the extension prepared them
        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: Dict[str, Any]):
            result = await self.handle_call_tool(name, arguments)
            return result.content

        self._handlers_registered = True

    async def start(self, read_stream, write_stream):
        """Load the catalogs and serve requests on a pair of streams."""
        await self.load()
        self.setup_handlers()
        self.logger.info(
            f"Starting {self.configuration.server.name} "
            f"with capabilities: {', '.join(self.capabilities)}"
        )
        try:
            await self.server.run(
                read_stream, write_stream, self.server.create_initialization_options()
            )
        finally:
            await self.gateway.aclose()

    async def run_stdio(self):
        """Serve requests over stdin/stdout."""
        async with stdio_server() as (read_stream, write_stream):
            await self.start(read_stream, write_stream)

    def add_tool(
        self,
        tool: ToolDefinition,
        api: ApiDescriptor,
        handler: Optional[ToolHandler] = None,
    ):
        """Add a tool to the catalogs, with an optional custom handler."""
        self.tools[tool.key] = tool
        self.apis[tool.key] = api
        if handler is not None:
            self.handlers[tool.key] = handler

    def add_resource(self, resource: types.Resource):
        self.resources.append(resource)

    def add_prompt(self, prompt: types.Prompt):
        self.prompts[prompt.name] = prompt

    def list_tools(self) -> List[types.Tool]:
        return [tool.to_mcp_tool() for tool in self.tools.values()]

    def list_resources(self) -> List[types.Resource]:
        return list(self.resources)

    def list_prompts(self) -> List[types.Prompt]:
        return list(self.prompts.values())

    def has_capability(self, capability: str) -> bool:
        return capability in self.capabilities

    def ensure_capability(self, capability: str):
        """Raise CapabilityNotSupportedError if a capability was not declared."""
        if not self.has_capability(capability):
            raise CapabilityNotSupportedError(f"{capability} not supported")

    def tool_key(self, name: str) -> str:
        """Return the catalog key of a tool name."""
        return name.strip()

    async def handle_call_tool(
        self, name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> types.CallToolResult:
        """Execute a tool call.

        Args:
            name: Name of the tool
            arguments: Tool arguments

        Returns:
            The call result with the pretty-printed response body

        Raises:
            ToolNotFoundError: If the tool is not in the catalog
            DownstreamRequestError: If the downstream call failed
        """
        key = self.tool_key(name)
        tool = self.tools.get(key)
        api = self.apis.get(key)
        if tool is None or api is None:
            raise ToolNotFoundError(f"Tool not found: {name}")

        body = self.extension.prepare_body(tool, api, dict(arguments or {}))

        handler = self.handlers.get(key)
        if handler is not None:
            result = await handler(body, self.gateway)
        else:
            result = await self.make_request(api, body)

        if not result.ok:
            self.logger.error(
                "Failed to make request: %s",
                json.dumps(
                    {
                        "api": api.model_dump(mode="json"),
                        "tool": tool.name,
                        "result": result.model_dump(mode="json"),
                    }
                ),
            )
            raise DownstreamRequestError(result.error, result.status_code)

        response = types.CallToolResult(
            content=[
                types.TextContent(
                    type="text",
                    text=json.dumps(result.data, indent=2, ensure_ascii=False),
                )
            ]
        )
        return self.extension.prepare_response(result, response)

    async def make_request(self, api: ApiDescriptor, body: Dict[str, Any]) -> HttpResult:
        """Send the HTTP call described by an API descriptor."""
        url = interpolate_url(api.path, body)
        return await self.gateway.request(api.method, url, body, api.content_type)

    async def handle_read_resource(self, uri: str) -> Iterable[ReadResourceContents]:
        self.ensure_capability("resources")
        return await self.extension.read_resource(self, uri)

    async def handle_get_prompt(
        self, name: str, arguments: Optional[Dict[str, str]] = None
    ) -> types.GetPromptResult:
        self.ensure_capability("prompts")
        return await self.extension.get_prompt(self, name, arguments)
