"""
Name: Twilio MCP server.
Description: Specializes the OpenAPI MCP server for Twilio. Injects the default account SID into calls that omit it, exposes that SID as a resource, and adds the Serverless upload tools.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

import mcp.types as types
from mcp.server.lowlevel.helper_types import ReadResourceContents

from ..constants import (
    DEFAULT_SERVER_VERSION,
    TWILIO_ACCOUNT_SID_URI,
    TWILIO_SERVER_NAME,
)
from ..errors import ResourceNotFoundError
from ..mcp.config import OpenAPIMCPServerConfiguration, ServerInfo
from ..mcp.extension import ServerExtension
from ..mcp.registry import ToolRegistry
from ..mcp.server import OpenAPIMCPServer
from ..openapi.auth import BasicAuth
from ..openapi.models import ApiDescriptor, ToolDefinition
from ..openapi.tools import ToolFilters
from .tools import serverless_tools
from .utils import is_account_sid, tool_requires_account_sid

logger = logging.getLogger(__name__)


def system_prompt(account_sid: str) -> str:
    return (
        "You are an agent to call Twilio APIs. "
        f"If no accountSid is provided, you MUST use {account_sid}"
    )


class TwilioExtension(ServerExtension):
    """Twilio behaviour layered over the generic server."""

    def __init__(self, account_sid: str, registry: Optional[ToolRegistry] = None):
        """Initialize the extension.

        Args:
            account_sid: Account used when a call does not name one
            registry: Additional tools, defaults to the Serverless upload tools
        """
        self.account_sid = account_sid
        self.registry = registry if registry is not None else serverless_tools()

    def prepare_body(
        self, tool: ToolDefinition, api: ApiDescriptor, body: Dict[str, Any]
    ) -> Dict[str, Any]:
        requires_account_sid, key = tool_requires_account_sid(tool)
        if requires_account_sid and not is_account_sid(body.get(key)):
            body = {**body, key: self.account_sid}
        return body

    async def extend_capabilities(self, server: OpenAPIMCPServer):
        installed = self.registry.install(server, server.configuration.filters)
        if installed:
            logger.info(f"Added tools: {', '.join(installed)}")

        for tool in server.tools.values():
            requires_account_sid, key = tool_requires_account_sid(tool)
            if requires_account_sid:
                tool.description = (
                    f"{tool.description} If {key} is not provided, "
                    f"{self.account_sid} is used."
                )

        server.add_resource(
            types.Resource(
                uri=TWILIO_ACCOUNT_SID_URI,
                name="Twilio AccountSid",
                description="The account SID for the Twilio account",
                mimeType="text/plain",
            )
        )

    async def read_resource(
        self, server: OpenAPIMCPServer, uri: str
    ) -> Iterable[ReadResourceContents]:
        # Non-special URL schemes may come back with a trailing slash
        if uri.rstrip("/").lower() == TWILIO_ACCOUNT_SID_URI.lower():
            return [
                ReadResourceContents(
                    content=f"The Twilio accountSid is {self.account_sid}",
                    mime_type="text/plain",
                )
            ]
        raise ResourceNotFoundError(f"Resource {uri} not found")


def create_twilio_server(
    account_sid: str,
    api_key: str,
    api_secret: str,
    openapi_dir: str,
    services: Optional[List[str]] = None,
    tags: Optional[List[str]] = None,
    name: str = TWILIO_SERVER_NAME,
    version: str = DEFAULT_SERVER_VERSION,
    logger: Optional[logging.Logger] = None,
) -> OpenAPIMCPServer:
    """Build an OpenAPI MCP server for the Twilio APIs.

    Args:
        account_sid: Default account SID
        api_key: API key SID, used as the basic auth username
        api_secret: API key secret, used as the basic auth password
        openapi_dir: Directory holding the Twilio OpenAPI documents
        services: Service allow-list
        tags: Tag allow-list
        name: Server name
        version: Server version
        logger: Logger for the server

    Returns:
        The configured, not yet started, server
    """
    configuration = OpenAPIMCPServerConfiguration(
        server=ServerInfo(
            name=name,
            version=version,
            capabilities={"tools": {}, "resources": {}, "prompts": {}},
            instructions=system_prompt(account_sid),
        ),
        openapi_dir=openapi_dir,
        filters=ToolFilters(services=services or [], tags=tags or []),
        authorization=BasicAuth(username=api_key, password=api_secret),
    )
    return OpenAPIMCPServer(
        configuration, extension=TwilioExtension(account_sid), logger=logger
    )
