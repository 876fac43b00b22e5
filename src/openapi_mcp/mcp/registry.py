"""
Name: Additional tools registry.
Description: Hand-authored tools that are merged into the compiled catalogs. Each entry pairs a tool definition and API descriptor with the handler that executes it and a predicate deciding, from the active filters, whether the tool is offered.
"""

import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from ..openapi.http import HttpGateway
from ..openapi.models import ApiDescriptor, HttpResult, ToolDefinition
from ..openapi.tools import ToolFilters

if TYPE_CHECKING:
    from .server import OpenAPIMCPServer

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Dict[str, Any], HttpGateway], Awaitable[HttpResult]]


def always(filters: Optional[ToolFilters]) -> bool:
    return True


class AdditionalTool(BaseModel):
    """A hand-authored tool and the handler that executes it."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    tool: ToolDefinition
    api: ApiDescriptor
    handler: ToolHandler
    predicate: Callable[[Optional[ToolFilters]], bool] = always

    @property
    def key(self) -> str:
        return self.tool.key


class ToolRegistry:
    """Registry of additional tools."""

    def __init__(self, tools: Optional[List[AdditionalTool]] = None):
        self._tools: Dict[str, AdditionalTool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: AdditionalTool):
        """Add or replace a tool, keyed by its catalog key."""
        self._tools[tool.key] = tool

    def select(self, filters: Optional[ToolFilters] = None) -> Dict[str, AdditionalTool]:
        """Return the tools whose predicate accepts the filters."""
        return {
            key: tool for key, tool in self._tools.items() if tool.predicate(filters)
        }

    def install(
        self, server: "OpenAPIMCPServer", filters: Optional[ToolFilters] = None
    ) -> List[str]:
        """Merge the selected tools into a server's catalogs.

        Returns:
            The keys of the installed tools
        """
        selected = self.select(filters)
        for tool in selected.values():
            server.add_tool(
                tool.tool.model_copy(deep=True), tool.api.model_copy(), tool.handler
            )
        logger.debug(f"Installed {len(selected)} additional tools")
        return list(selected)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, key: str) -> bool:
        return key in self._tools
