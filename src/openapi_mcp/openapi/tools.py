"""
Name: OpenAPI tools.
Description: Compiles loaded OpenAPI specs into a tool catalog and a matching API catalog. Each supported operation becomes a ToolDefinition (name, description, JSON input schema) paired with an ApiDescriptor (method, path, content type) under a shared key.
"""

import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..constants import (
    DEFAULT_PARAMETER_TYPE,
    SUPPORTED_METHODS,
    TOOL_KEY_DELIMITER,
)
from .models import (
    ApiDescriptor,
    ContentType,
    HttpMethod,
    InputSchema,
    PropertySchema,
    ToolDefinition,
)
from .spec import SpecRecord

logger = logging.getLogger(__name__)

ToolCatalog = Dict[str, ToolDefinition]
ApiCatalog = Dict[str, ApiDescriptor]


class ToolFilters(BaseModel):
    """Selects which OpenAPI operations become tools.

    Empty lists mean "no restriction".
    """

    services: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    callback: Optional[Callable[[SpecRecord], bool]] = None

    def accepts_spec(self, spec: SpecRecord) -> bool:
        """Check the service allow-list and the custom predicate."""
        if self.services and spec.service not in self.services:
            return False
        if self.callback is not None:
            return bool(self.callback(spec))
        return True

    def accepts_operation(self, operation: Dict[str, Any]) -> bool:
        """Check the tag allow-list against the operation's own tags."""
        if not self.tags:
            return True
        return any(tag in self.tags for tag in as_list(operation.get("tags")))


def trim_slashes(value: str) -> str:
    """Strip leading and trailing slashes."""
    return value.strip("/")


def join_path(base_url: str, path: str) -> str:
    """Join a base URL and a path template with exactly one slash."""
    return f"{trim_slashes(base_url)}/{trim_slashes(path)}"


def as_text(value: Any, default: str = "") -> str:
    """Return a scalar document value as a string, or ``default``.

    YAML loads unquoted values such as ``2021`` or ``3.0`` as numbers.
    """
    if value is None or isinstance(value, (dict, list)):
        return default
    return value if isinstance(value, str) else str(value)


def as_list(value: Any) -> List[Any]:
    """Return ``value`` if it is a list, otherwise an empty list."""
    return value if isinstance(value, list) else []


def property_schema(schema: Any, description: Any) -> PropertySchema:
    """Build the shallow property schema of a parameter or body field.

    Args:
        schema: The OpenAPI schema object, possibly missing
        description: Description to attach to the property

    Returns:
        PropertySchema with the declared type, defaulting to string
    """
    schema = schema if isinstance(schema, dict) else {}
    prop = PropertySchema(
        type=as_text(schema.get("type")) or DEFAULT_PARAMETER_TYPE,
        description=as_text(description),
    )

    if isinstance(schema.get("enum"), list):
        prop.enum = schema["enum"]

    if prop.type == "array":
        items = schema.get("items") if isinstance(schema.get("items"), dict) else {}
        prop.items = PropertySchema(
            type=as_text(items.get("type")) or DEFAULT_PARAMETER_TYPE,
            description=as_text(items.get("description")),
        )
    elif prop.type == "object" and isinstance(schema.get("properties"), dict):
        prop.properties = {}
        for key, value in schema["properties"].items():
            # Boolean sub-schemas are valid JSON Schema
            value = value if isinstance(value, dict) else {}
            prop.properties[str(key)] = PropertySchema(
                type=as_text(value.get("type")) or DEFAULT_PARAMETER_TYPE,
                description=as_text(value.get("description")),
            )
        prop.required = [
            key for key in as_list(schema.get("required")) if key in prop.properties
        ]

    return prop


def base_url_for(path_item: Dict[str, Any]) -> str:
    """Return the first server URL declared on a path item, or an empty string."""
    servers = path_item.get("servers")
    if isinstance(servers, list) and servers and isinstance(servers[0], dict):
        return as_text(servers[0].get("url"))
    return ""


def operation_id_for(method: str, path: str, operation: Dict[str, Any]) -> str:
    """Return the operationId, synthesizing one from method and path if absent."""
    operation_id = operation.get("operationId")
    if operation_id:
        return str(operation_id)
    cleaned = re.sub(r"[{}]", "", trim_slashes(path)).replace("/", "_")
    return f"{method.lower()}_{cleaned}" if cleaned else method.lower()


def build_tool(
    key: str,
    spec: SpecRecord,
    method: str,
    path: str,
    base_url: str,
    operation: Dict[str, Any],
) -> Tuple[ToolDefinition, ApiDescriptor]:
    """Build the tool definition and API descriptor of one operation."""
    info = spec.document.get("info")
    info = info if isinstance(info, dict) else {}
    title = as_text(info.get("title")) or spec.name
    service_description = as_text(info.get("description"))
    if service_description.endswith("."):
        service_description = service_description[:-1]

    operation_description = (
        as_text(operation.get("description"))
        or f"Make a {method.upper()} request to {path}"
    )

    tool = ToolDefinition(
        key=key,
        name=key,
        description=f"{title}: {service_description}. {operation_description}",
    )
    api = ApiDescriptor(
        method=HttpMethod(method.upper()),
        path=join_path(base_url, path),
        content_type=ContentType.JSON,
    )

    for param in as_list(operation.get("parameters")):
        if not isinstance(param, dict) or "name" not in param or "in" not in param:
            continue
        name = as_text(param["name"])
        tool.input_schema.add_property(
            name,
            property_schema(
                param.get("schema"),
                as_text(param.get("description")) or f"{name} parameter",
            ),
            required=bool(param.get("required")),
        )

    request_body = operation.get("requestBody")
    content = request_body.get("content") if isinstance(request_body, dict) else None
    content = content if isinstance(content, dict) else {}

    if ContentType.FORM_URLENCODED.value in content:
        api.content_type = ContentType.FORM_URLENCODED
    media = content.get(ContentType.FORM_URLENCODED.value) or content.get(
        ContentType.JSON.value
    )

    schema = media.get("schema") if isinstance(media, dict) else None
    if isinstance(schema, dict):
        for name in as_list(schema.get("required")):
            tool.input_schema.add_required(as_text(name))

        properties = schema.get("properties")
        for name, value in (properties if isinstance(properties, dict) else {}).items():
            name = as_text(name)
            value = value if isinstance(value, dict) else {}
            description = value.get("description")
            tool.input_schema.add_property(
                name,
                property_schema(
                    value, description if description is not None else f"{name} parameter"
                ),
            )

    tool.input_schema.prune_required()
    return tool, api


def compile_tools(
    specs: List[SpecRecord], filters: Optional[ToolFilters] = None
) -> Tuple[ToolCatalog, ApiCatalog]:
    """Compile OpenAPI specs into parallel tool and API catalogs.

    Args:
        specs: Loaded spec records
        filters: Service/tag/predicate filters, inclusive when empty

    Returns:
        Tuple of (tools, apis) keyed by ``"{spec name}--{operationId}"``
    """
    filters = filters or ToolFilters()
    tools: ToolCatalog = {}
    apis: ApiCatalog = {}

    for spec in specs:
        paths = spec.document.get("paths")
        if not paths or not isinstance(paths, dict):
            continue
        if not filters.accepts_spec(spec):
            continue

        for path, path_item in paths.items():
            if not isinstance(path_item, dict):
                continue

            base_url = base_url_for(path_item)

            for method, operation in path_item.items():
                if method not in SUPPORTED_METHODS:
                    continue
                if not operation or not isinstance(operation, dict):
                    continue
                if not filters.accepts_operation(operation):
                    continue

                key = unique_key(
                    f"{spec.name}{TOOL_KEY_DELIMITER}"
                    f"{operation_id_for(method, path, operation)}",
                    tools,
                )
                tool, api = build_tool(key, spec, method, path, base_url, operation)
                tools[key] = tool
                apis[key] = api

    logger.info(f"Compiled {len(tools)} tools from {len(specs)} specs")
    return tools, apis


def unique_key(key: str, tools: ToolCatalog) -> str:
    """Return ``key``, or a numbered variant of it if it is already taken."""
    if key not in tools:
        return key
    index = 2
    while f"{key}{TOOL_KEY_DELIMITER}{index}" in tools:
        index += 1
    logger.warning(f"Duplicate tool key {key}, using {key}{TOOL_KEY_DELIMITER}{index}")
    return f"{key}{TOOL_KEY_DELIMITER}{index}"
