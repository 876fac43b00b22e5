"""Common models for OpenAPI tools."""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

import mcp.types as types
from pydantic import BaseModel, ConfigDict, Field


class HttpMethod(str, Enum):
    """HTTP methods that can back a tool."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class ContentType(str, Enum):
    """Request body encodings understood by the gateway."""

    JSON = "application/json"
    FORM_URLENCODED = "application/x-www-form-urlencoded"
    MULTIPART = "multipart/form-data"


class PropertySchema(BaseModel):
    """Shallow JSON schema of a single tool input property.

    Primitive properties only carry ``type`` and ``description``. Arrays carry
    the schema of their items and objects one level of nested properties.
    """

    type: str = "string"
    description: str = ""
    enum: Optional[List[Any]] = None
    items: Optional["PropertySchema"] = None
    properties: Optional[Dict[str, "PropertySchema"]] = None
    required: Optional[List[str]] = None


class InputSchema(BaseModel):
    """JSON schema of a tool's arguments."""

    type: Literal["object"] = "object"
    properties: Dict[str, PropertySchema] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)

    def add_property(self, name: str, schema: PropertySchema, required: bool = False):
        """Add or replace a property, optionally marking it as required."""
        self.properties[name] = schema
        if required:
            self.add_required(name)

    def add_required(self, name: str):
        """Mark a property as required, keeping the list free of duplicates."""
        if name not in self.required:
            self.required.append(name)

    def prune_required(self):
        """Drop required names that do not refer to a declared property."""
        self.required = [name for name in self.required if name in self.properties]

    def to_json_schema(self) -> Dict[str, Any]:
        """Return the schema as a plain JSON-compatible dictionary."""
        return self.model_dump(exclude_none=True)


class ToolDefinition(BaseModel):
    """Protocol-facing definition of a tool."""

    key: str
    name: str
    description: str
    input_schema: InputSchema = Field(default_factory=InputSchema)

    def to_mcp_tool(self) -> types.Tool:
        """Convert the definition to an MCP tool."""
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema.to_json_schema(),
        )


class ApiDescriptor(BaseModel):
    """HTTP call recipe paired with a tool."""

    method: HttpMethod
    path: str
    content_type: ContentType = ContentType.JSON


class HttpSuccess(BaseModel):
    """Successful downstream response."""

    ok: Literal[True] = True
    status_code: int
    data: Any = None


class HttpFailure(BaseModel):
    """Failed downstream response or transport error."""

    ok: Literal[False] = False
    status_code: int
    error: str


HttpResult = Union[HttpSuccess, HttpFailure]


class MultipartPayload(BaseModel):
    """A pre-built multipart/form-data body.

    Args:
        fields: Plain form fields
        files: Mapping of field name to ``(filename, content, content_type)``
    """

    model_config = ConfigDict(frozen=True)

    fields: Dict[str, str] = Field(default_factory=dict)
    files: Dict[str, Tuple[str, bytes, str]] = Field(default_factory=dict)
