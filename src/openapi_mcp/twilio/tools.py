"""
Name: Twilio Serverless upload tools.
Description: Tools that upload Function and Asset versions to Twilio Serverless. The upload endpoint is not part of the published OpenAPI documents and takes a multipart body, so these tools are hand-written and executed by their own handlers.
"""

import logging
from typing import Any, Dict, List, Optional

from ..constants import TWILIO_SERVERLESS_UPLOAD_URL
from ..mcp.registry import AdditionalTool, ToolRegistry
from ..openapi.http import HttpGateway
from ..openapi.models import (
    ApiDescriptor,
    ContentType,
    HttpFailure,
    HttpMethod,
    HttpResult,
    InputSchema,
    MultipartPayload,
    PropertySchema,
    ToolDefinition,
)
from ..openapi.tools import ToolFilters

logger = logging.getLogger(__name__)

UPLOAD_FUNCTION_TOOL = "TwilioServerlessV1--UploadServerlessFunction"
UPLOAD_ASSET_TOOL = "TwilioServerlessV1--UploadServerlessAsset"


def _schema(properties: Dict[str, str]) -> InputSchema:
    schema = InputSchema()
    for name, description in properties.items():
        schema.add_property(name, PropertySchema(description=description), required=True)
    return schema


def _missing(params: Dict[str, Any], names: List[str]) -> Optional[HttpFailure]:
    missing = [name for name in names if params.get(name) in (None, "")]
    if missing:
        return HttpFailure(
            status_code=500,
            error=f"Missing required parameters: {', '.join(missing)}",
        )
    return None


# Handlers are dispatched by key, the descriptor is never sent
UPLOAD_API = ApiDescriptor(
    method=HttpMethod.POST,
    path="fake",
    content_type=ContentType.MULTIPART,
)

upload_function_definition = ToolDefinition(
    key=UPLOAD_FUNCTION_TOOL,
    name=UPLOAD_FUNCTION_TOOL,
    description=(
        "Upload a JavaScript file as a Twilio Serverless Function. This creates "
        "a new version of the function that can be deployed."
    ),
    input_schema=_schema(
        {
            "serviceSid": "The SID of the Twilio Serverless Service where the function will be uploaded",
            "functionSid": "The SID of the Function to create a new version for",
            "path": 'The HTTP path used to invoke the function (e.g., "/thanos")',
            "visibility": 'The visibility of the function, typically "public" or "private"',
            "content": "The JavaScript code content for the function",
        }
    ),
)

upload_asset_definition = ToolDefinition(
    key=UPLOAD_ASSET_TOOL,
    name=UPLOAD_ASSET_TOOL,
    description=(
        "Create a new Asset resource. Assets are static files like HTML, CSS, "
        "images, or client-side JavaScript files that can be referenced by your "
        "Serverless Functions or served directly to clients. You must create a "
        "Service before creating Assets. After creating an Asset, you'll need to "
        "create Asset Versions to add the actual content."
    ),
    input_schema=_schema(
        {
            "serviceSid": "The SID of the Twilio Serverless Service where the asset will be uploaded",
            "assetSid": "The SID of the Asset to create a new version for",
            "path": 'The HTTP path used to invoke the asset (e.g., "/thanos")',
            "visibility": 'The visibility of the asset, typically "public" or "private"',
            "content": "The content of the Asset",
            "contentType": "The content type of the Asset being uploaded. This must match the actual content of the file.",
        }
    ),
)


async def upload_function(params: Dict[str, Any], gateway: HttpGateway) -> HttpResult:
    """Upload a new Function version.

    Args:
        params: Tool arguments, see ``upload_function_definition``
        gateway: Gateway used to send the upload

    Returns:
        The upload result
    """
    failure = _missing(params, upload_function_definition.input_schema.required)
    if failure:
        return failure

    url = (
        f"{TWILIO_SERVERLESS_UPLOAD_URL}/{params['serviceSid']}"
        f"/Functions/{params['functionSid']}/Versions"
    )
    payload = MultipartPayload(
        fields={"Path": str(params["path"]), "Visibility": str(params["visibility"])},
        files={
            "Content": (
                "function.js",
                str(params["content"]).encode("utf-8"),
                "application/javascript",
            )
        },
    )
    logger.debug(f"Uploading function version to {url}")
    return await gateway.upload(url, payload)


async def upload_asset(params: Dict[str, Any], gateway: HttpGateway) -> HttpResult:
    """Upload a new Asset version.

    Args:
        params: Tool arguments, see ``upload_asset_definition``
        gateway: Gateway used to send the upload

    Returns:
        The upload result
    """
    failure = _missing(params, upload_asset_definition.input_schema.required)
    if failure:
        return failure

    url = (
        f"{TWILIO_SERVERLESS_UPLOAD_URL}/{params['serviceSid']}"
        f"/Assets/{params['assetSid']}/Versions"
    )
    payload = MultipartPayload(
        fields={"Path": str(params["path"]), "Visibility": str(params["visibility"])},
        files={
            "Content": (
                "asset",
                str(params["content"]).encode("utf-8"),
                str(params["contentType"]),
            )
        },
    )
    logger.debug(f"Uploading asset version to {url}")
    return await gateway.upload(url, payload)


def includes_serverless(filters: Optional[ToolFilters]) -> bool:
    """Whether the filters ask for Serverless tools.

    No filters, or filters restricting neither services nor tags, include them.
    """
    if filters is None or (not filters.services and not filters.tags):
        return True
    return any("serverless" in service for service in filters.services) or any(
        "Serverless" in tag for tag in filters.tags
    )


def serverless_tools() -> ToolRegistry:
    """Return a registry holding the Serverless upload tools."""
    return ToolRegistry(
        [
            AdditionalTool(
                tool=upload_function_definition,
                api=UPLOAD_API,
                handler=upload_function,
                predicate=includes_serverless,
            ),
            AdditionalTool(
                tool=upload_asset_definition,
                api=UPLOAD_API,
                handler=upload_asset,
                predicate=includes_serverless,
            ),
        ]
    )
