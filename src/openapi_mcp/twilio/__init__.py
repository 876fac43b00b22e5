"""Twilio specialization of the OpenAPI MCP server."""

from .server import TwilioExtension, create_twilio_server
from .tools import serverless_tools
from .utils import is_valid_sid, tool_requires_account_sid

__all__ = [
    "TwilioExtension",
    "create_twilio_server",
    "is_valid_sid",
    "serverless_tools",
    "tool_requires_account_sid",
]
