"""Helpers for Twilio SIDs."""

import re
from typing import Optional, Tuple

from ..openapi.models import ToolDefinition

ACCOUNT_SID_KEYS = ("AccountSid", "accountSid")
ACCOUNT_SID_PATTERN = re.compile(r"^AC[a-fA-F0-9]{32}$")


def is_valid_sid(sid: Optional[str], prefix: str) -> bool:
    """Check that ``sid`` is a 34 character SID starting with ``prefix``."""
    if not isinstance(sid, str):
        return False
    return re.match(rf"^{re.escape(prefix)}[A-Za-f0-9]{{32}}$", sid) is not None


def is_account_sid(value) -> bool:
    """Check that a value is a well-formed account SID."""
    return isinstance(value, str) and ACCOUNT_SID_PATTERN.match(value) is not None


def tool_requires_account_sid(tool: ToolDefinition) -> Tuple[bool, str]:
    """Return whether a tool takes an account SID, and the property name.

    ``AccountSid`` wins over ``accountSid`` when a tool declares both.
    """
    for key in ACCOUNT_SID_KEYS:
        if key in tool.input_schema.properties:
            return True, key
    return False, ""
