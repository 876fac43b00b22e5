"""
Name: Credential store.
Description: Persists the Twilio account SID, API key and API secret between runs. Credentials live in a dotenv file under the user's home directory; environment variables take priority over the stored values.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

from dotenv import dotenv_values, set_key
from pydantic import BaseModel

from .constants import (
    ACCOUNT_SID_ENV,
    API_KEY_ENV,
    API_SECRET_ENV,
    DEFAULT_CREDENTIALS_FILE,
)

logger = logging.getLogger(__name__)

CREDENTIALS_FILE_ENV = "OPENAPI_MCP_CREDENTIALS_FILE"


class AccountCredentials(BaseModel):
    """Twilio account credentials."""

    account_sid: str
    api_key: str
    api_secret: str


class CredentialStore(ABC):
    """Where credentials are kept between runs."""

    @abstractmethod
    def get_credentials(self) -> Optional[AccountCredentials]:
        """Return the stored credentials, or None if any part is missing."""

    @abstractmethod
    def set_credentials(self, account_sid: str, api_key: str, api_secret: str):
        """Store a set of credentials."""


class EnvFileCredentialStore(CredentialStore):
    """Credential store backed by a dotenv file."""

    def __init__(self, path: Optional[str] = None):
        self.path = os.path.expanduser(
            path or os.environ.get(CREDENTIALS_FILE_ENV) or DEFAULT_CREDENTIALS_FILE
        )

    def get_credentials(self) -> Optional[AccountCredentials]:
        stored = dotenv_values(self.path) if os.path.exists(self.path) else {}

        values = {
            key: os.environ.get(key) or stored.get(key)
            for key in (ACCOUNT_SID_ENV, API_KEY_ENV, API_SECRET_ENV)
        }
        if not all(values.values()):
            logger.debug(f"No complete credentials found in {self.path}")
            return None

        return AccountCredentials(
            account_sid=values[ACCOUNT_SID_ENV],
            api_key=values[API_KEY_ENV],
            api_secret=values[API_SECRET_ENV],
        )

    def set_credentials(self, account_sid: str, api_key: str, api_secret: str):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        if not os.path.exists(self.path):
            with open(self.path, "w", encoding="utf-8"):
                pass

        set_key(self.path, ACCOUNT_SID_ENV, account_sid)
        set_key(self.path, API_KEY_ENV, api_key)
        set_key(self.path, API_SECRET_ENV, api_secret)
        os.chmod(self.path, 0o600)
        logger.info(f"Credentials saved to {self.path}")
