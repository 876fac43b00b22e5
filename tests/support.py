"""Shared test data and helpers."""

import json
import os
from typing import Any, Dict, Optional

import httpx
import yaml

ACCOUNT_SID = "AC" + "a" * 32
OTHER_ACCOUNT_SID = "AC" + "b" * 32
API_KEY = "SK" + "c" * 32
API_SECRET = "secret"


def sample_openapi_document() -> Dict[str, Any]:
    """Return a small Twilio-like OpenAPI document."""
    account_sid = {
        "name": "AccountSid",
        "in": "path",
        "required": True,
        "description": "The SID of the Account",
        "schema": {"type": "string"},
    }
    return {
        "openapi": "3.0.1",
        "info": {
            "title": "Twilio - Api",
            "description": "This is the public Twilio REST API.",
            "version": "1.0.0",
        },
        "servers": [{"url": "https://api.twilio.com"}],
        "paths": {
            "/2010-04-01/Accounts/{AccountSid}/Messages.json": {
                "servers": [{"url": "https://api.twilio.com"}],
                "get": {
                    "operationId": "ListMessage",
                    "tags": ["Api20100401Message"],
                    "parameters": [
                        account_sid,
                        {"name": "PageSize", "in": "query", "schema": {"type": "integer"}},
                    ],
                },
                "post": {
                    "operationId": "CreateMessage",
                    "description": "Send a message",
                    "tags": ["Api20100401Message"],
                    "parameters": [account_sid],
                    "requestBody": {
                        "content": {
                            "application/x-www-form-urlencoded": {
                                "schema": {
                                    "$ref": "#/components/schemas/CreateMessageRequest"
                                }
                            }
                        }
                    },
                },
            },
            "/2010-04-01/Accounts/{AccountSid}/Messages/{Sid}.json": {
                "delete": {
                    "operationId": "DeleteMessage",
                    "tags": ["Api20100401Message"],
                    "parameters": [
                        account_sid,
                        {"name": "Sid", "in": "path", "required": True},
                    ],
                },
                "patch": {"operationId": "PatchMessage"},
            },
            "/2010-04-01/Accounts.json": {
                "get": {
                    "operationId": "ListAccount",
                    "tags": ["Api20100401Account"],
                },
            },
        },
        "components": {
            "schemas": {
                "CreateMessageRequest": {
                    "type": "object",
                    "required": ["To", "Missing"],
                    "properties": {
                        "To": {"type": "string", "description": "The destination"},
                        "Body": {"type": "string"},
                        "MediaUrl": {
                            "type": "array",
                            "items": {"type": "string", "format": "uri"},
                        },
                    },
                }
            }
        },
    }


def write_spec(directory, relative_path: str, document: Dict[str, Any]) -> str:
    """Write a document as YAML or JSON depending on the extension."""
    path = os.path.join(str(directory), relative_path)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        if path.endswith(".json"):
            json.dump(document, f)
        else:
            yaml.safe_dump(document, f)
    return path


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps every request it receives.

    A fresh response is built for each request from ``status_code`` and one of
    ``json``, ``text`` or nothing (empty body).
    """

    def __init__(
        self,
        status_code: int = 200,
        json: Optional[Any] = None,
        text: Optional[str] = None,
        error: Optional[Exception] = None,
    ):
        self.requests = []
        self.status_code = status_code
        self.json = json
        self.text = text
        self.error = error
        super().__init__(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        if self.json is not None:
            return httpx.Response(self.status_code, json=self.json)
        return httpx.Response(self.status_code)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


def mock_client(transport: httpx.MockTransport) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=transport)
