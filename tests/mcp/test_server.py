"""Unit tests for the MCP server module."""

import json
import tempfile
import unittest
from urllib.parse import parse_qsl

import mcp.types as types
from mcp.shared.memory import create_connected_server_and_client_session

from openapi_mcp.constants import GENERIC_REQUEST_ERROR
from openapi_mcp.errors import (
    CapabilityNotSupportedError,
    DownstreamRequestError,
    ToolNotFoundError,
    UnsupportedAuthorizationError,
)
from openapi_mcp.mcp.config import OpenAPIMCPServerConfiguration, ServerInfo
from openapi_mcp.mcp.extension import ServerExtension
from openapi_mcp.mcp.server import OpenAPIMCPServer
from openapi_mcp.openapi.http import HttpGateway
from openapi_mcp.openapi.models import (
    ApiDescriptor,
    HttpMethod,
    HttpSuccess,
    ToolDefinition,
)
from openapi_mcp.openapi.tools import ToolFilters
from support import ACCOUNT_SID, RecordingTransport, mock_client, sample_openapi_document, write_spec

CREATE_MESSAGE = "TwilioApiV2010--CreateMessage"
LIST_MESSAGE = "TwilioApiV2010--ListMessage"


class UppercaseExtension(ServerExtension):
    """Extension used to check that the hooks are called."""

    def __init__(self):
        self.extended = False

    def prepare_body(self, tool, api, body):
        return {key: value.upper() if isinstance(value, str) else value for key, value in body.items()}

    def prepare_response(self, result, response):
        response.content.append(types.TextContent(type="text", text="extra"))
        return response

    async def extend_capabilities(self, server):
        self.extended = True


class TestOpenAPIMCPServerConfiguration(unittest.TestCase):
    """Tests for the server configuration."""

    def test_defaults(self):
        config = OpenAPIMCPServerConfiguration(openapi_dir="specs")

        self.assertEqual(config.server.name, "openapi-mcp-server")
        self.assertEqual(config.filters, ToolFilters())
        self.assertIsNone(config.authorization)
        self.assertEqual(config.array_repeat_hosts, ["serverless.twilio.com"])


class TestOpenAPIMCPServer(unittest.IsolatedAsyncioTestCase):
    """Tests for the OpenAPIMCPServer class."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        write_spec(self.temp_dir.name, "twilio_api_v2010.yaml", sample_openapi_document())
        self.transport = RecordingTransport(json={"sid": "SM123"})

    def tearDown(self):
        self.temp_dir.cleanup()

    def make_server(self, capabilities=None, extension=None, filters=None):
        config = OpenAPIMCPServerConfiguration(
            server=ServerInfo(name="test-server", capabilities=capabilities or {}),
            openapi_dir=self.temp_dir.name,
            filters=filters or ToolFilters(),
        )
        gateway = HttpGateway(client=mock_client(self.transport))
        return OpenAPIMCPServer(config, extension=extension, gateway=gateway)

    def test_tools_capability_is_always_declared(self):
        server = self.make_server(capabilities={"resources": {}})
        self.assertTrue(server.has_capability("tools"))
        self.assertTrue(server.has_capability("resources"))
        self.assertFalse(server.has_capability("prompts"))

    def test_unsupported_authorization_fails_at_construction(self):
        config = OpenAPIMCPServerConfiguration(
            openapi_dir=self.temp_dir.name, authorization={"type": "Digest"}
        )
        with self.assertRaises(UnsupportedAuthorizationError):
            OpenAPIMCPServer(config)

    async def test_load_compiles_tools(self):
        extension = UppercaseExtension()
        server = self.make_server(extension=extension)

        await server.load()

        names = [tool.name for tool in server.list_tools()]
        self.assertIn(CREATE_MESSAGE, names)
        self.assertIn(LIST_MESSAGE, names)
        self.assertEqual(set(server.tools), set(server.apis))
        self.assertTrue(extension.extended)

    async def test_load_resets_resources_and_prompts(self):
        server = self.make_server(capabilities={"resources": {}, "prompts": {}})
        server.add_resource(
            types.Resource(uri="text://stale", name="Stale", mimeType="text/plain")
        )
        server.add_prompt(types.Prompt(name="stale"))

        await server.load()

        self.assertEqual(server.list_resources(), [])
        self.assertEqual(server.list_prompts(), [])

    async def test_load_applies_filters(self):
        server = self.make_server(filters=ToolFilters(tags=["Api20100401Account"]))
        await server.load()
        self.assertEqual(list(server.tools), ["TwilioApiV2010--ListAccount"])

    async def test_call_tool_sends_request(self):
        server = self.make_server()
        await server.load()

        result = await server.handle_call_tool(
            CREATE_MESSAGE, {"AccountSid": ACCOUNT_SID, "To": "+15551234567"}
        )

        self.assertIsInstance(result, types.CallToolResult)
        self.assertEqual(len(result.content), 1)
        self.assertEqual(result.content[0].text, json.dumps({"sid": "SM123"}, indent=2))

        request = self.transport.last_request
        self.assertEqual(request.method, "POST")
        self.assertEqual(
            str(request.url),
            f"https://api.twilio.com/2010-04-01/Accounts/{ACCOUNT_SID}/Messages.json",
        )
        self.assertEqual(
            dict(parse_qsl(request.content.decode())),
            {"AccountSid": ACCOUNT_SID, "To": "+15551234567"},
        )

    async def test_call_tool_trims_name(self):
        server = self.make_server()
        await server.load()

        await server.handle_call_tool(f"  {LIST_MESSAGE} ", {"AccountSid": ACCOUNT_SID})

        self.assertEqual(self.transport.last_request.method, "GET")

    async def test_unknown_tool(self):
        server = self.make_server()
        await server.load()

        with self.assertRaises(ToolNotFoundError) as context:
            await server.handle_call_tool("Nope--Nothing", {})
        self.assertEqual(str(context.exception), "Tool not found: Nope--Nothing")
        self.assertEqual(self.transport.requests, [])

    async def test_downstream_failure(self):
        self.transport.status_code = 400
        self.transport.json = None
        self.transport.text = '{"code": 21211, "message": "Invalid To"}'
        server = self.make_server()
        await server.load()

        with self.assertLogs("openapi_mcp.mcp.server", level="ERROR") as logs:
            with self.assertRaises(DownstreamRequestError) as context:
                await server.handle_call_tool(CREATE_MESSAGE, {"AccountSid": ACCOUNT_SID})

        self.assertEqual(str(context.exception), '{"code": 21211, "message": "Invalid To"}')
        self.assertEqual(context.exception.status_code, 400)
        self.assertIn(CREATE_MESSAGE, logs.output[0])

    async def test_unusable_path_argument(self):
        server = self.make_server()
        await server.load()

        with self.assertLogs("openapi_mcp.mcp.server", level="ERROR"):
            with self.assertRaises(DownstreamRequestError) as context:
                await server.handle_call_tool(LIST_MESSAGE, {"AccountSid": "AC\nx"})

        self.assertEqual(str(context.exception), GENERIC_REQUEST_ERROR)
        self.assertEqual(context.exception.status_code, 500)
        self.assertEqual(self.transport.requests, [])

    async def test_extension_hooks(self):
        server = self.make_server(extension=UppercaseExtension())
        await server.load()

        result = await server.handle_call_tool(
            CREATE_MESSAGE, {"AccountSid": ACCOUNT_SID.lower(), "To": "abc"}
        )

        self.assertEqual(result.content[-1].text, "extra")
        self.assertEqual(
            dict(parse_qsl(self.transport.last_request.content.decode()))["To"], "ABC"
        )

    async def test_custom_handler_is_used(self):
        server = self.make_server()
        await server.load()
        calls = []

        async def handler(body, gateway):
            calls.append((body, gateway))
            return HttpSuccess(status_code=201, data={"handled": True})

        tool = ToolDefinition(key="Custom--Tool", name="Custom--Tool", description="Custom")
        server.add_tool(
            tool, ApiDescriptor(method=HttpMethod.POST, path="fake"), handler
        )

        result = await server.handle_call_tool("Custom--Tool", {"a": 1})

        self.assertEqual(json.loads(result.content[0].text), {"handled": True})
        self.assertEqual(calls, [({"a": 1}, server.gateway)])
        self.assertEqual(self.transport.requests, [])

    async def test_resources_require_capability(self):
        server = self.make_server()
        with self.assertRaises(CapabilityNotSupportedError) as context:
            await server.handle_read_resource("text://thing")
        self.assertEqual(str(context.exception), "resources not supported")

        with self.assertRaises(CapabilityNotSupportedError):
            await server.handle_get_prompt("prompt")

    async def test_default_extension_cannot_read(self):
        server = self.make_server(capabilities={"resources": {}, "prompts": {}})
        with self.assertRaises(NotImplementedError):
            await server.handle_read_resource("text://thing")
        with self.assertRaises(NotImplementedError):
            await server.handle_get_prompt("prompt")

    def test_handlers_follow_capabilities(self):
        server = self.make_server()
        server.setup_handlers()

        self.assertIn(types.ListToolsRequest, server.server.request_handlers)
        self.assertIn(types.CallToolRequest, server.server.request_handlers)
        self.assertNotIn(types.ListResourcesRequest, server.server.request_handlers)
        self.assertNotIn(types.ListPromptsRequest, server.server.request_handlers)

        full = self.make_server(capabilities={"resources": {}, "prompts": {}})
        full.setup_handlers()
        self.assertIn(types.ReadResourceRequest, full.server.request_handlers)
        self.assertIn(types.GetPromptRequest, full.server.request_handlers)

    async def test_protocol_round_trip(self):
        server = self.make_server()
        await server.load()
        server.setup_handlers()

        async with create_connected_server_and_client_session(server.server) as client:
            listed = await client.list_tools()
            self.assertIn(CREATE_MESSAGE, [tool.name for tool in listed.tools])

            result = await client.call_tool(LIST_MESSAGE, {"AccountSid": ACCOUNT_SID})
            self.assertFalse(result.isError)
            self.assertEqual(json.loads(result.content[0].text), {"sid": "SM123"})

            missing = await client.call_tool("Nope--Nothing", {})
            self.assertTrue(missing.isError)
            self.assertIn("Tool not found", missing.content[0].text)


if __name__ == "__main__":
    unittest.main()
