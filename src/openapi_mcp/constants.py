"""
Name: Constants and settings.
Description: Centralized location for constants and settings used throughout openapi-mcp.
This file contains default values, environment variable names, and other constants to maintain consistency.
"""


# Spec loading
SPEC_FILE_EXTENSIONS = (".yaml", ".yml", ".json")
DEFAULT_SPEC_DIR_ENV = "OPENAPI_MCP_SPEC_DIR"

# Tool compilation
SUPPORTED_METHODS = ("get", "delete", "post", "put")
TOOL_KEY_DELIMITER = "--"
DEFAULT_PARAMETER_TYPE = "string"

# Server settings
DEFAULT_SERVER_NAME = "openapi-mcp-server"
DEFAULT_SERVER_VERSION = "0.1.0"

# HTTP settings
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_CONTENT_TYPE = "application/json"
# Hosts that reject indexed array encoding in form bodies
DEFAULT_ARRAY_REPEAT_HOSTS = ("serverless.twilio.com",)
GENERIC_REQUEST_ERROR = "An error occurred while making the request"

# Twilio settings
TWILIO_SERVER_NAME = "twilio-server"
TWILIO_DEFAULT_SERVICE = "twilio_api_v2010"
TWILIO_ACCOUNT_SID_URI = "text://accountSid"
TWILIO_SERVERLESS_UPLOAD_URL = "https://serverless-upload.twilio.com/v1/Services"

# Credential settings
DEFAULT_CREDENTIALS_FILE = "~/.openapi_mcp/credentials.env"
ACCOUNT_SID_ENV = "TWILIO_ACCOUNT_SID"
API_KEY_ENV = "TWILIO_API_KEY"
API_SECRET_ENV = "TWILIO_API_SECRET"
