"""
Name: Command-line interface.
Description: Implements the openapi-mcp command, which serves every operation of a directory of OpenAPI documents as MCP tools over stdio.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

import anyio

from .constants import DEFAULT_SERVER_NAME, DEFAULT_SERVER_VERSION, DEFAULT_SPEC_DIR_ENV
from .errors import OpenAPIMCPError
from .mcp.config import OpenAPIMCPServerConfiguration, ServerInfo
from .mcp.server import OpenAPIMCPServer
from .openapi.auth import BasicAuth, parse_authorization
from .openapi.tools import ToolFilters
from .utils import sanitize_args, setup_environment

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openapi-mcp",
        description="Serve OpenAPI operations as MCP tools over stdio",
    )
    parser.add_argument(
        "-a",
        "--api-path",
        "--apiPath",
        dest="api_path",
        type=str,
        help=f"Directory of OpenAPI documents (default: ${DEFAULT_SPEC_DIR_ENV})",
    )
    parser.add_argument(
        "-s", "--services", type=str, default="", help="Comma-separated services to load"
    )
    parser.add_argument(
        "-t", "--tags", type=str, default="", help="Comma-separated operation tags to load"
    )
    parser.add_argument(
        "--authorization",
        type=str,
        help="Basic/username:password, Bearer/token or ApiKey/header:value",
    )
    parser.add_argument("-u", "--username", type=str, help="Basic auth username")
    parser.add_argument("-p", "--password", type=str, help="Basic auth password")
    parser.add_argument("--name", type=str, default=DEFAULT_SERVER_NAME, help="Server name")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def build_configuration(args: argparse.Namespace) -> OpenAPIMCPServerConfiguration:
    """Turn parsed arguments into a server configuration.

    Raises:
        ValueError: If the api path is missing or the authorization is malformed
        UnsupportedAuthorizationError: If the authorization type is unknown
    """
    api_path = args.api_path or os.environ.get(DEFAULT_SPEC_DIR_ENV)
    if not api_path:
        raise ValueError("apiPath is required")

    authorization = None
    if args.authorization:
        authorization = parse_authorization(args.authorization)
    elif args.username and args.password:
        authorization = BasicAuth(username=args.username, password=args.password)

    return OpenAPIMCPServerConfiguration(
        server=ServerInfo(name=args.name, version=DEFAULT_SERVER_VERSION),
        openapi_dir=api_path,
        filters=ToolFilters(
            services=sanitize_args(args.services),
            tags=sanitize_args(args.tags),
        ),
        authorization=authorization,
    )


def main(argv: Optional[List[str]] = None):
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)
    setup_environment(args.debug)

    try:
        server = OpenAPIMCPServer(build_configuration(args))
        logger.info(f"{args.name} running on stdio")
        anyio.run(server.run_stdio)
    except (OpenAPIMCPError, ValueError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
