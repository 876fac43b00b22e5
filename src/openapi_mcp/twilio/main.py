"""
Name: Twilio command-line interface.
Description: Implements the twilio-mcp command. ``init`` and ``config`` store account credentials, ``start`` (the default) serves the Twilio APIs as MCP tools over stdio.
"""

import argparse
import getpass
import logging
import os
import re
import sys
from typing import List, Optional

import anyio
from pydantic import BaseModel, Field

from ..constants import DEFAULT_SERVER_VERSION, DEFAULT_SPEC_DIR_ENV, TWILIO_DEFAULT_SERVICE
from ..credentials import AccountCredentials, CredentialStore, EnvFileCredentialStore
from ..errors import OpenAPIMCPError
from ..utils import sanitize_args, setup_environment
from .server import create_twilio_server
from .utils import is_valid_sid

logger = logging.getLogger(__name__)

COMMANDS = ("init", "config", "start")
CREDENTIALS_PATTERN = re.compile(r"^([^/]+)/([^:]+):(.+)$")
DEFAULT_TWILIO_SPEC_DIR = os.path.join("twilio-oai", "spec", "yaml")


class TwilioArguments(BaseModel):
    """Parsed twilio-mcp arguments."""

    command: str = "start"
    services: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    account_sid: Optional[str] = None
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    api_path: Optional[str] = None
    credentials_file: Optional[str] = None
    debug: bool = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="twilio-mcp",
        description="Serve the Twilio APIs as MCP tools over stdio",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="start",
        help="init, config or start; or credentials as ACCOUNT_SID/API_KEY:API_SECRET",
    )
    parser.add_argument("-a", "--account-sid", "--accountSid", dest="account_sid")
    parser.add_argument("-k", "--api-key", "--apiKey", dest="api_key")
    parser.add_argument("-s", "--api-secret", "--apiSecret", dest="api_secret")
    parser.add_argument(
        "-e", "--services", type=str, default="", help="Comma-separated services to load"
    )
    parser.add_argument(
        "-t", "--tags", type=str, default="", help="Comma-separated operation tags to load"
    )
    parser.add_argument(
        "--api-path",
        "--apiPath",
        dest="api_path",
        help="Directory of the Twilio OpenAPI documents",
    )
    parser.add_argument("--credentials-file", type=str, help="Credentials file to use")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def parse_arguments(argv: Optional[List[str]] = None) -> TwilioArguments:
    """Parse and validate the command line.

    Raises:
        ValueError: If a SID is malformed or the command is unknown
    """
    args = build_parser().parse_args(argv)
    parsed = TwilioArguments(
        account_sid=args.account_sid,
        api_key=args.api_key,
        api_secret=args.api_secret,
        api_path=args.api_path,
        credentials_file=args.credentials_file,
        debug=args.debug,
    )

    if args.command in COMMANDS:
        parsed.command = args.command
    elif "/" in args.command:
        match = CREDENTIALS_PATTERN.match(args.command)
        has_flags = parsed.account_sid or parsed.api_key or parsed.api_secret
        if (
            match
            and not has_flags
            and is_valid_sid(match.group(1), "AC")
            and is_valid_sid(match.group(2), "SK")
        ):
            parsed.account_sid, parsed.api_key, parsed.api_secret = match.groups()
    else:
        raise ValueError(f"Unknown command: {args.command}")

    if parsed.account_sid and not is_valid_sid(parsed.account_sid, "AC"):
        raise ValueError("Invalid AccountSid")
    if parsed.api_key and not is_valid_sid(parsed.api_key, "SK"):
        raise ValueError("Invalid ApiKey")

    parsed.services = sanitize_args(args.services)
    parsed.tags = sanitize_args(args.tags)
    if not parsed.services and not parsed.tags:
        parsed.services = [TWILIO_DEFAULT_SERVICE]

    return parsed


def prompt_credentials(args: TwilioArguments) -> AccountCredentials:
    """Complete the credentials given on the command line interactively.

    Raises:
        ValueError: If a value is missing or malformed
    """
    account_sid = args.account_sid or input("Enter your Twilio account SID: ").strip()
    api_key = args.api_key or getpass.getpass("Enter your Twilio API key: ").strip()
    api_secret = args.api_secret or getpass.getpass("Enter your Twilio API secret: ").strip()

    if not account_sid or not api_key or not api_secret:
        raise ValueError("All fields are required")
    if not is_valid_sid(account_sid, "AC"):
        raise ValueError("Invalid AccountSid")
    if not is_valid_sid(api_key, "SK"):
        raise ValueError("Invalid ApiKey")

    return AccountCredentials(
        account_sid=account_sid, api_key=api_key, api_secret=api_secret
    )


def resolve_credentials(
    args: TwilioArguments, store: CredentialStore
) -> Optional[AccountCredentials]:
    """Return the credentials given on the command line, else the stored ones."""
    if args.account_sid and args.api_key and args.api_secret:
        return AccountCredentials(
            account_sid=args.account_sid,
            api_key=args.api_key,
            api_secret=args.api_secret,
        )
    return store.get_credentials()


def init_command(args: TwilioArguments, store: CredentialStore):
    """Store credentials for later runs."""
    credentials = prompt_credentials(args)
    store.set_credentials(
        credentials.account_sid, credentials.api_key, credentials.api_secret
    )
    logger.info("Credentials set")


def start_command(args: TwilioArguments, store: CredentialStore):
    """Serve the Twilio APIs over stdio."""
    credentials = resolve_credentials(args, store)
    if credentials is None:
        raise ValueError("Please provide credentials.")

    server = create_twilio_server(
        account_sid=credentials.account_sid,
        api_key=credentials.api_key,
        api_secret=credentials.api_secret,
        openapi_dir=(
            args.api_path or os.environ.get(DEFAULT_SPEC_DIR_ENV) or DEFAULT_TWILIO_SPEC_DIR
        ),
        services=args.services,
        tags=args.tags,
        version=DEFAULT_SERVER_VERSION,
    )
    logger.info("Twilio MCP Server running on stdio")
    anyio.run(server.run_stdio)


def main(argv: Optional[List[str]] = None):
    """Main entry point for the CLI."""
    try:
        args = parse_arguments(argv)
        setup_environment(args.debug)
        store = EnvFileCredentialStore(args.credentials_file)

        if args.command in ("init", "config"):
            init_command(args, store)
        else:
            start_command(args, store)
    except (OpenAPIMCPError, ValueError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
