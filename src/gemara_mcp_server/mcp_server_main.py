# Copyright contributors to the Gemara MCP Server project
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
MCP Server Main Module

This module serves as the main entry point for the Gemara Model-Context-Protocol (MCP)
server. It handles server initialization, tool and resource registration, and
closing the shared HTTP client on shutdown.
"""

# Standard library imports
import argparse
import logging
import os
import sys
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Optional

# Third-party imports
from mcp.server.fastmcp import FastMCP

# Use absolute imports
from gemara_mcp_server import __version__
from gemara_mcp_server.cache import LexiconCache, LexiconService
from gemara_mcp_server.client import HTTPClient, SchemaRegistry
from gemara_mcp_server.tools.lexicon import register_lexicon_tools
from gemara_mcp_server.tools.validation import register_validation_tools
from gemara_mcp_server.utils.constants import (
    DEFAULT_REQUEST_TIMEOUT,
    GEMARA_MODULE_PATH,
    LEXICON_URL,
)

# Configure logging with dynamic level from environment variable
log_level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
log_level = getattr(logging, log_level_name, logging.INFO)

logging.basicConfig(
    level=log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Log the configured level for debugging
logger.debug("Logging configured at %s level", log_level_name)

SERVER_NAME = "gemara-mcp"

# Global MCP instance - will be initialized by entry point
mcp = None


class ServerMode(str, Enum):
    """Enumeration of available MCP server modes."""

    ADVISORY = "advisory"

    @property
    def description(self) -> str:
        return _MODE_DESCRIPTIONS[self]


_MODE_DESCRIPTIONS = {
    ServerMode.ADVISORY: "Advisory mode: Provides information about Gemara artifacts "
    "in the workspace (read-only)",
}


def get_version() -> str:
    return __version__


def parse_ssl_flag(value, default="true"):
    """
    Parse SSL flag which can be either a boolean or a path to a certificate.

    Args:
        value: The SSL flag value from environment variable
        default: Default value if not provided

    Returns:
        bool or str: True/False for boolean values, or the path string for certificates
    """
    if value is None:
        value = default

    # If it's a string representation of a boolean
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    # Otherwise it's a path to a certificate or other value
    return value


def initialize_http_client() -> HTTPClient:
    """
    Initialize the HTTP client shared by the lexicon and schema registry.

    Returns:
        HTTPClient: The initialized HTTP client instance
    """
    ssl_enabled = parse_ssl_flag(os.environ.get("SSL_ENABLED"), "true")
    timeout = float(os.environ.get("REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT)))

    if timeout <= 0:
        raise ValueError("REQUEST_TIMEOUT must be a positive number of seconds")

    return HTTPClient(ssl_enabled=ssl_enabled, timeout=timeout)


async def shutdown_client(http_client: HTTPClient) -> None:
    """
    Properly close the HTTP client's aiohttp session.

    Args:
        http_client: The HTTP client to close
    """
    logger.info("No open client sessions left, closing HTTP client")
    await http_client.close()


def _make_lifespan(http_client: HTTPClient):
    """
    Build a FastMCP lifespan sharing ``http_client`` across client sessions.

    FastMCP enters the lifespan once per client session, and the SSE and
    streamable HTTP transports keep several sessions open at once. The client
    is closed only when the last open session ends; it reopens its aiohttp
    session on the next request.
    """
    open_sessions = 0

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[None]:
        nonlocal open_sessions
        open_sessions += 1
        try:
            yield
        finally:
            open_sessions -= 1
            if open_sessions == 0:
                await shutdown_client(http_client)

    return lifespan


def _initialize_mcp_server(
    server_name: str, server_mode: ServerMode, http_client: Optional[HTTPClient] = None
) -> FastMCP:
    """
    Initialize the global MCP server instance.

    This function should be called once at the start of each entry point
    before any tool registration occurs.

    Args:
        server_name: The name for the MCP server instance
        server_mode: The mode whose description becomes the server instructions
        http_client: Client closed when the last client session ends

    Returns:
        FastMCP: The initialized MCP server instance
    """
    global mcp
    if mcp is None:
        lifespan = _make_lifespan(http_client) if http_client is not None else None
        mcp = FastMCP(
            server_name,
            instructions=server_mode.description,
            lifespan=lifespan,
        )
        logger.info("Initialized MCP server: %s (%s)", server_name, server_mode.value)
    return mcp


def register_server_tools(
    mcp_server: FastMCP,
    lexicon_service: LexiconService,
    schema_registry: SchemaRegistry,
    server_mode: ServerMode,
) -> None:
    """
    Register tools and resources based on the server mode.

    Args:
        mcp_server: The MCP server to register on
        lexicon_service: Service serving the cached lexicon
        schema_registry: Registry providing schema definitions for validation
        server_mode: The mode of the server (ServerMode enum)
    """
    logger.info("Registering tools for %s server", server_mode.value)

    if server_mode == ServerMode.ADVISORY:
        # Lexicon tool and resources - provide information about Gemara terms
        register_lexicon_tools(mcp_server, lexicon_service)
        # Validation tool - validates artifacts without modifying them
        register_validation_tools(mcp_server, schema_registry)
        logger.info("Advisory tools registered")

    else:
        raise ValueError(f"Unknown server mode: {server_mode}")


def _run_server(server_mode: ServerMode) -> None:
    """
    Common server initialization and run logic.

    Args:
        server_mode: The mode to run the server in (ServerMode enum)
    """
    logger.info("Starting %s MCP Server %s", SERVER_NAME, get_version())

    http_client = initialize_http_client()
    logger.info("HTTP client initialized successfully")

    _initialize_mcp_server(SERVER_NAME, server_mode, http_client)
    assert mcp is not None, "MCP server failed to initialize"

    lexicon_service = LexiconService(
        http_client,
        cache=LexiconCache(),
        source_url=os.environ.get("LEXICON_URL", LEXICON_URL),
    )
    schema_registry = SchemaRegistry(
        http_client,
        module_path=os.environ.get("GEMARA_SCHEMA_MODULE", GEMARA_MODULE_PATH),
        schema_url=os.environ.get("GEMARA_SCHEMA_URL") or None,
    )

    register_server_tools(mcp, lexicon_service, schema_registry, server_mode)

    transport = os.environ.get("MCP_TRANSPORT", "stdio")
    logger.info("Starting %s server on %s - Press Ctrl+C to exit", SERVER_NAME, transport)
    try:
        mcp.run(transport=transport)
    except KeyboardInterrupt:
        logger.info("Server shut down gracefully")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME,
        description="Gemara MCP Server",
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("serve", help="Start the Gemara MCP server")
    subparsers.add_parser("version", help="Print version information")
    return parser


def main(argv=None) -> int:
    """
    Entry point for the gemara-mcp command.
    Runs the server when no command is given.
    """
    args = build_parser().parse_args(argv)

    if args.command == "version":
        print(f"Gemara MCP Server {get_version()}")
        return 0

    try:
        _run_server(ServerMode.ADVISORY)
    except ValueError as e:
        logger.error("Failed to start server: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
