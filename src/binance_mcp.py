#!/usr/bin/env python3
"""
Binance MCP CLI

Entry point for the Binance MCP server and its helper commands.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.

Usage:
    binance-mcp serve                 # stdio transport (desktop MCP clients)
    binance-mcp serve --http          # HTTP transport on $PORT (default 3000)
    binance-mcp tools list
    binance-mcp tools call bn_order_book --args '{"symbol": "BTCUSDT", "limit": 5}'
    binance-mcp time
"""

import logging

import click

import constants as const
import util
from cli.server import serve, server_time
from cli.tools import tools
from exchange.transport import Credentials
from mcp_server.dispatch import ToolDispatcher


logger = logging.getLogger(__name__)


@click.group()
@click.option("--log-level", default=None, help="Console log level (DEBUG, INFO, WARNING, ERROR)")
@click.pass_context
def cli(ctx, log_level):
    """
    Binance MCP Command Line Interface

    Serve Binance spot market data and trading tools over MCP, or call them directly.
    """
    util.setup_logger(name=None, level=log_level, console=True, log_file=const.API_LOG_FILE)

    ctx.ensure_object(dict)
    if "dispatcher" not in ctx.obj:
        credentials = Credentials(api_key=const.BINANCE_API_KEY, secret_key=const.BINANCE_SECRET_KEY)
        ctx.obj["dispatcher"] = ToolDispatcher(credentials)
        logger.info(f"Binance MCP CLI using {const.BINANCE_BASE_URL}, API key {util.mask_key(credentials.api_key)}")


cli.add_command(serve)
cli.add_command(server_time)
cli.add_command(tools)


if __name__ == "__main__":
    cli()
