"""
Server Commands

Start the MCP server on stdio (default, for desktop MCP clients) or HTTP.
Also provides a clock-skew check against the exchange.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import logging
import time

import click

import constants as const
from exchange.client import BinanceClient
from exchange.errors import BinanceError
from mcp_server import binance_api
from mcp_server.server import MCPServer
from mcp_server.stdio import serve_stdio


logger = logging.getLogger(__name__)


@click.command("serve")
@click.option("--http", "use_http", is_flag=True, help="Serve over HTTP instead of stdio")
@click.option("--host", default=const.HOST, show_default=True, help="HTTP bind address")
@click.option("--port", default=const.PORT, show_default=True, type=int, help="HTTP port")
@click.pass_context
def serve(ctx, use_http, host, port):
    """Run the Binance MCP server"""
    if use_http:
        binance_api.run(host=host, port=port)
        return

    server = MCPServer(dispatcher=ctx.obj["dispatcher"])
    try:
        serve_stdio(server)
    except KeyboardInterrupt:
        logger.info("stdio server interrupted")
    finally:
        server.dispatcher.cache.clear()


@click.command("time")
def server_time():
    """Show exchange server time and local clock skew"""
    client = BinanceClient()
    try:
        before = int(time.time() * 1000)
        data = client.server_time()
        after = int(time.time() * 1000)
    except BinanceError as e:
        logger.error(f"Server time request failed: {e}")
        click.secho(f"\n✗ {e}\n", fg="red", err=True)
        raise SystemExit(1)
    finally:
        client.close()

    server_ms = int(data["serverTime"])
    local_ms = (before + after) // 2
    skew = local_ms - server_ms

    click.echo(f"\nServer time: {server_ms}")
    click.echo(f"Local time:  {local_ms}")
    colour = "green" if abs(skew) < const.DEFAULT_RECV_WINDOW else "red"
    click.secho(f"Skew:        {skew:+d} ms (recvWindow {const.DEFAULT_RECV_WINDOW} ms)\n", fg=colour)
