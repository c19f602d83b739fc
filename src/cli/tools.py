"""
Tool Commands

List the Binance MCP tools and invoke them directly from the command line,
through the same dispatcher the MCP server uses.
Uses Click framework for clean, modern CLI interface.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import json
import logging

import click
from tabulate import tabulate

from mcp_server.tools import TOOL_OPERATIONS, TOOLS


logger = logging.getLogger(__name__)


@click.group()
def tools():
    """List and call Binance MCP tools"""


@tools.command("list")
@click.option("--category", help="Filter by category (market_data, trading, account, user_data_stream)")
def list_tools(category):
    """List available tools with their request mode and endpoint"""
    rows = []
    for tool in TOOLS:
        op = TOOL_OPERATIONS[tool.name]
        if category and op.category != category:
            continue
        rows.append([tool.name, op.mode.value, f"{op.method} {op.path}", tool.annotations.title])

    if not rows:
        click.secho(f"\nNo tools in category '{category}'\n", fg="yellow")
        return

    click.echo(f"\nBinance MCP tools ({len(rows)}):")
    click.echo(tabulate(rows, headers=["Tool", "Mode", "Endpoint", "Title"], tablefmt="psql", stralign="left"))
    click.echo()


@tools.command("call")
@click.argument("name")
@click.option("--args", "args_json", default="{}", help='Tool arguments as a JSON object, e.g. \'{"symbol": "BTCUSDT"}\'')
@click.pass_context
def call_tool(ctx, name, args_json):
    """Call a tool by NAME and print its result"""
    try:
        arguments = json.loads(args_json)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"Invalid JSON: {e}", param_hint="--args")
    if not isinstance(arguments, dict):
        raise click.BadParameter("Arguments must be a JSON object", param_hint="--args")

    dispatcher = ctx.obj["dispatcher"]
    response = dispatcher.call_tool(name, arguments)
    text = "\n".join(item.get("text", "") for item in response.content)

    if response.isError:
        click.secho(text, fg="red", err=True)
        ctx.exit(1)
    click.echo(text)
