"""
MCP stdio Transport

Newline-delimited JSON-RPC over stdin/stdout, for desktop MCP clients that
launch the server as a subprocess. Nothing but JSON-RPC responses may be
written to stdout; logging goes to stderr and the log file.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import json
import logging
import sys
from typing import IO

from mcp_server.jsonrpc import PARSE_ERROR, JsonRpcHandler, error_response
from mcp_server.server import MCPServer


logger = logging.getLogger(__name__)


def serve_stdio(server: MCPServer, stdin: IO[str] | None = None, stdout: IO[str] | None = None) -> int:
    """
    Serve MCP requests until stdin is closed.

    Args:
        server: MCPServer to expose
        stdin: Input stream (defaults to sys.stdin)
        stdout: Output stream (defaults to sys.stdout)

    Returns:
        Number of messages handled
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    handler = JsonRpcHandler(server)
    handled = 0

    logger.info(f"Binance MCP Server running on stdio ({len(server.tools)} tools)")

    for line in stdin:
        line = line.strip()
        if not line:
            continue

        try:
            payload = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid JSON on stdin: {e}")
            _write(stdout, error_response(None, PARSE_ERROR, "Parse error"))
            continue

        handled += 1
        response = handler.handle_payload(payload)
        if response is not None:
            _write(stdout, response)

    logger.info("stdin closed, stopping stdio server")
    return handled


def _write(stdout: IO[str], message) -> None:
    stdout.write(json.dumps(message) + "\n")
    stdout.flush()
