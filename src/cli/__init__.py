"""
CLI Module

Command-line interface for the Binance MCP server using Click.
Each command group is organized into its own module for maintainability.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

from cli.server import serve, server_time
from cli.tools import tools


__all__ = ["serve", "server_time", "tools"]
