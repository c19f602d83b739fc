"""
MCP (Model Context Protocol) Server Module

Exposes the Binance spot REST API as MCP tools over a FastAPI HTTP server
and a stdio JSON-RPC loop.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""
