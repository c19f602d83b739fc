"""
Binance exchange access.

This package contains the signed-request subsystem for the Binance spot REST
API: query canonicalization, HMAC signing, the three request modes of the
transport, and the operation facade used by the MCP tool dispatcher.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""
