#!/usr/bin/env python3
"""
Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import os

from dotenv import load_dotenv


load_dotenv()

# App Version
VERSION = "1.0.0"
SERVER_NAME = "binance-mcp"
PROTOCOL_VERSION = "2024-11-05"

# Logging
LOG_FILE = os.getenv("LOG_FILE", "binance-mcp-cli.log")
API_LOG_FILE = os.getenv("API_LOG_FILE", "binance-mcp.log")
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5

# BINANCE
BINANCE_API_KEY = os.getenv("BINANCE_API_KEY")
BINANCE_SECRET_KEY = os.getenv("BINANCE_SECRET_KEY")
BINANCE_API_KEY_HEADER = "X-MBX-APIKEY"
BINANCE_MAINNET_URL = "https://api.binance.com"
BINANCE_TESTNET_URL = "https://testnet.binance.vision"
BINANCE_TESTNET = os.getenv("BINANCE_TESTNET", "false").lower() in ("true", "1", "yes")
BINANCE_BASE_URL = os.getenv(
    "BINANCE_BASE_URL", BINANCE_TESTNET_URL if BINANCE_TESTNET else BINANCE_MAINNET_URL
)
DEFAULT_RECV_WINDOW = int(os.getenv("BINANCE_RECV_WINDOW", "5000"))
REQUEST_TIMEOUT = float(os.getenv("BINANCE_REQUEST_TIMEOUT", "10"))

# Tool argument keys that never reach the exchange
FIELDS_ARGUMENT = "_fields"
CREDENTIAL_ARGUMENTS = ("BINANCE_API_KEY", "BINANCE_SECRET_KEY")

# HTTP SERVER
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
SESSION_HEADER = "Mcp-Session-Id"
