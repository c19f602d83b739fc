"""
MCP Server Core

Holds the registered tools, resources, and prompts and executes them. Both the
FastAPI app and the stdio loop wrap a single MCPServer instance.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import json
import logging
from typing import Any

import constants as const
from exchange.operations import operations_by_category
from exchange.transport import Credentials
from mcp_server.dispatch import ToolDispatcher
from mcp_server.models import (
    Prompt,
    PromptResponse,
    Resource,
    ResourceResponse,
    Tool,
    ToolCallResponse,
)
from mcp_server.tools import TOOLS


logger = logging.getLogger(__name__)

SERVER_INFO_URI = "binance://server-info"


class NotFoundError(LookupError):
    """Unknown resource URI or prompt name"""


MARKET_DATA_PROMPT = """You are a Binance market data analyst. Help me fetch and analyze crypto market data from the world's largest exchange.

Available market tools (11, all public, no API key needed):
1. **Connectivity**: bn_ping to test API reachability
2. **Server time**: bn_server_time for timestamp sync
3. **Exchange info**: bn_exchange_info for trading rules and filters
4. **Price check**: bn_ticker_price for current price (single or all symbols)
5. **Average price**: bn_avg_price for 5-minute weighted average
6. **24hr stats**: bn_ticker_24hr for price change, volume, high/low
7. **Candlesticks**: bn_klines for OHLCV data (1s to 1M intervals)
8. **Order book**: bn_order_book for bid/ask depth (up to 5000 levels)
9. **Recent trades**: bn_recent_trades for latest executed trades
10. **Aggregate trades**: bn_aggregate_trades for compressed trade data
11. **Book ticker**: bn_book_ticker for best bid/ask

Tips:
- Symbol format: BTCUSDT, ETHUSDT, BNBBTC (uppercase, no separator)
- Kline intervals: 1s, 1m, 3m, 5m, 15m, 30m, 1h, 2h, 4h, 6h, 8h, 12h, 1d, 3d, 1w, 1M
- All market data endpoints are public (no API key needed)
- Use bn_exchange_info to check available symbols and trading rules"""

TRADING_PROMPT = """You are a Binance trading assistant. Help me manage orders safely on the world's largest crypto exchange.

WARNING: Trading operations use REAL MONEY. Always use bn_test_order first!

Available trading tools:
1. **Test order**: bn_test_order (DRY RUN, validates without executing)
2. **Place order**: bn_new_order (LIMIT, MARKET, STOP_LOSS_LIMIT, etc.)
3. **Check order**: bn_query_order by orderId or clientOrderId
4. **Cancel order**: bn_cancel_order (single) or bn_cancel_all_orders (all for symbol)
5. **Open orders**: bn_open_orders to see pending orders
6. **All orders**: bn_all_orders for full history
7. **Account**: bn_account_info for balances and permissions
8. **Trade history**: bn_my_trades for executed trades

Order types:
- LIMIT: price + quantity + timeInForce (GTC/IOC/FOK)
- MARKET: quantity OR quoteOrderQty
- STOP_LOSS_LIMIT: price + quantity + stopPrice + timeInForce
- TAKE_PROFIT_LIMIT: price + quantity + stopPrice + timeInForce

Best practices:
1. Always bn_test_order first to validate parameters
2. Check bn_account_info for sufficient balance
3. Check bn_exchange_info for symbol filters (min notional, lot size)
4. Verify order with bn_query_order after placement
5. Use newClientOrderId for order tracking"""


class MCPServer:
    """Core MCP Server implementation"""

    def __init__(self, credentials: Credentials | None = None, dispatcher: ToolDispatcher | None = None):
        logger.info("Initializing MCP Server...")

        self.tools: dict[str, Tool] = {}
        self.resources: dict[str, Resource] = {}
        self.prompts: dict[str, Prompt] = {}

        self.dispatcher = dispatcher if dispatcher is not None else ToolDispatcher(credentials)

        self._initialize_defaults()
        logger.info(
            f"MCP Server initialized with {len(self.tools)} tools, {len(self.resources)} resources, {len(self.prompts)} prompts"
        )

    @property
    def configured(self) -> bool:
        return self.dispatcher.credentials.can_sign

    def _initialize_defaults(self):
        """Initialize default tools, resources, and prompts"""
        for tool in TOOLS:
            self.register_tool(tool)

        self.register_resource(
            Resource(
                uri=SERVER_INFO_URI,
                name="server-info",
                description="Connection status and available tools for this Binance MCP server",
                mimeType="application/json",
            )
        )

        self.register_prompt(
            Prompt(name="market-data-analysis", description="Guide for fetching and analyzing Binance market data")
        )
        self.register_prompt(
            Prompt(name="trading-guide", description="Guide for placing and managing orders on Binance")
        )

    def register_tool(self, tool: Tool):
        """Register a new tool"""
        self.tools[tool.name] = tool

    def register_resource(self, resource: Resource):
        """Register a new resource"""
        self.resources[resource.uri] = resource

    def register_prompt(self, prompt: Prompt):
        """Register a new prompt"""
        self.prompts[prompt.name] = prompt

    def execute_tool(
        self, name: str, arguments: dict[str, Any] | None = None, credentials: Credentials | None = None
    ) -> ToolCallResponse:
        """Execute a tool by name"""
        return self.dispatcher.call_tool(name, arguments, session_credentials=credentials)

    def server_info(self) -> dict[str, Any]:
        return {
            "name": const.SERVER_NAME,
            "version": const.VERSION,
            "connected": self.configured,
            "tools_available": len(self.tools),
            "tool_categories": operations_by_category(),
            "base_url": const.BINANCE_BASE_URL,
            "testnet": const.BINANCE_TESTNET,
        }

    def get_resource(self, uri: str) -> ResourceResponse:
        """Retrieve a resource by URI"""
        if uri not in self.resources:
            raise NotFoundError(f"Resource '{uri}' not found")

        return ResourceResponse(
            contents=[
                {"uri": uri, "mimeType": "application/json", "text": json.dumps(self.server_info(), indent=2)}
            ]
        )

    def execute_prompt(self, name: str, arguments: dict[str, Any] | None = None) -> PromptResponse:
        """Execute a prompt by name"""
        if name not in self.prompts:
            raise NotFoundError(f"Prompt '{name}' not found")

        prompt_text = MARKET_DATA_PROMPT if name == "market-data-analysis" else TRADING_PROMPT
        return PromptResponse(
            description=self.prompts[name].description,
            messages=[{"role": "user", "content": {"type": "text", "text": prompt_text}}],
        )
