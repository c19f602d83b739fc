"""
Binance Tool Catalog

Static metadata for the 23 Binance tools: name, description, JSON input schema,
and behavioral annotations. TOOL_OPERATIONS ties each tool to the exchange
operation it invokes.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

from typing import Any

from exchange import operations as ops
from exchange.operations import Operation
from mcp_server.models import Tool, ToolAnnotations, ToolInputSchema


# Shared property definitions
FIELDS = {"type": "string", "description": "Comma-separated list of fields to include in response"}
RECV_WINDOW = {"type": "integer", "description": "Request validity window in ms. Default: 5000, Max: 60000"}
START_TIME = {"type": "integer", "description": "Start time in milliseconds"}
END_TIME = {"type": "integer", "description": "End time in milliseconds"}
ORDER_TYPES = "LIMIT, MARKET, STOP_LOSS, STOP_LOSS_LIMIT, TAKE_PROFIT, TAKE_PROFIT_LIMIT, LIMIT_MAKER"


def symbol(description: str = "Trading pair symbol, e.g. BTCUSDT") -> dict[str, str]:
    return {"type": "string", "description": description}


def limit(description: str = "Number of results. Default: 500, Max: 1000") -> dict[str, str]:
    return {"type": "integer", "description": description}


def _tool(
    name: str,
    title: str,
    description: str,
    properties: dict[str, Any] | None = None,
    required: list[str] | None = None,
    read_only: bool = True,
    destructive: bool = False,
    idempotent: bool = True,
) -> Tool:
    props = dict(properties or {})
    props["_fields"] = FIELDS
    return Tool(
        name=name,
        description=description,
        inputSchema=ToolInputSchema(properties=props, required=required or []),
        annotations=ToolAnnotations(
            title=title,
            readOnlyHint=read_only,
            destructiveHint=destructive,
            idempotentHint=idempotent,
            openWorldHint=True,
        ),
    )


def _order_properties() -> dict[str, Any]:
    return {
        "symbol": symbol(),
        "side": {"type": "string", "description": "Order side: BUY or SELL"},
        "type": {"type": "string", "description": f"Order type: {ORDER_TYPES}"},
        "timeInForce": {
            "type": "string",
            "description": "Time in force: GTC (Good Till Canceled), IOC (Immediate Or Cancel), FOK (Fill Or Kill). Required for LIMIT orders.",
        },
        "quantity": {"type": "string", "description": "Order quantity (decimal string)"},
        "quoteOrderQty": {"type": "string", "description": "Quote order quantity for MARKET orders (spend exact quote amount)"},
        "price": {"type": "string", "description": "Order price (decimal string). Required for LIMIT orders."},
        "stopPrice": {"type": "string", "description": "Stop/trigger price for STOP_LOSS, STOP_LOSS_LIMIT, TAKE_PROFIT, TAKE_PROFIT_LIMIT"},
        "newClientOrderId": {"type": "string", "description": "Unique client order ID for tracking"},
        "recvWindow": RECV_WINDOW,
    }


TOOLS: list[Tool] = [
    # ========== Market Data ==========
    _tool(
        "bn_ping",
        "Ping",
        "Test connectivity to Binance API. Returns empty object if successful. Use to verify API is reachable.",
    ),
    _tool(
        "bn_server_time",
        "Get Server Time",
        "Get Binance server time (millisecond timestamp). Use to check connectivity and sync timestamps for signed requests.",
    ),
    _tool(
        "bn_exchange_info",
        "Get Exchange Info",
        "Get exchange information including trading rules, symbol list, filters (PRICE_FILTER, LOT_SIZE, MIN_NOTIONAL), and rate limits. Optionally filter by symbol.",
        {
            "symbol": symbol("Single symbol to query, e.g. BTCUSDT"),
            "symbols": {"type": "string", "description": 'Multiple symbols as JSON array string, e.g. ["BTCUSDT","ETHUSDT"]'},
        },
    ),
    _tool(
        "bn_order_book",
        "Get Order Book",
        "Get order book (bids and asks) for a symbol. Weight varies by limit: 5 (1-100), 25 (101-500), 50 (501-1000), 250 (1001-5000).",
        {"symbol": symbol("Trading pair symbol, e.g. BTCUSDT, ETHUSDT"), "limit": limit("Order book depth. Default: 100. Valid: 1-5000")},
        required=["symbol"],
    ),
    _tool(
        "bn_recent_trades",
        "Get Recent Trades",
        "Get recent trades for a symbol. Returns up to 1000 most recent trades with price, quantity, and time.",
        {"symbol": symbol(), "limit": limit()},
        required=["symbol"],
    ),
    _tool(
        "bn_aggregate_trades",
        "Get Aggregate Trades",
        "Get compressed/aggregate trades for a symbol. Trades that fill at the same time, price, and side are aggregated into a single entry.",
        {
            "symbol": symbol(),
            "fromId": {"type": "integer", "description": "Aggregate trade ID to fetch from (inclusive)"},
            "startTime": {"type": "integer", "description": "Start time in milliseconds (inclusive)"},
            "endTime": {"type": "integer", "description": "End time in milliseconds (inclusive)"},
            "limit": limit(),
        },
        required=["symbol"],
    ),
    _tool(
        "bn_klines",
        "Get Klines",
        "Get candlestick/kline data (OHLCV) for a symbol. Returns arrays of [openTime, open, high, low, close, volume, closeTime, quoteVolume, trades, takerBuyBase, takerBuyQuote].",
        {
            "symbol": symbol(),
            "interval": {"type": "string", "description": "Kline interval: 1s, 1m, 3m, 5m, 15m, 30m, 1h, 2h, 4h, 6h, 8h, 12h, 1d, 3d, 1w, 1M"},
            "startTime": START_TIME,
            "endTime": END_TIME,
            "limit": limit("Number of klines. Default: 500, Max: 1000"),
        },
        required=["symbol", "interval"],
    ),
    _tool(
        "bn_avg_price",
        "Get Average Price",
        "Get current average price for a symbol. Returns the weighted average price over the last 5 minutes.",
        {"symbol": symbol()},
        required=["symbol"],
    ),
    _tool(
        "bn_ticker_24hr",
        "Get 24hr Ticker",
        "Get 24-hour price change statistics. Weight: 2 (single symbol), 80 (all symbols). Includes price change, volume, high/low, and trade count.",
        {"symbol": symbol("Trading pair symbol (optional, omit for all symbols at higher weight)")},
    ),
    _tool(
        "bn_ticker_price",
        "Get Ticker Price",
        "Get latest price for a symbol or all symbols. Lightweight endpoint for quick price checks.",
        {"symbol": symbol("Trading pair symbol (optional, omit for all symbols)")},
    ),
    _tool(
        "bn_book_ticker",
        "Get Book Ticker",
        "Get best bid/ask price and quantity for a symbol or all symbols. Useful for spread analysis.",
        {"symbol": symbol("Trading pair symbol (optional, omit for all symbols)")},
    ),
    # ========== Trading ==========
    _tool(
        "bn_new_order",
        "Place New Order",
        f"Place a new order. WARNING: This uses REAL MONEY on Binance Global. Supports {ORDER_TYPES} order types. Use bn_test_order first to validate.",
        _order_properties(),
        required=["symbol", "side", "type"],
        read_only=False,
        destructive=True,
        idempotent=False,
    ),
    _tool(
        "bn_test_order",
        "Test Order",
        "Test new order creation (dry run). Validates all parameters without actually placing the order. No funds are used. Always test before placing real orders.",
        _order_properties(),
        required=["symbol", "side", "type"],
    ),
    _tool(
        "bn_query_order",
        "Query Order",
        "Query a specific order by orderId or origClientOrderId. Returns order status, filled quantity, and execution details.",
        {
            "symbol": symbol(),
            "orderId": {"type": "integer", "description": "Order ID (either orderId or origClientOrderId required)"},
            "origClientOrderId": {"type": "string", "description": "Client order ID (either orderId or origClientOrderId required)"},
            "recvWindow": RECV_WINDOW,
        },
        required=["symbol"],
    ),
    _tool(
        "bn_cancel_order",
        "Cancel Order",
        "Cancel an active order by orderId or origClientOrderId.",
        {
            "symbol": symbol(),
            "orderId": {"type": "integer", "description": "Order ID to cancel (either orderId or origClientOrderId required)"},
            "origClientOrderId": {"type": "string", "description": "Client order ID to cancel"},
            "recvWindow": RECV_WINDOW,
        },
        required=["symbol"],
        read_only=False,
        destructive=True,
    ),
    _tool(
        "bn_cancel_all_orders",
        "Cancel All Orders",
        "Cancel all open orders for a symbol. WARNING: This cancels ALL pending orders at once. Cannot be undone.",
        {"symbol": symbol(), "recvWindow": RECV_WINDOW},
        required=["symbol"],
        read_only=False,
        destructive=True,
    ),
    _tool(
        "bn_open_orders",
        "Get Open Orders",
        "Get all open orders for a symbol or all symbols. Weight: 3 (with symbol), 40 (without symbol).",
        {"symbol": symbol("Trading pair symbol (optional, omit for all symbols at higher weight)"), "recvWindow": RECV_WINDOW},
    ),
    _tool(
        "bn_all_orders",
        "Get All Orders",
        "Get all orders (active, canceled, filled) for a symbol. Supports time range and pagination via orderId.",
        {
            "symbol": symbol(),
            "orderId": {"type": "integer", "description": "Order ID to fetch from (pagination)"},
            "startTime": START_TIME,
            "endTime": END_TIME,
            "limit": limit(),
            "recvWindow": RECV_WINDOW,
        },
        required=["symbol"],
    ),
    # ========== Account ==========
    _tool(
        "bn_account_info",
        "Get Account Info",
        "Get account information including balances, commission rates, and trading permissions. Returns all asset balances (free + locked).",
        {"recvWindow": RECV_WINDOW},
    ),
    _tool(
        "bn_my_trades",
        "Get My Trades",
        "Get trade execution history for a specific symbol. Returns price, quantity, commission, and whether you were buyer/maker.",
        {
            "symbol": symbol(),
            "orderId": {"type": "integer", "description": "Filter by order ID"},
            "startTime": START_TIME,
            "endTime": END_TIME,
            "fromId": {"type": "integer", "description": "Trade ID to fetch from"},
            "limit": limit(),
            "recvWindow": RECV_WINDOW,
        },
        required=["symbol"],
    ),
    # ========== User Data Stream ==========
    _tool(
        "bn_create_listen_key",
        "Create Listen Key",
        "Create a listen key for user data stream (WebSocket). The key is valid for 60 minutes. Use keepalive to extend. Connects to wss://stream.binance.com:9443/ws/<listenKey>.",
        read_only=False,
        idempotent=False,
    ),
    _tool(
        "bn_keepalive_listen_key",
        "Keepalive Listen Key",
        "Keepalive a listen key to extend its validity by 60 minutes. Should be called periodically to prevent expiration.",
        {"listenKey": {"type": "string", "description": "Listen key to keep alive"}},
        required=["listenKey"],
        read_only=False,
    ),
    _tool(
        "bn_close_listen_key",
        "Close Listen Key",
        "Close/invalidate a listen key. The associated user data stream will be terminated.",
        {"listenKey": {"type": "string", "description": "Listen key to close"}},
        required=["listenKey"],
        read_only=False,
        destructive=True,
    ),
]


TOOL_OPERATIONS: dict[str, Operation] = {
    "bn_ping": ops.PING,
    "bn_server_time": ops.SERVER_TIME,
    "bn_exchange_info": ops.EXCHANGE_INFO,
    "bn_order_book": ops.ORDER_BOOK,
    "bn_recent_trades": ops.RECENT_TRADES,
    "bn_aggregate_trades": ops.AGGREGATE_TRADES,
    "bn_klines": ops.KLINES,
    "bn_avg_price": ops.AVG_PRICE,
    "bn_ticker_24hr": ops.TICKER_24HR,
    "bn_ticker_price": ops.TICKER_PRICE,
    "bn_book_ticker": ops.BOOK_TICKER,
    "bn_new_order": ops.NEW_ORDER,
    "bn_test_order": ops.TEST_ORDER,
    "bn_query_order": ops.QUERY_ORDER,
    "bn_cancel_order": ops.CANCEL_ORDER,
    "bn_cancel_all_orders": ops.CANCEL_ALL_ORDERS,
    "bn_open_orders": ops.OPEN_ORDERS,
    "bn_all_orders": ops.ALL_ORDERS,
    "bn_account_info": ops.ACCOUNT_INFO,
    "bn_my_trades": ops.MY_TRADES,
    "bn_create_listen_key": ops.CREATE_LISTEN_KEY,
    "bn_keepalive_listen_key": ops.KEEPALIVE_LISTEN_KEY,
    "bn_close_listen_key": ops.CLOSE_LISTEN_KEY,
}
