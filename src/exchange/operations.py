"""
Binance Operation Descriptors

Each exchange operation is a fixed (method, path, mode) triple. Declaring the
request mode explicitly here, rather than inferring it from the facade method,
lets every descriptor be checked once at import time.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

from dataclasses import dataclass

from exchange.transport import RequestMode


# HTTP methods each mode may use
ALLOWED_METHODS: dict[RequestMode, tuple[str, ...]] = {
    RequestMode.PUBLIC: ("GET",),
    RequestMode.USER_STREAM: ("POST", "PUT", "DELETE"),
    RequestMode.SIGNED: ("GET", "POST", "DELETE"),
}


@dataclass(frozen=True)
class Operation:
    """Static descriptor of one Binance REST operation"""

    name: str
    method: str
    path: str
    mode: RequestMode
    category: str

    def __post_init__(self):
        if not isinstance(self.mode, RequestMode):
            raise TypeError(f"Operation '{self.name}' must declare a RequestMode, got {self.mode!r}")
        if self.method not in ALLOWED_METHODS[self.mode]:
            raise ValueError(
                f"Operation '{self.name}' uses {self.method}, not allowed for {self.mode.value} requests"
            )
        if not self.path.startswith("/"):
            raise ValueError(f"Operation '{self.name}' path must start with '/': {self.path}")


# ========== Market Data ==========
PING = Operation("ping", "GET", "/api/v3/ping", RequestMode.PUBLIC, "market_data")
SERVER_TIME = Operation("server_time", "GET", "/api/v3/time", RequestMode.PUBLIC, "market_data")
EXCHANGE_INFO = Operation("exchange_info", "GET", "/api/v3/exchangeInfo", RequestMode.PUBLIC, "market_data")
ORDER_BOOK = Operation("order_book", "GET", "/api/v3/depth", RequestMode.PUBLIC, "market_data")
RECENT_TRADES = Operation("recent_trades", "GET", "/api/v3/trades", RequestMode.PUBLIC, "market_data")
AGGREGATE_TRADES = Operation("aggregate_trades", "GET", "/api/v3/aggTrades", RequestMode.PUBLIC, "market_data")
KLINES = Operation("klines", "GET", "/api/v3/klines", RequestMode.PUBLIC, "market_data")
AVG_PRICE = Operation("avg_price", "GET", "/api/v3/avgPrice", RequestMode.PUBLIC, "market_data")
TICKER_24HR = Operation("ticker_24hr", "GET", "/api/v3/ticker/24hr", RequestMode.PUBLIC, "market_data")
TICKER_PRICE = Operation("ticker_price", "GET", "/api/v3/ticker/price", RequestMode.PUBLIC, "market_data")
BOOK_TICKER = Operation("book_ticker", "GET", "/api/v3/ticker/bookTicker", RequestMode.PUBLIC, "market_data")

# ========== Trading ==========
NEW_ORDER = Operation("new_order", "POST", "/api/v3/order", RequestMode.SIGNED, "trading")
TEST_ORDER = Operation("test_order", "POST", "/api/v3/order/test", RequestMode.SIGNED, "trading")
QUERY_ORDER = Operation("query_order", "GET", "/api/v3/order", RequestMode.SIGNED, "trading")
CANCEL_ORDER = Operation("cancel_order", "DELETE", "/api/v3/order", RequestMode.SIGNED, "trading")
CANCEL_ALL_ORDERS = Operation("cancel_all_orders", "DELETE", "/api/v3/openOrders", RequestMode.SIGNED, "trading")
OPEN_ORDERS = Operation("open_orders", "GET", "/api/v3/openOrders", RequestMode.SIGNED, "trading")
ALL_ORDERS = Operation("all_orders", "GET", "/api/v3/allOrders", RequestMode.SIGNED, "trading")

# ========== Account ==========
ACCOUNT_INFO = Operation("account_info", "GET", "/api/v3/account", RequestMode.SIGNED, "account")
MY_TRADES = Operation("my_trades", "GET", "/api/v3/myTrades", RequestMode.SIGNED, "account")

# ========== User Data Stream ==========
CREATE_LISTEN_KEY = Operation("create_listen_key", "POST", "/api/v3/userDataStream", RequestMode.USER_STREAM, "user_data_stream")
KEEPALIVE_LISTEN_KEY = Operation("keepalive_listen_key", "PUT", "/api/v3/userDataStream", RequestMode.USER_STREAM, "user_data_stream")
CLOSE_LISTEN_KEY = Operation("close_listen_key", "DELETE", "/api/v3/userDataStream", RequestMode.USER_STREAM, "user_data_stream")


OPERATIONS: dict[str, Operation] = {
    op.name: op
    for op in (
        PING, SERVER_TIME, EXCHANGE_INFO, ORDER_BOOK, RECENT_TRADES, AGGREGATE_TRADES,
        KLINES, AVG_PRICE, TICKER_24HR, TICKER_PRICE, BOOK_TICKER,
        NEW_ORDER, TEST_ORDER, QUERY_ORDER, CANCEL_ORDER, CANCEL_ALL_ORDERS, OPEN_ORDERS, ALL_ORDERS,
        ACCOUNT_INFO, MY_TRADES,
        CREATE_LISTEN_KEY, KEEPALIVE_LISTEN_KEY, CLOSE_LISTEN_KEY,
    )
}


def operations_by_category() -> dict[str, int]:
    """Count operations per category (used by the server-info resource)."""
    counts: dict[str, int] = {}
    for op in OPERATIONS.values():
        counts[op.category] = counts.get(op.category, 0) + 1
    return counts
