"""
Binance Operation Facade

One method per Binance spot operation. Methods forward the caller's parameters
unchanged; required fields, numeric ranges, and symbol existence are validated
by the exchange itself. Prices and quantities should be passed as decimal
strings so they reach the exchange exactly as written.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import logging
from typing import Any

from exchange import operations as ops
from exchange.operations import Operation
from exchange.transport import BinanceTransport, Credentials


logger = logging.getLogger(__name__)

Params = dict[str, Any]


class BinanceClient:
    """Binance spot REST client built on BinanceTransport."""

    def __init__(self, credentials: Credentials | None = None, transport: BinanceTransport | None = None):
        """
        Initialize client.

        Args:
            credentials: API key pair (ignored when a transport is given)
            transport: Pre-built transport, mainly for tests
        """
        self.transport = transport or BinanceTransport(credentials)

    @property
    def credentials(self) -> Credentials:
        return self.transport.credentials

    def execute(self, operation: Operation, params: Params | None = None) -> Any:
        """Run one operation through the transport in its declared mode."""
        logger.debug(f"Executing {operation.name} ({operation.mode.value} {operation.method} {operation.path})")
        return self.transport.request(operation.mode, operation.method, operation.path, params or None)

    def close(self) -> None:
        self.transport.close()

    # ========== Market Data ==========

    def ping(self) -> Any:
        return self.execute(ops.PING)

    def server_time(self) -> Any:
        return self.execute(ops.SERVER_TIME)

    def exchange_info(self, params: Params | None = None) -> Any:
        """Trading rules and symbol filters; optional 'symbol' or 'symbols'."""
        return self.execute(ops.EXCHANGE_INFO, params)

    def order_book(self, params: Params) -> Any:
        return self.execute(ops.ORDER_BOOK, params)

    def recent_trades(self, params: Params) -> Any:
        return self.execute(ops.RECENT_TRADES, params)

    def aggregate_trades(self, params: Params) -> Any:
        return self.execute(ops.AGGREGATE_TRADES, params)

    def klines(self, params: Params) -> Any:
        return self.execute(ops.KLINES, params)

    def avg_price(self, params: Params) -> Any:
        return self.execute(ops.AVG_PRICE, params)

    def ticker_24hr(self, params: Params | None = None) -> Any:
        return self.execute(ops.TICKER_24HR, params)

    def ticker_price(self, params: Params | None = None) -> Any:
        return self.execute(ops.TICKER_PRICE, params)

    def book_ticker(self, params: Params | None = None) -> Any:
        return self.execute(ops.BOOK_TICKER, params)

    # ========== Trading ==========

    def new_order(self, params: Params) -> Any:
        """Place a live order. Uses real funds."""
        return self.execute(ops.NEW_ORDER, params)

    def test_order(self, params: Params) -> Any:
        """Validate an order without placing it; an accepted order returns {}."""
        return self.execute(ops.TEST_ORDER, params)

    def query_order(self, params: Params) -> Any:
        return self.execute(ops.QUERY_ORDER, params)

    def cancel_order(self, params: Params) -> Any:
        return self.execute(ops.CANCEL_ORDER, params)

    def cancel_all_orders(self, params: Params) -> Any:
        return self.execute(ops.CANCEL_ALL_ORDERS, params)

    def open_orders(self, params: Params | None = None) -> Any:
        return self.execute(ops.OPEN_ORDERS, params)

    def all_orders(self, params: Params) -> Any:
        return self.execute(ops.ALL_ORDERS, params)

    # ========== Account ==========

    def account_info(self, params: Params | None = None) -> Any:
        return self.execute(ops.ACCOUNT_INFO, params)

    def my_trades(self, params: Params) -> Any:
        return self.execute(ops.MY_TRADES, params)

    # ========== User Data Stream ==========

    def create_listen_key(self) -> Any:
        return self.execute(ops.CREATE_LISTEN_KEY)

    def keepalive_listen_key(self, listen_key: str) -> Any:
        """Extend a listen key by 60 minutes. Callers schedule this themselves."""
        return self.execute(ops.KEEPALIVE_LISTEN_KEY, {"listenKey": listen_key})

    def close_listen_key(self, listen_key: str) -> Any:
        return self.execute(ops.CLOSE_LISTEN_KEY, {"listenKey": listen_key})
