"""
Tool Dispatch

Maps an MCP tool call (name + flat argument object) onto the Binance operation
facade. Responsibilities that are not exchange concerns live here:

- stripping metadata-only arguments (_fields, inline credentials)
- resolving credentials and rejecting calls that lack them
- caching one client per configured or session credential pair
- rendering results and failures as MCP tool responses

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import json
import logging
import threading
from collections.abc import Callable
from typing import Any

import constants as const
import util
from exchange.client import BinanceClient
from exchange.errors import BinanceError
from exchange.transport import Credentials, RequestMode
from mcp_server.models import ToolCallResponse, text_response
from mcp_server.tools import TOOL_OPERATIONS


logger = logging.getLogger(__name__)

ToolHandler = Callable[[BinanceClient, dict[str, Any]], Any]

TOOL_HANDLERS: dict[str, ToolHandler] = {
    # Market Data
    "bn_ping": lambda client, params: client.ping(),
    "bn_server_time": lambda client, params: client.server_time(),
    "bn_exchange_info": lambda client, params: client.exchange_info(params),
    "bn_order_book": lambda client, params: client.order_book(params),
    "bn_recent_trades": lambda client, params: client.recent_trades(params),
    "bn_aggregate_trades": lambda client, params: client.aggregate_trades(params),
    "bn_klines": lambda client, params: client.klines(params),
    "bn_avg_price": lambda client, params: client.avg_price(params),
    "bn_ticker_24hr": lambda client, params: client.ticker_24hr(params),
    "bn_ticker_price": lambda client, params: client.ticker_price(params),
    "bn_book_ticker": lambda client, params: client.book_ticker(params),
    # Trading
    "bn_new_order": lambda client, params: client.new_order(params),
    "bn_test_order": lambda client, params: client.test_order(params),
    "bn_query_order": lambda client, params: client.query_order(params),
    "bn_cancel_order": lambda client, params: client.cancel_order(params),
    "bn_cancel_all_orders": lambda client, params: client.cancel_all_orders(params),
    "bn_open_orders": lambda client, params: client.open_orders(params),
    "bn_all_orders": lambda client, params: client.all_orders(params),
    # Account
    "bn_account_info": lambda client, params: client.account_info(params),
    "bn_my_trades": lambda client, params: client.my_trades(params),
    # User Data Stream
    "bn_create_listen_key": lambda client, params: client.create_listen_key(),
    "bn_keepalive_listen_key": lambda client, params: client.keepalive_listen_key(params.get("listenKey")),
    "bn_close_listen_key": lambda client, params: client.close_listen_key(params.get("listenKey")),
}


class ClientCache:
    """
    One BinanceClient per credential pair.

    Clients are created on first use and reused until invalidated, so a
    credential change never reuses a transport built for other keys.
    Per-call credentials go through build() and are never cached.
    """

    def __init__(self, factory: Callable[[Credentials], BinanceClient] = BinanceClient):
        self._factory = factory
        self._clients: dict[Credentials, BinanceClient] = {}
        self._lock = threading.Lock()

    def build(self, credentials: Credentials) -> BinanceClient:
        """Create an uncached client; the caller closes it."""
        return self._factory(credentials)

    def get(self, credentials: Credentials) -> BinanceClient:
        with self._lock:
            client = self._clients.get(credentials)
            if client is None:
                logger.info(f"Creating Binance client for API key {util.mask_key(credentials.api_key)}")
                client = self._factory(credentials)
                self._clients[credentials] = client
            return client

    def invalidate(self, credentials: Credentials) -> None:
        with self._lock:
            client = self._clients.pop(credentials, None)
        if client is not None:
            logger.info(f"Closing Binance client for API key {util.mask_key(credentials.api_key)}")
            client.close()

    def clear(self) -> None:
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        for client in clients:
            client.close()

    def __len__(self) -> int:
        return len(self._clients)


def split_arguments(arguments: dict[str, Any] | None) -> tuple[dict[str, Any], str | None, Credentials]:
    """
    Separate exchange parameters from metadata-only tool arguments.

    Returns:
        Tuple of (exchange params, _fields hint, inline credentials)
    """
    params = dict(arguments or {})
    fields = params.pop(const.FIELDS_ARGUMENT, None)
    api_key, secret_key = (params.pop(key, None) for key in const.CREDENTIAL_ARGUMENTS)
    return params, fields, Credentials(api_key=api_key, secret_key=secret_key)


def resolve_credentials(*sources: Credentials | None) -> Credentials:
    """
    First source in priority order that supplies an API key, taken as a whole pair.

    Halves are never mixed across sources: a key is only ever signed with the
    secret that came with it.
    """
    for credentials in sources:
        if credentials is not None and credentials.has_api_key:
            return credentials
    return Credentials()


def missing_credentials_message(mode: RequestMode) -> str:
    if mode is RequestMode.USER_STREAM:
        return (
            "Error: BINANCE_API_KEY is required for this operation. "
            "Set it as an environment variable or pass via config."
        )
    return (
        "Error: BINANCE_API_KEY and BINANCE_SECRET_KEY are required for this operation. "
        "Set them as environment variables or pass via config."
    )


class ToolDispatcher:
    """Executes Binance tools by name."""

    def __init__(self, credentials: Credentials | None = None, cache: ClientCache | None = None):
        """
        Initialize dispatcher.

        Args:
            credentials: Configured credentials, used when neither the session nor the call supplies keys
            cache: Client cache (a fresh one is created if omitted)
        """
        self.credentials = credentials if credentials is not None else Credentials()
        self.cache = cache if cache is not None else ClientCache()

    def call_tool(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
        session_credentials: Credentials | None = None,
    ) -> ToolCallResponse:
        """
        Execute a tool and wrap the outcome as a ToolCallResponse.

        Credentials come from the session, then the call's own arguments, then
        the configured pair. Clients for inline credentials are closed after the call.

        Args:
            name: Tool name, e.g. 'bn_order_book'
            arguments: Flat tool arguments
            session_credentials: Credentials bound to the calling MCP session, if any

        Returns:
            ToolCallResponse with the JSON result as text, or isError=True with a message
        """
        operation = TOOL_OPERATIONS.get(name)
        handler = TOOL_HANDLERS.get(name)
        if operation is None or handler is None:
            logger.warning(f"Tool not found: {name}")
            return text_response(f"Error: Unknown tool: {name}", is_error=True)

        params, fields, inline_credentials = split_arguments(arguments)
        credentials = resolve_credentials(session_credentials, inline_credentials, self.credentials)
        per_call = credentials is inline_credentials

        if not credentials.allows(operation.mode):
            logger.warning(f"{name}: rejected, credentials missing for {operation.mode.value} operation")
            return text_response(missing_credentials_message(operation.mode), is_error=True)

        logger.info(f"Executing tool: {name}")
        logger.debug(f"Tool parameters: {params}")

        client = None
        try:
            client = self.cache.build(credentials) if per_call else self.cache.get(credentials)
            result = handler(client, params)
        except BinanceError as e:
            logger.warning(f"{name} failed: {e}")
            return text_response(f"Error: {e}", is_error=True)
        except Exception as e:
            logger.error(f"Error executing tool '{name}': {e}", exc_info=True)
            return text_response(f"Error: {e}", is_error=True)
        finally:
            if per_call and client is not None:
                client.close()

        result = util.select_fields(result, fields)
        return text_response(json.dumps(result, indent=2, default=str))
