#!/usr/bin/env python3
"""
Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import sys
import os
# Add src and tests to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

import json
import unittest
from unittest.mock import MagicMock

from exchange.client import BinanceClient
from exchange.errors import ExchangeError
from exchange.signing import sign
from exchange.transport import BinanceTransport, Credentials
from fake_session import TEST_BASE_URL, FakeSession
from mcp_server.dispatch import (
    TOOL_HANDLERS,
    ClientCache,
    ToolDispatcher,
    resolve_credentials,
    split_arguments,
)
from mcp_server.tools import TOOL_OPERATIONS, TOOLS


class FakeClientFactory:
    """Builds BinanceClients that share one FakeSession and remembers what it built."""

    def __init__(self, session: FakeSession):
        self.session = session
        self.built: list[Credentials] = []

    def __call__(self, credentials: Credentials) -> BinanceClient:
        self.built.append(credentials)
        transport = BinanceTransport(credentials, base_url=TEST_BASE_URL, session=self.session)
        return BinanceClient(transport=transport)


def response_text(response) -> str:
    return response.content[0]["text"]


class TestToolCatalog(unittest.TestCase):
    """Tool definitions line up with handlers and operations"""

    def test_tool_count(self):
        self.assertEqual(len(TOOLS), 23)

    def test_every_tool_has_handler_and_operation(self):
        for tool in TOOLS:
            self.assertIn(tool.name, TOOL_HANDLERS)
            self.assertIn(tool.name, TOOL_OPERATIONS)
        self.assertEqual(set(TOOL_HANDLERS), {t.name for t in TOOLS})

    def test_every_tool_accepts_fields(self):
        for tool in TOOLS:
            self.assertIn("_fields", tool.inputSchema.properties, tool.name)

    def test_tool_names_prefixed(self):
        for tool in TOOLS:
            self.assertTrue(tool.name.startswith("bn_"), tool.name)

    def test_new_order_annotated_destructive(self):
        new_order = next(t for t in TOOLS if t.name == "bn_new_order")
        self.assertFalse(new_order.annotations.readOnlyHint)
        self.assertTrue(new_order.annotations.destructiveHint)


class TestArgumentHelpers(unittest.TestCase):

    def test_split_arguments(self):
        params, fields, inline = split_arguments({
            "symbol": "BTCUSDT",
            "_fields": "price",
            "BINANCE_API_KEY": "inline-key",
            "BINANCE_SECRET_KEY": "inline-secret",
        })

        self.assertEqual(params, {"symbol": "BTCUSDT"})
        self.assertEqual(fields, "price")
        self.assertEqual(inline, Credentials("inline-key", "inline-secret"))

    def test_split_arguments_does_not_mutate_input(self):
        arguments = {"symbol": "BTCUSDT", "_fields": "price"}
        split_arguments(arguments)
        self.assertIn("_fields", arguments)

    def test_resolve_credentials_priority(self):
        resolved = resolve_credentials(
            Credentials("session-key", "session-secret"),
            Credentials("inline-key", "inline-secret"),
            Credentials("configured-key", "configured-secret"),
        )
        self.assertEqual(resolved, Credentials("session-key", "session-secret"))

    def test_resolve_credentials_never_mixes_halves(self):
        resolved = resolve_credentials(
            None,
            Credentials(None, "orphan-secret"),
            Credentials("configured-key", None),
        )
        self.assertEqual(resolved, Credentials("configured-key", None))

    def test_resolve_credentials_empty(self):
        self.assertEqual(resolve_credentials(None, Credentials()), Credentials())


class TestClientCache(unittest.TestCase):

    def setUp(self):
        self.factory = FakeClientFactory(FakeSession())
        self.cache = ClientCache(factory=self.factory)

    def test_reuses_client_for_same_credentials(self):
        first = self.cache.get(Credentials("k", "s"))
        second = self.cache.get(Credentials("k", "s"))

        self.assertIs(first, second)
        self.assertEqual(len(self.factory.built), 1)

    def test_new_client_when_credentials_change(self):
        first = self.cache.get(Credentials("k", "s"))
        second = self.cache.get(Credentials("k", "other"))

        self.assertIsNot(first, second)
        self.assertEqual(len(self.cache), 2)

    def test_invalidate(self):
        client = self.cache.get(Credentials("k", "s"))
        client.close = MagicMock()

        self.cache.invalidate(Credentials("k", "s"))

        client.close.assert_called_once()
        self.assertEqual(len(self.cache), 0)
        self.assertIsNot(self.cache.get(Credentials("k", "s")), client)

    def test_clear(self):
        self.cache.get(Credentials("a", "1"))
        self.cache.get(Credentials("b", "2"))
        self.cache.clear()
        self.assertEqual(len(self.cache), 0)


class TestToolDispatcher(unittest.TestCase):

    def setUp(self):
        self.session = FakeSession()
        self.factory = FakeClientFactory(self.session)
        self.dispatcher = ToolDispatcher(
            Credentials("test-api-key", "test-secret-key"),
            cache=ClientCache(factory=self.factory),
        )

    def test_unknown_tool(self):
        response = self.dispatcher.call_tool("bn_does_not_exist", {})

        self.assertTrue(response.isError)
        self.assertEqual(response_text(response), "Error: Unknown tool: bn_does_not_exist")
        self.assertEqual(self.session.calls, [])

    def test_public_tool_returns_pretty_json(self):
        self.session.route("GET", "/api/v3/ticker/price", body={"symbol": "BTCUSDT", "price": "43000.00"})

        response = self.dispatcher.call_tool("bn_ticker_price", {"symbol": "BTCUSDT"})

        self.assertFalse(response.isError)
        self.assertEqual(response.content[0]["type"], "text")
        self.assertEqual(response_text(response), json.dumps({"symbol": "BTCUSDT", "price": "43000.00"}, indent=2))

    def test_fields_projection_not_sent_to_exchange(self):
        self.session.route(
            "GET", "/api/v3/ticker/24hr",
            body={"symbol": "BTCUSDT", "lastPrice": "43000.00", "volume": "1234.5", "count": 99},
        )

        response = self.dispatcher.call_tool("bn_ticker_24hr", {"symbol": "BTCUSDT", "_fields": "symbol,lastPrice"})

        self.assertEqual(json.loads(response_text(response)), {"symbol": "BTCUSDT", "lastPrice": "43000.00"})
        self.assertEqual(self.session.calls[-1].query, "symbol=BTCUSDT")

    def test_public_tool_works_without_credentials(self):
        self.session.route("GET", "/api/v3/ping", body={})
        dispatcher = ToolDispatcher(cache=ClientCache(factory=self.factory))

        response = dispatcher.call_tool("bn_ping")

        self.assertFalse(response.isError)
        self.assertEqual(json.loads(response_text(response)), {})

    def test_signed_tool_without_credentials_makes_no_call(self):
        dispatcher = ToolDispatcher(cache=ClientCache(factory=self.factory))

        response = dispatcher.call_tool("bn_account_info", {})

        self.assertTrue(response.isError)
        self.assertIn("BINANCE_API_KEY and BINANCE_SECRET_KEY are required", response_text(response))
        self.assertEqual(self.session.calls, [])
        self.assertEqual(self.factory.built, [])

    def test_user_stream_tool_needs_only_api_key(self):
        self.session.route("POST", "/api/v3/userDataStream", body={"listenKey": "lk-1"})
        dispatcher = ToolDispatcher(Credentials("test-api-key", None), cache=ClientCache(factory=self.factory))

        response = dispatcher.call_tool("bn_create_listen_key", {})

        self.assertFalse(response.isError)
        self.assertEqual(json.loads(response_text(response)), {"listenKey": "lk-1"})

    def test_user_stream_tool_without_api_key(self):
        dispatcher = ToolDispatcher(cache=ClientCache(factory=self.factory))

        response = dispatcher.call_tool("bn_keepalive_listen_key", {"listenKey": "lk-1"})

        self.assertTrue(response.isError)
        self.assertIn("BINANCE_API_KEY is required", response_text(response))
        self.assertEqual(self.session.calls, [])

    def test_inline_credentials_used_and_stripped(self):
        self.session.route("GET", "/api/v3/openOrders", body=[])
        dispatcher = ToolDispatcher(cache=ClientCache(factory=self.factory))

        response = dispatcher.call_tool("bn_open_orders", {
            "symbol": "BTCUSDT",
            "BINANCE_API_KEY": "inline-key",
            "BINANCE_SECRET_KEY": "inline-secret",
        })

        self.assertFalse(response.isError)
        call = self.session.calls[-1]
        self.assertNotIn("BINANCE_API_KEY", call.query)
        self.assertNotIn("inline-secret", call.query)
        self.assertEqual(call.headers["X-MBX-APIKEY"], "inline-key")

    def test_session_credentials(self):
        self.session.route("GET", "/api/v3/account", body={"balances": []})
        dispatcher = ToolDispatcher(cache=ClientCache(factory=self.factory))

        response = dispatcher.call_tool(
            "bn_account_info", {}, session_credentials=Credentials("session-key", "session-secret")
        )

        self.assertFalse(response.isError)
        self.assertEqual(self.factory.built, [Credentials("session-key", "session-secret")])

    def test_injected_empty_cache_is_kept(self):
        cache = ClientCache(factory=self.factory)
        self.assertEqual(len(cache), 0)

        dispatcher = ToolDispatcher(cache=cache)

        self.assertIs(dispatcher.cache, cache)

    def test_session_pair_wins_over_configured_key(self):
        self.session.route("GET", "/api/v3/account", body={"balances": []})
        dispatcher = ToolDispatcher(Credentials(api_key="configured-key"), cache=ClientCache(factory=self.factory))

        response = dispatcher.call_tool(
            "bn_account_info", {}, session_credentials=Credentials("session-key", "session-secret")
        )

        self.assertFalse(response.isError)
        call = self.session.calls[-1]
        self.assertEqual(call.headers["X-MBX-APIKEY"], "session-key")
        unsigned, _, signature = call.query.rpartition("&signature=")
        self.assertEqual(signature, sign("session-secret", unsigned))

    def test_inline_credentials_not_cached(self):
        self.session.route("GET", "/api/v3/ping", body={})
        clients = []

        def factory(credentials):
            client = MagicMock()
            client.ping.return_value = {}
            clients.append(client)
            return client

        cache = ClientCache(factory=factory)
        dispatcher = ToolDispatcher(cache=cache)

        for i in range(50):
            response = dispatcher.call_tool("bn_ping", {"BINANCE_API_KEY": f"key-{i}", "BINANCE_SECRET_KEY": f"secret-{i}"})
            self.assertFalse(response.isError)

        self.assertEqual(len(cache), 0)
        self.assertEqual(len(clients), 50)
        for client in clients:
            client.close.assert_called_once()

    def test_exchange_error_becomes_error_result(self):
        self.session.route("GET", "/api/v3/depth", status=400, body={"code": -1121, "msg": "Invalid symbol."})

        response = self.dispatcher.call_tool("bn_order_book", {"symbol": "NOPE"})

        self.assertTrue(response.isError)
        self.assertEqual(response_text(response), "Error: Binance API Error 400: Invalid symbol.")

    def test_unexpected_exception_becomes_error_result(self):
        client = MagicMock()
        client.ping.side_effect = RuntimeError("boom")
        dispatcher = ToolDispatcher(cache=ClientCache(factory=lambda credentials: client))

        response = dispatcher.call_tool("bn_ping")

        self.assertTrue(response.isError)
        self.assertEqual(response_text(response), "Error: boom")

    def test_exchange_error_from_mock(self):
        client = MagicMock()
        client.new_order.side_effect = ExchangeError(400, "Account has insufficient balance for requested action.", code=-2010)
        dispatcher = ToolDispatcher(Credentials("k", "s"), cache=ClientCache(factory=lambda credentials: client))

        response = dispatcher.call_tool("bn_new_order", {"symbol": "BTCUSDT", "side": "BUY", "type": "MARKET", "quantity": "1"})

        self.assertTrue(response.isError)
        self.assertIn("insufficient balance", response_text(response))
        client.new_order.assert_called_once_with({"symbol": "BTCUSDT", "side": "BUY", "type": "MARKET", "quantity": "1"})

    def test_keepalive_passes_listen_key(self):
        client = MagicMock()
        client.keepalive_listen_key.return_value = {}
        dispatcher = ToolDispatcher(Credentials("k", None), cache=ClientCache(factory=lambda credentials: client))

        response = dispatcher.call_tool("bn_keepalive_listen_key", {"listenKey": "lk-9"})

        self.assertFalse(response.isError)
        client.keepalive_listen_key.assert_called_once_with("lk-9")


if __name__ == '__main__':
    unittest.main()
