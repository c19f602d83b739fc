#!/usr/bin/env python3
"""
Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import sys
import os
# Add src to path for imports (needed when running test file directly)
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

import re
import unittest
from decimal import Decimal
from urllib.parse import parse_qsl

from exchange.errors import SigningPreconditionError
from exchange.signing import canonicalize, sign, stringify


# Worked example from the Binance API documentation
DOC_SECRET = "NhqPtmdSJYdKjVHjA7PZj4Mge3R5YNiP1e3UZjInClVN65XAbvqqM6A7H5fATj0j"
DOC_QUERY = "symbol=LTCBTC&side=BUY&type=LIMIT&timeInForce=GTC&quantity=1&price=0.1&recvWindow=5000&timestamp=1499827319559"
DOC_SIGNATURE = "c8db56825ae71d6d79447849e617115f4a920fa2acdcab2b053c4b2838bd6b71"


class TestCanonicalize(unittest.TestCase):
    """Query string construction"""

    def test_preserves_insertion_order(self):
        self.assertEqual(canonicalize({"symbol": "BTCUSDT", "limit": 100}), "symbol=BTCUSDT&limit=100")
        self.assertEqual(canonicalize({"limit": 100, "symbol": "BTCUSDT"}), "limit=100&symbol=BTCUSDT")

    def test_drops_none_values(self):
        query = canonicalize({"symbol": "BTCUSDT", "orderId": None, "limit": 5})
        self.assertEqual(query, "symbol=BTCUSDT&limit=5")
        self.assertNotIn("orderId", query)

    def test_keeps_empty_string(self):
        self.assertEqual(canonicalize({"symbol": "", "limit": 5}), "symbol=&limit=5")

    def test_empty_and_missing_params(self):
        self.assertEqual(canonicalize(None), "")
        self.assertEqual(canonicalize({}), "")
        self.assertEqual(canonicalize({"symbol": None}), "")

    def test_form_encoding(self):
        self.assertEqual(canonicalize({"note": "a b&c=d"}), "note=a+b%26c%3Dd")

    def test_symbols_list_sent_as_json_array(self):
        query = canonicalize({"symbols": ["BTCUSDT", "ETHUSDT"]})
        self.assertEqual(query, "symbols=%5B%22BTCUSDT%22%2C%22ETHUSDT%22%5D")

    def test_deterministic(self):
        params = {"symbol": "ETHBTC", "side": "SELL", "quantity": "0.5", "price": Decimal("0.0521"), "flag": True}
        self.assertEqual(canonicalize(params), canonicalize(params))

    def test_round_trip_through_query_parser(self):
        params = {"symbol": "BNB BTC", "side": "BUY", "quantity": "1.25", "limit": 10, "newClientOrderId": "my/id+1"}
        decoded = parse_qsl(canonicalize(params), keep_blank_values=True)
        self.assertEqual(decoded, [(k, str(v)) for k, v in params.items()])


class TestStringify(unittest.TestCase):
    """Locale-independent value conversion"""

    def test_booleans_are_lowercase(self):
        self.assertEqual(stringify(True), "true")
        self.assertEqual(stringify(False), "false")

    def test_integral_float_has_no_fraction(self):
        self.assertEqual(stringify(100.0), "100")
        self.assertEqual(stringify(0.1), "0.1")

    def test_decimal_plain_notation(self):
        self.assertEqual(stringify(Decimal("0.00010000")), "0.00010000")
        self.assertEqual(stringify(Decimal("1E-7")), "0.0000001")

    def test_decimal_strings_untouched(self):
        self.assertEqual(stringify("0.00100000"), "0.00100000")


class TestSign(unittest.TestCase):
    """HMAC-SHA256 signing"""

    def test_documented_example(self):
        self.assertEqual(sign(DOC_SECRET, DOC_QUERY), DOC_SIGNATURE)

    def test_output_is_64_lowercase_hex(self):
        for secret, message in [("k", ""), ("secret", "symbol=BTCUSDT"), (DOC_SECRET, DOC_QUERY * 10)]:
            signature = sign(secret, message)
            self.assertRegex(signature, re.compile(r"^[0-9a-f]{64}$"))

    def test_deterministic(self):
        self.assertEqual(sign("secret", "a=1&b=2"), sign("secret", "a=1&b=2"))
        self.assertNotEqual(sign("secret", "a=1&b=2"), sign("secret", "b=2&a=1"))

    def test_missing_secret_raises(self):
        with self.assertRaises(SigningPreconditionError):
            sign(None, "symbol=BTCUSDT")
        with self.assertRaises(SigningPreconditionError):
            sign("", "symbol=BTCUSDT")


if __name__ == '__main__':
    unittest.main()
