"""
Query Canonicalization and HMAC Signing

Binance verifies a signed request by recomputing HMAC-SHA256 over the exact
query string it received (minus the trailing signature). The canonical string
produced here is therefore both what gets signed and what goes on the wire:
entries keep their insertion order and are never re-sorted.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import hashlib
import hmac
import json
from decimal import Decimal
from typing import Any
from urllib.parse import urlencode

from exchange.errors import SigningPreconditionError


def stringify(value: Any) -> str:
    """
    Convert a parameter value to its wire representation.

    Booleans become 'true'/'false', integral floats drop the trailing '.0',
    Decimals are written without exponent, and lists are sent as compact JSON
    arrays (the exchange's format for parameters such as ``symbols``).
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, (list, tuple)):
        return json.dumps(list(value), separators=(",", ":"))
    return str(value)


def canonicalize(params: dict[str, Any] | None) -> str:
    """
    Build the URL-encoded query string for a parameter mapping.

    Args:
        params: Parameter name -> value. None values are dropped; empty strings are kept.

    Returns:
        'key=value' pairs joined with '&' in the mapping's insertion order
    """
    if not params:
        return ""
    pairs = [(key, stringify(value)) for key, value in params.items() if value is not None]
    return urlencode(pairs)


def sign(secret: str | None, message: str) -> str:
    """
    Compute the HMAC-SHA256 signature of a canonical query string.

    Args:
        secret: Raw secret key
        message: Canonical query string

    Returns:
        64-character lowercase hex digest

    Raises:
        SigningPreconditionError: If no secret key is configured
    """
    if not secret:
        raise SigningPreconditionError("Cannot sign request: secret key is not configured")
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()
