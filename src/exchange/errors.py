"""
Binance Error Types

Every failure in the exchange layer is raised as a subclass of BinanceError so
the tool dispatcher can turn it into an error result with one except clause.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

from typing import Any


class BinanceError(Exception):
    """Base class for all exchange-layer failures."""


class TransportError(BinanceError):
    """Network-level failure (DNS, connection reset, timeout). Never retried."""

    def __init__(self, message: str, method: str | None = None, path: str | None = None):
        super().__init__(message)
        self.method = method
        self.path = path


class ExchangeError(BinanceError):
    """
    Non-success HTTP response from the exchange.

    Attributes:
        http_status: HTTP status code of the response
        code: Exchange error code from the JSON body (e.g. -1121), if present
        message: Exchange-supplied message, or the HTTP reason phrase
    """

    def __init__(self, http_status: int, message: str, code: int | None = None):
        self.http_status = http_status
        self.code = code
        self.message = message
        super().__init__(f"Binance API Error {http_status}: {message}")

    def as_dict(self) -> dict[str, Any]:
        return {"httpStatus": self.http_status, "code": self.code, "msg": self.message}


class SigningPreconditionError(BinanceError):
    """A SIGNED or USER_STREAM request was attempted without the credentials it needs."""


class MalformedResponseError(BinanceError):
    """Success status with a non-empty body that is not valid JSON."""

    def __init__(self, http_status: int, body: str):
        self.http_status = http_status
        self.body = body
        preview = body[:200]
        super().__init__(f"Binance API returned non-JSON body (status {http_status}): {preview}")
