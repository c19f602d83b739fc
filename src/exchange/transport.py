"""
Binance REST Transport

Performs the actual HTTP calls against the Binance spot REST API in one of
three request modes:

- PUBLIC:       no credentials, plain GET
- USER_STREAM:  API key in the X-MBX-APIKEY header, never signed
- SIGNED:       API key header plus timestamp/recvWindow/signature fields

Signed requests fetch the exchange's server time first and never use the
local clock, so clock skew on the host cannot push requests outside the
server's recvWindow.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import requests

import constants as const
from exchange.errors import (
    ExchangeError,
    MalformedResponseError,
    SigningPreconditionError,
    TransportError,
)
from exchange.signing import canonicalize, sign


logger = logging.getLogger(__name__)

# Fields the transport owns in a signed envelope; caller copies are discarded
ENVELOPE_FIELDS = ("timestamp", "signature")


class RequestMode(str, Enum):
    """Authentication mode of a Binance endpoint"""

    PUBLIC = "public"
    USER_STREAM = "user_stream"
    SIGNED = "signed"


@dataclass(frozen=True)
class Credentials:
    """Immutable API key / secret key pair. Either half may be missing."""

    api_key: str | None = None
    secret_key: str | None = field(default=None, repr=False)

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @property
    def can_sign(self) -> bool:
        return bool(self.api_key) and bool(self.secret_key)

    def allows(self, mode: RequestMode) -> bool:
        """Check whether these credentials are sufficient for a request mode."""
        if mode is RequestMode.SIGNED:
            return self.can_sign
        if mode is RequestMode.USER_STREAM:
            return self.has_api_key
        return True


class BinanceTransport:
    """HTTP transport for the Binance REST API."""

    SERVER_TIME_PATH = "/api/v3/time"

    def __init__(
        self,
        credentials: Credentials | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        recv_window: int | None = None,
        session: requests.Session | None = None,
    ):
        """
        Initialize the transport.

        Args:
            credentials: API key pair (defaults to an empty pair: public endpoints only)
            base_url: REST endpoint (defaults to const.BINANCE_BASE_URL)
            timeout: Client-side timeout per HTTP call in seconds (defaults to const.REQUEST_TIMEOUT)
            recv_window: Default recvWindow in ms (defaults to const.DEFAULT_RECV_WINDOW)
            session: requests.Session to reuse; one is created if omitted
        """
        self.credentials = credentials or Credentials()
        self.base_url = (base_url or const.BINANCE_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else const.REQUEST_TIMEOUT
        self.recv_window = recv_window if recv_window is not None else const.DEFAULT_RECV_WINDOW
        self.session = session or requests.Session()

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------
    # Request modes
    # ------------------------------------------------------------------

    def request(
        self, mode: RequestMode, method: str, path: str, params: dict[str, Any] | None = None
    ) -> Any:
        """Dispatch a request in the given mode."""
        if mode is RequestMode.PUBLIC:
            if method != "GET":
                raise ValueError(f"Public requests must use GET, got {method}")
            return self.public_get(path, params)
        if mode is RequestMode.USER_STREAM:
            return self.user_stream_request(method, path, params)
        if mode is RequestMode.SIGNED:
            return self.signed_request(method, path, params)
        raise ValueError(f"Unknown request mode: {mode}")

    def public_get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """
        Unauthenticated GET request.

        Args:
            path: Endpoint path, e.g. '/api/v3/depth'
            params: Query parameters (None values are dropped)

        Returns:
            Decoded JSON payload ({} for an empty body)

        Raises:
            ExchangeError: On non-2xx responses
            TransportError: On network failures
        """
        return self._send("GET", path, query=canonicalize(params))

    def user_stream_request(self, method: str, path: str, params: dict[str, Any] | None = None) -> Any:
        """
        API-key-only request used for the listen key lifecycle.

        The key travels in the X-MBX-APIKEY header; no signature is computed.

        Raises:
            SigningPreconditionError: If no API key is configured (before any network call)
        """
        if not self.credentials.has_api_key:
            raise SigningPreconditionError(
                f"API key is required for user stream request {method} {path}"
            )
        return self._send(method, path, query=canonicalize(params), headers=self._api_key_header())

    def signed_request(self, method: str, path: str, params: dict[str, Any] | None = None) -> Any:
        """
        HMAC-SHA256 signed request.

        1. Fetch the exchange's server time
        2. Add timestamp and recvWindow, canonicalize, sign, append signature
        3. GET/DELETE carry the signed string as the URL query; POST/PUT carry
           it as a form-urlencoded body

        Raises:
            SigningPreconditionError: If API key or secret key is missing (before any network call)
            ExchangeError: On non-2xx responses
            MalformedResponseError: On a non-empty, non-JSON success body
            TransportError: On network failures
        """
        if not self.credentials.can_sign:
            raise SigningPreconditionError(
                f"API key and secret key are required for signed request {method} {path}"
            )

        server_time = self.server_time()
        signed_query = self.build_signed_query(params, server_time)
        headers = self._api_key_header()

        if method in ("GET", "DELETE"):
            return self._send(method, path, query=signed_query, headers=headers)

        headers["Content-Type"] = "application/x-www-form-urlencoded"
        return self._send(method, path, body=signed_query, headers=headers)

    # ------------------------------------------------------------------
    # Signing helpers
    # ------------------------------------------------------------------

    def server_time(self) -> int:
        """Current exchange time in epoch milliseconds."""
        data = self.public_get(self.SERVER_TIME_PATH)
        try:
            return int(data["serverTime"])
        except (KeyError, TypeError, ValueError):
            raise MalformedResponseError(200, str(data))

    def build_envelope(self, params: dict[str, Any] | None, timestamp: int) -> dict[str, Any]:
        """
        Merge caller parameters with timestamp and recvWindow.

        Caller order is kept; a caller-supplied recvWindow keeps its position
        and value, otherwise the default is appended after timestamp.
        """
        envelope = {k: v for k, v in (params or {}).items() if k not in ENVELOPE_FIELDS}
        envelope["timestamp"] = timestamp
        if envelope.get("recvWindow") is None:
            envelope["recvWindow"] = self.recv_window
        return envelope

    def build_signed_query(self, params: dict[str, Any] | None, timestamp: int) -> str:
        """Canonical envelope query with the signature appended as the last field."""
        query = canonicalize(self.build_envelope(params, timestamp))
        signature = sign(self.credentials.secret_key, query)
        return f"{query}&signature={signature}"

    def _api_key_header(self) -> dict[str, str]:
        return {const.BINANCE_API_KEY_HEADER: self.credentials.api_key or ""}

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _send(
        self,
        method: str,
        path: str,
        query: str = "",
        body: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        if query:
            url = f"{url}?{query}"

        logger.debug(f"Binance request: {method} {path}")

        try:
            response = self.session.request(
                method, url, data=body, headers=headers, timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"Binance API timeout for {method} {path}")
            raise TransportError(f"Binance API timeout after {self.timeout}s: {method} {path}", method, path) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Binance API request failed for {method} {path}: {e}")
            raise TransportError(f"Binance API request failed: {e}", method, path) from e

        return self._decode(response, method, path)

    def _decode(self, response: requests.Response, method: str, path: str) -> Any:
        status = response.status_code

        if not 200 <= status < 300:
            error = self._exchange_error(response)
            logger.warning(f"Binance API error for {method} {path}: {error}")
            raise error

        # Some mutating endpoints (e.g. order/test) answer with an empty body
        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError:
            logger.error(f"Binance API returned non-JSON body for {method} {path}")
            raise MalformedResponseError(status, response.text)

    @staticmethod
    def _exchange_error(response: requests.Response) -> ExchangeError:
        status = response.status_code
        reason = response.reason or f"HTTP {status}"

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict):
            code = payload.get("code")
            message = payload.get("msg") or payload.get("message") or (code if code is not None else reason)
            return ExchangeError(status, str(message), code=code)

        return ExchangeError(status, reason)
