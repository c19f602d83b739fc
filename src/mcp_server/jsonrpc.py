"""
MCP JSON-RPC Handler

Translates MCP JSON-RPC 2.0 messages into MCPServer calls. Shared by the HTTP
/mcp endpoint and the stdio loop.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import logging
from collections.abc import Callable
from typing import Any

import constants as const
import util
from exchange.transport import Credentials
from mcp_server.server import MCPServer, NotFoundError


logger = logging.getLogger(__name__)

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_ERROR = -32000


class InvalidParamsError(ValueError):
    """JSON-RPC params missing or of the wrong type"""


def error_response(request_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "error": {"code": code, "message": message}, "id": request_id}


def is_initialize_request(message: Any) -> bool:
    return isinstance(message, dict) and message.get("method") == "initialize"


class JsonRpcHandler:
    """Dispatches JSON-RPC requests to an MCPServer."""

    def __init__(self, server: MCPServer):
        self.server = server
        self._methods: dict[str, Callable[[dict[str, Any], Credentials | None], Any]] = {
            "initialize": self._initialize,
            "ping": lambda params, credentials: {},
            "logging/setLevel": self._set_level,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
            "resources/list": self._list_resources,
            "resources/read": self._read_resource,
            "prompts/list": self._list_prompts,
            "prompts/get": self._get_prompt,
        }

    def handle_payload(self, payload: Any, credentials: Credentials | None = None) -> Any:
        """
        Handle a single message or a batch.

        Returns:
            Response dict, list of responses for a batch, or None when nothing
            needs to be sent back (notifications only)
        """
        if isinstance(payload, list):
            if not payload:
                return error_response(None, INVALID_REQUEST, "Invalid Request: empty batch")
            responses = [r for r in (self.handle(m, credentials) for m in payload) if r is not None]
            return responses or None
        return self.handle(payload, credentials)

    def handle(self, message: Any, credentials: Credentials | None = None) -> dict[str, Any] | None:
        """Handle one JSON-RPC message; returns None for notifications."""
        if not isinstance(message, dict):
            return error_response(None, INVALID_REQUEST, "Invalid Request")

        request_id = message.get("id")
        method = message.get("method")
        if message.get("jsonrpc") != "2.0" or not isinstance(method, str):
            return error_response(request_id, INVALID_REQUEST, "Invalid Request")

        is_notification = "id" not in message
        if method.startswith("notifications/"):
            logger.debug(f"Notification received: {method}")
            return None

        params = message.get("params") or {}
        if not isinstance(params, dict):
            return error_response(request_id, INVALID_PARAMS, "Invalid params: expected an object")

        handler = self._methods.get(method)
        if handler is None:
            logger.warning(f"Unknown JSON-RPC method: {method}")
            if is_notification:
                return None
            return error_response(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")

        try:
            result = handler(params, credentials)
        except (InvalidParamsError, NotFoundError) as e:
            return error_response(request_id, INVALID_PARAMS, str(e))
        except Exception as e:
            logger.error(f"Error handling JSON-RPC method '{method}': {e}", exc_info=True)
            return error_response(request_id, INTERNAL_ERROR, f"Internal error: {e}")

        if is_notification:
            return None
        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    # ------------------------------------------------------------------
    # Methods
    # ------------------------------------------------------------------

    def _initialize(self, params: dict[str, Any], credentials: Credentials | None) -> dict[str, Any]:
        client_info = params.get("clientInfo") or {}
        logger.info(f"Initialize from client: {client_info.get('name', 'unknown')} {client_info.get('version', '')}")
        return {
            "protocolVersion": params.get("protocolVersion") or const.PROTOCOL_VERSION,
            "capabilities": {
                "tools": {"listChanged": False},
                "resources": {"listChanged": False},
                "prompts": {"listChanged": False},
                "logging": {},
            },
            "serverInfo": {"name": const.SERVER_NAME, "version": const.VERSION},
        }

    def _list_tools(self, params: dict[str, Any], credentials: Credentials | None) -> dict[str, Any]:
        return {"tools": [tool.model_dump() for tool in self.server.tools.values()]}

    def _call_tool(self, params: dict[str, Any], credentials: Credentials | None) -> dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str):
            raise InvalidParamsError("Invalid params: 'name' is required")
        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            raise InvalidParamsError("Invalid params: 'arguments' must be an object")
        return self.server.execute_tool(name, arguments, credentials).model_dump()

    def _list_resources(self, params: dict[str, Any], credentials: Credentials | None) -> dict[str, Any]:
        return {"resources": [r.model_dump() for r in self.server.resources.values()]}

    def _read_resource(self, params: dict[str, Any], credentials: Credentials | None) -> dict[str, Any]:
        uri = params.get("uri")
        if not isinstance(uri, str):
            raise InvalidParamsError("Invalid params: 'uri' is required")
        return self.server.get_resource(uri).model_dump()

    def _list_prompts(self, params: dict[str, Any], credentials: Credentials | None) -> dict[str, Any]:
        return {"prompts": [p.model_dump() for p in self.server.prompts.values()]}

    def _get_prompt(self, params: dict[str, Any], credentials: Credentials | None) -> dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str):
            raise InvalidParamsError("Invalid params: 'name' is required")
        return self.server.execute_prompt(name, params.get("arguments")).model_dump(exclude_none=True)

    def _set_level(self, params: dict[str, Any], credentials: Credentials | None) -> dict[str, Any]:
        level = params.get("level")
        if not isinstance(level, str):
            raise InvalidParamsError("Invalid params: 'level' is required")
        try:
            util.set_log_level(level)
        except ValueError as e:
            raise InvalidParamsError(f"Invalid params: {e}") from e
        return {}
