#!/usr/bin/env python3
"""
MCP Server for Binance

Provides Model Context Protocol access to the Binance spot REST API:
- Market data (order book, trades, klines, tickers, exchange info)
- Trading (new/test/query/cancel orders, open and historical orders)
- Account information and trade history
- User data stream listen key lifecycle

Two HTTP surfaces are served from the same MCPServer:
- REST-style endpoints (/tools/list, /tools/call, ...) for simple clients
- A JSON-RPC endpoint (/mcp) with Mcp-Session-Id session tracking

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import json
import logging
import time
from datetime import datetime

import uvicorn
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import constants as const
import util
from exchange.transport import Credentials
from mcp_server.jsonrpc import (
    PARSE_ERROR,
    SERVER_ERROR,
    JsonRpcHandler,
    error_response,
    is_initialize_request,
)
from mcp_server.models import (
    Prompt,
    PromptRequest,
    PromptResponse,
    Resource,
    ResourceRequest,
    ResourceResponse,
    Tool,
    ToolCallRequest,
    ToolCallResponse,
)
from mcp_server.server import MCPServer, NotFoundError
from mcp_server.sessions import SessionRegistry


logger = logging.getLogger(__name__)


def configured_credentials() -> Credentials:
    """Credentials from the environment / .env file."""
    return Credentials(api_key=const.BINANCE_API_KEY, secret_key=const.BINANCE_SECRET_KEY)


def create_app(mcp_server: MCPServer | None = None, sessions: SessionRegistry | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        mcp_server: Server to expose (defaults to one using configured credentials)
        sessions: Session registry for the /mcp endpoint
    """
    mcp_server = mcp_server if mcp_server is not None else MCPServer(configured_credentials())
    sessions = sessions if sessions is not None else SessionRegistry()
    rpc = JsonRpcHandler(mcp_server)
    started_at = datetime.now()

    app = FastAPI(
        title="Binance MCP Server",
        description="Model Context Protocol server exposing Binance spot market data, trading, account, and user data stream operations",
        version=const.VERSION,
    )
    app.state.mcp_server = mcp_server
    app.state.sessions = sessions

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[const.SESSION_HEADER],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all HTTP requests with timing information"""
        start_time = time.time()
        client_host = request.client.host if request.client else "unknown"

        # Query params may carry credentials; only the path is logged
        logger.info(f"Method: {request.method} | Path: {request.url.path} | Client: {client_host}")

        try:
            response = await call_next(request)
            duration = time.time() - start_time
            logger.info(f"Status: {response.status_code} | Duration: {duration:.3f}s")
            return response
        except Exception as e:
            duration = time.time() - start_time
            logger.error(f"Request failed after {duration:.3f}s: {e!s}", exc_info=True)
            raise

    # ========================================================================
    # Info Endpoints
    # ========================================================================

    @app.get("/")
    async def root():
        """Root endpoint with server information"""
        return {
            "name": const.SERVER_NAME,
            "version": const.VERSION,
            "status": "ok",
            "protocolVersion": const.PROTOCOL_VERSION,
            "transport": "streamable-http",
            "endpoints": {"mcp": "/mcp", "tools": "/tools/list"},
            "capabilities": {
                "tools": {"available": len(mcp_server.tools), "list": list(mcp_server.tools.keys())},
                "resources": {"available": len(mcp_server.resources), "list": list(mcp_server.resources.keys())},
                "prompts": {"available": len(mcp_server.prompts), "list": list(mcp_server.prompts.keys())},
            },
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint with startup time"""
        uptime = str(datetime.now() - started_at).split(".")[0]
        return {
            "status": "healthy",
            "startup_time": started_at.strftime("%Y-%m-%d %H:%M:%S"),
            "uptime": uptime,
            "active_sessions": len(sessions),
            "current_time": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        }

    # ========================================================================
    # REST-style Endpoints
    # ========================================================================

    @app.get("/tools/list", response_model=dict[str, list[Tool]])
    async def list_tools():
        """List all available tools"""
        return {"tools": list(mcp_server.tools.values())}

    @app.post("/tools/call", response_model=ToolCallResponse)
    def call_tool(request: ToolCallRequest):
        """Execute a tool"""
        return mcp_server.execute_tool(request.name, request.arguments)

    @app.get("/resources/list", response_model=dict[str, list[Resource]])
    async def list_resources():
        """List all available resources"""
        return {"resources": list(mcp_server.resources.values())}

    @app.post("/resources/read", response_model=ResourceResponse)
    async def read_resource(request: ResourceRequest):
        """Read a resource"""
        try:
            return mcp_server.get_resource(request.uri)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))

    @app.get("/prompts/list", response_model=dict[str, list[Prompt]])
    async def list_prompts():
        """List all available prompts"""
        return {"prompts": list(mcp_server.prompts.values())}

    @app.post("/prompts/get", response_model=PromptResponse)
    async def get_prompt(request: PromptRequest):
        """Get a prompt"""
        try:
            return mcp_server.execute_prompt(request.name, request.arguments)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))

    # ========================================================================
    # JSON-RPC Endpoint
    # ========================================================================

    @app.post("/mcp")
    async def mcp_post(request: Request):
        """Handle MCP JSON-RPC messages; 'initialize' opens a session."""
        try:
            payload = await request.json()
        except (ValueError, json.JSONDecodeError):
            return JSONResponse(error_response(None, PARSE_ERROR, "Parse error"), status_code=400)

        session_id = request.headers.get(const.SESSION_HEADER)
        session = sessions.get(session_id)

        if session is None:
            if session_id is None and is_initialize_request(payload):
                session = sessions.create(
                    Credentials(
                        api_key=request.query_params.get("BINANCE_API_KEY"),
                        secret_key=request.query_params.get("BINANCE_SECRET_KEY"),
                    )
                )
            else:
                return JSONResponse(
                    error_response(None, SERVER_ERROR, "Bad Request: No valid session ID provided"),
                    status_code=400,
                )

        headers = {const.SESSION_HEADER: session.session_id}
        result = await run_in_threadpool(rpc.handle_payload, payload, session.credentials)

        if result is None:
            return Response(status_code=202, headers=headers)
        return JSONResponse(result, headers=headers)

    @app.get("/mcp")
    async def mcp_get(request: Request):
        """Server-initiated SSE streams are not offered"""
        if sessions.get(request.headers.get(const.SESSION_HEADER)) is None:
            return Response("Invalid or missing session ID", status_code=400)
        return Response("SSE stream not supported", status_code=405, headers={"Allow": "POST, DELETE"})

    @app.delete("/mcp")
    async def mcp_delete(request: Request):
        """Terminate a session and release the client built for its credentials"""
        session = sessions.close(request.headers.get(const.SESSION_HEADER))
        if session is None:
            return Response("Invalid or missing session ID", status_code=400)
        if session.credentials.has_api_key:
            mcp_server.dispatcher.cache.invalidate(session.credentials)
        return Response(status_code=200)

    return app


def run(host: str = const.HOST, port: int = const.PORT) -> None:
    """Start the HTTP server (blocking)."""
    credentials = configured_credentials()
    app = create_app(MCPServer(credentials))

    logger.info("=" * 60)
    logger.info("Starting Binance MCP Server (HTTP)")
    logger.info(f"API key: {util.mask_key(credentials.api_key) if credentials.can_sign else '(not configured, market data only)'}")
    logger.info(f"Base URL: {const.BINANCE_BASE_URL}")
    logger.info(f"Tools available: {len(app.state.mcp_server.tools)}")
    logger.info(f"MCP endpoint: http://{host}:{port}/mcp")
    logger.info(f"Logging to: {const.API_LOG_FILE}")
    logger.info("=" * 60)

    try:
        uvicorn.run(app, host=host, port=port, log_level="info")
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    finally:
        app.state.sessions.clear()
        app.state.mcp_server.dispatcher.cache.clear()


if __name__ == "__main__":
    util.setup_logger(name=None, level="INFO", console=True, log_file=const.API_LOG_FILE)
    run()
