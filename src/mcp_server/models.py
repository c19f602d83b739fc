"""
MCP Protocol Models

Pydantic models shared by the tool catalog, the dispatcher, and the HTTP and
stdio server surfaces.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

from typing import Any

from pydantic import BaseModel, Field


# ============================================================================
# MCP Protocol Models
# ============================================================================


class ToolInputSchema(BaseModel):
    """Schema for tool input parameters"""

    type: str = "object"
    properties: dict[str, Any]
    required: list[str] | None = []


class ToolAnnotations(BaseModel):
    """Behavioral hints for MCP clients"""

    title: str
    readOnlyHint: bool = True
    destructiveHint: bool = False
    idempotentHint: bool = True
    openWorldHint: bool = True


class Tool(BaseModel):
    """MCP Tool definition"""

    name: str
    description: str
    inputSchema: ToolInputSchema
    annotations: ToolAnnotations


class Resource(BaseModel):
    """MCP Resource definition"""

    uri: str
    name: str
    description: str
    mimeType: str


class Prompt(BaseModel):
    """MCP Prompt definition"""

    name: str
    description: str
    arguments: list[dict[str, Any]] | None = []


# ============================================================================
# Request/Response Models
# ============================================================================


class ToolCallRequest(BaseModel):
    """Request model for tool execution"""

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolCallResponse(BaseModel):
    """Response model for tool execution"""

    content: list[dict[str, Any]]
    isError: bool = False


class ResourceRequest(BaseModel):
    """Request model for resource access"""

    uri: str


class ResourceResponse(BaseModel):
    """Response model for resource access"""

    contents: list[dict[str, Any]]


class PromptRequest(BaseModel):
    """Request model for prompt execution"""

    name: str
    arguments: dict[str, Any] | None = None


class PromptResponse(BaseModel):
    """Response model for prompt execution"""

    description: str | None = None
    messages: list[dict[str, Any]]


def text_response(text: str, is_error: bool = False) -> ToolCallResponse:
    """Build a single-text-item tool response."""
    return ToolCallResponse(content=[{"type": "text", "text": text}], isError=is_error)
