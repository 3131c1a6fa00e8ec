"""
Pydantic models for API request and response schemas.

These models provide automatic validation and OpenAPI documentation.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request schema for the /chat endpoint."""

    message: str = Field(
        ...,
        min_length=1,
        max_length=8000,
        description="The user's message",
        examples=["I'm vegetarian. What should I cook tonight?"],
    )
    user_id: str = Field(
        ...,
        min_length=1,
        max_length=256,
        description="User whose memories are read and updated",
        examples=["alice"],
    )


class ChatResponse(BaseModel):
    """Response schema for the /chat endpoint."""

    response: str = Field(description="Assistant answer")
    memories: list[str] = Field(
        default_factory=list,
        description="Memories recalled for this answer",
    )
    trace_id: Optional[str] = Field(
        default=None,
        description="Trace id of the request in Phoenix (None when tracing is off)",
    )


class AddMemoryRequest(BaseModel):
    """Request schema for POST /memories."""

    messages: list[dict[str, str]] | str = Field(
        ...,
        description="Chat messages (role/content) or plain text to remember",
        examples=["Alice is allergic to peanuts"],
    )
    user_id: str = Field(..., min_length=1, max_length=256)
    metadata: Optional[dict[str, Any]] = Field(default=None)


class SearchMemoryRequest(BaseModel):
    """Request schema for POST /memories/search."""

    query: str = Field(..., min_length=1, max_length=2000)
    user_id: str = Field(..., min_length=1, max_length=256)
    limit: int = Field(default=3, ge=1, le=50)


class MemoryListResponse(BaseModel):
    """Memory records as returned by mem0."""

    results: list[dict[str, Any]] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Response schema for the /health endpoint."""

    status: str = Field(description="Service health status", examples=["healthy"])
    version: str = Field(description="API version")
    tracing_enabled: bool = Field(description="Whether spans are exported to Phoenix")
    project_name: str = Field(description="Phoenix project receiving the traces")


class ErrorResponse(BaseModel):
    """Error response schema."""

    error: str = Field(description="Error type", examples=["internal_error"])
    message: str = Field(description="Human-readable error message")
