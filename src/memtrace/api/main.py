"""
FastAPI application for the memtrace REST API.

Run with:
    uvicorn memtrace.api.main:app --reload

Or use the CLI:
    memtrace serve
"""

import logging
from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import APIRouter, Depends, FastAPI, HTTPException, status

from memtrace import __version__
from memtrace.api.models import (
    AddMemoryRequest,
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
    MemoryListResponse,
    SearchMemoryRequest,
)
from memtrace.chat.assistant import MemoryAssistant
from memtrace.config import settings
from memtrace.memory.traced import TracedMemory
from memtrace.tracing import is_tracing_active, setup_tracing, shutdown_tracing

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    500: {"model": ErrorResponse, "description": "Memory store or LLM failure"},
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
        - Register the Phoenix tracer provider (before any client is built)

    Shutdown:
        - Flush pending spans
    """
    logger.info("Starting memtrace API...")
    setup_tracing()

    yield

    logger.info("Shutting down memtrace API...")
    shutdown_tracing()


def _internal_error(e: Exception) -> HTTPException:
    logger.error(f"Request failed: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": "internal_error", "message": str(e)},
    )


@lru_cache
def _build_memory() -> TracedMemory:
    from memtrace.memory.client import create_memory

    return TracedMemory(create_memory())


@lru_cache
def _build_assistant() -> MemoryAssistant:
    from memtrace.llm.factory import create_llm

    return MemoryAssistant(memory=_build_memory(), llm=create_llm())


def get_memory() -> TracedMemory:
    """Memory client shared by all requests."""
    try:
        return _build_memory()
    except Exception as e:
        raise _internal_error(e)


def get_assistant() -> MemoryAssistant:
    """Assistant shared by all requests."""
    try:
        return _build_assistant()
    except Exception as e:
        raise _internal_error(e)


router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["System"])
def health_check() -> HealthResponse:
    """Health check endpoint for liveness/readiness probes."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        tracing_enabled=is_tracing_active(),
        project_name=settings.phoenix_project_name,
    )


@router.post("/chat", response_model=ChatResponse, responses=ERROR_RESPONSES, tags=["Chat"])
def chat_endpoint(
    request: ChatRequest,
    assistant: MemoryAssistant = Depends(get_assistant),
) -> ChatResponse:
    """
    Answer a message using the user's memories.

    The turn is traced as `chat_with_memory`; the returned trace id can be
    looked up in the Phoenix Projects view.
    """
    try:
        result = assistant.chat(request.message, user_id=request.user_id)
    except Exception as e:
        raise _internal_error(e)

    return ChatResponse(
        response=result.response,
        memories=result.memories,
        trace_id=result.trace_id,
    )


@router.post(
    "/memories",
    response_model=MemoryListResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["Memories"],
)
def add_memory(
    request: AddMemoryRequest,
    memory: TracedMemory = Depends(get_memory),
) -> MemoryListResponse:
    """Store messages or text as memories for a user."""
    try:
        results = memory.add(request.messages, user_id=request.user_id, metadata=request.metadata)
    except Exception as e:
        raise _internal_error(e)
    return MemoryListResponse(results=results)


@router.post(
    "/memories/search",
    response_model=MemoryListResponse,
    responses=ERROR_RESPONSES,
    tags=["Memories"],
)
def search_memories(
    request: SearchMemoryRequest,
    memory: TracedMemory = Depends(get_memory),
) -> MemoryListResponse:
    """Search a user's memories."""
    try:
        results = memory.search(request.query, user_id=request.user_id, limit=request.limit)
    except Exception as e:
        raise _internal_error(e)
    return MemoryListResponse(results=results)


@router.get(
    "/memories/{user_id}",
    response_model=MemoryListResponse,
    responses=ERROR_RESPONSES,
    tags=["Memories"],
)
def list_memories(
    user_id: str,
    memory: TracedMemory = Depends(get_memory),
) -> MemoryListResponse:
    """List every memory stored for a user."""
    try:
        results = memory.get_all(user_id=user_id)
    except Exception as e:
        raise _internal_error(e)
    return MemoryListResponse(results=results)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="memtrace",
        description="Memory-augmented chat traced with Arize Phoenix",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.include_router(router)
    return app


# Create app instance
app = create_app()
