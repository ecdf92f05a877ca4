"""
FastAPI Application Factory.
Creates and configures the FastAPI application with all routers, middleware, and DI.

Endpoints:
- POST /chat/threads, GET|POST /chat/threads/{id}/messages, POST /chat/threads/{id}/read
- GET /chat/inbox/lister, GET /chat/inbox/client
- WS /chat/threads/{id}/events
"""

import logging
from contextlib import asynccontextmanager

from dishka import AsyncContainer
from dishka.integrations.fastapi import setup_dishka
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from marketplace_chat.config.logging_config import (
    CORRELATION_ID_HEADER,
    bind_correlation_id,
    correlation_id_var,
)
from marketplace_chat.domain.exceptions import ChatError
from marketplace_chat.presentation.api import events_router, inbox_router, threads_router
from marketplace_chat.presentation.errors import chat_error_response, error_body

logger = logging.getLogger(__name__)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Binds the request's X-Correlation-ID for logging and echoes it back."""

    async def dispatch(self, request: Request, call_next):
        token = bind_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        try:
            response = await call_next(request)
        finally:
            correlation_id = correlation_id_var.get()
            correlation_id_var.reset(token)
        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager.

    - Startup: container already created and attached by setup_dishka
    - Shutdown: close the DI container (disconnects Prisma, closes Redis)
    """
    logger.info("FastAPI application started. DI container initialized.")
    yield
    await app.state.dishka_container.close()
    logger.info("FastAPI application shutdown. DI container closed.")


def create_fastapi_app(container: AsyncContainer) -> FastAPI:
    """
    Application factory for creating FastAPI app.

    Args:
        container: dishka container; it must exist before the app starts
            because setup_dishka adds middleware

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Marketplace Chat API",
        description="Conversations between buyers and listers about property listings",
        version="1.0.0",
        lifespan=lifespan,
    )

    setup_dishka(container, app)

    # Correlation ID middleware (must be added before CORS)
    app.add_middleware(CorrelationIdMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ChatError)
    async def chat_error_handler(request: Request, exc: ChatError):
        logger.info(f"[HTTP] {request.method} {request.url.path} -> {exc.code.value}: {exc.message}")
        return chat_error_response(exc)

    # Validation error handler - shows detailed Pydantic errors
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        logger.info(f"[VALIDATION ERROR] {errors}")
        return JSONResponse(
            status_code=422,
            content=error_body("INVALID_REQUEST", "Validation error", errors),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.info(f"[HTTP ERROR {exc.status_code}] {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body("HTTP_ERROR", str(exc.detail)),
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"[GLOBAL ERROR] {type(exc).__name__}: {exc}")
        return JSONResponse(
            status_code=500,
            content=error_body("INTERNAL", "Internal server error"),
        )

    # Health check routes
    @app.get("/", tags=["health"])
    async def root():
        return {"message": "FastAPI server is running."}

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "healthy"}

    app.include_router(threads_router)
    app.include_router(inbox_router)
    app.include_router(events_router)

    return app
