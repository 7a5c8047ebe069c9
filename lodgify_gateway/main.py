import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from lodgify_gateway.core.config import Settings, settings as default_settings
from lodgify_gateway.core.logging import get_logger, setup_logging
from lodgify_gateway.exceptions import OperationError
from lodgify_gateway.orchestrator import ApiOrchestrator, create_orchestrator


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Take X-Request-ID from the request or generate one, and echo it back."""

    def __init__(self, app, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers[self.header_name] = request_id
        return response


def create_app(
    config: Optional[Settings] = None,
    orchestrator: Optional[ApiOrchestrator] = None,
) -> FastAPI:
    """Create the diagnostics service.

    Args:
        config: Settings, the process settings when None
        orchestrator: Pre-built orchestrator; it is not closed on shutdown

    Returns:
        Configured FastAPI application instance
    """
    config = config or default_settings
    setup_logging()
    logger = get_logger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Build the orchestrator on startup and close it on shutdown."""
        owned = orchestrator is None
        if orchestrator is not None:
            app.state.orchestrator = orchestrator
        elif config.lodgify_api_key:
            app.state.orchestrator = create_orchestrator(config)
        else:
            logger.warning("LODGIFY_API_KEY is not set; health checks will report unavailable")
            app.state.orchestrator = None

        logger.info(
            "Application startup complete",
            extra={"read_only": config.lodgify_read_only, "debug_mode": config.debug},
        )
        yield

        if owned and app.state.orchestrator is not None:
            await app.state.orchestrator.aclose()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Lodgify Gateway",
        description="Rate-limited, retrying access layer for the Lodgify API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_middleware(RequestIdMiddleware)

    def unavailable() -> JSONResponse:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "message": "LODGIFY_API_KEY is not configured"},
        )

    @app.get("/health")
    async def health(request: Request) -> Any:
        """Aggregate module health, read-only flag and rate-limit status."""
        current: Optional[ApiOrchestrator] = request.app.state.orchestrator
        if current is None:
            return unavailable()

        report = await current.health_check()
        content = {
            "status": "ok" if report.healthy else "degraded",
            "read_only": current.read_only,
            "rate_limit": current.rate_limit_status().to_dict(),
            "modules": report.to_dict()["modules"],
        }
        return JSONResponse(status_code=200 if report.healthy else 503, content=content)

    @app.get("/health/rate-limit")
    async def rate_limit(request: Request) -> Any:
        current: Optional[ApiOrchestrator] = request.app.state.orchestrator
        if current is None:
            return unavailable()
        return current.rate_limit_status().to_dict()

    @app.exception_handler(OperationError)
    async def operation_error_handler(request: Request, exc: OperationError) -> JSONResponse:
        """Return the error's own status and wire shape."""
        logger.warning(f"Lodgify operation failed: {exc.message}")
        return JSONResponse(status_code=exc.status, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Log unhandled exceptions; expose the message only in debug mode."""
        request_id = getattr(request.state, "request_id", "unknown")
        logger.exception(
            f"Unhandled exception [request_id={request_id}]",
            extra={"request_id": request_id},
        )
        if config.debug:
            return JSONResponse(
                status_code=500,
                content={
                    "error": "internal_error",
                    "message": str(exc),
                    "exception_type": type(exc).__name__,
                    "request_id": request_id,
                },
            )
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_error",
                "message": "An internal error occurred",
                "request_id": request_id,
            },
        )

    return app


app = create_app()
