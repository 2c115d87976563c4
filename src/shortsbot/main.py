"""
ShortsBot API application.

``create_app()`` assembles the service: CORS for the Shorts frontend, the
error envelope for ShortsBot exceptions, request tracing headers and the v1
routers. On shutdown, background jobs are cancelled before the provider
connections they use are closed.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shortsbot import __version__
from shortsbot.api.v1 import api_router
from shortsbot.core.config import get_settings
from shortsbot.core.dependencies import get_orchestrator, reset_services
from shortsbot.core.exceptions import ShortsBotException

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def configure_logging(debug: bool) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    logger.info(f"ShortsBot API v{__version__} starting ({settings.environment})")

    yield

    provider = app.dependency_overrides.get(get_orchestrator, get_orchestrator)
    orchestrator = provider()
    await orchestrator.shutdown()
    await orchestrator.aclose()
    reset_services()
    logger.info("ShortsBot API stopped")


def create_app() -> FastAPI:
    """
    Build the FastAPI application.

    OpenAPI docs are served only in development.

    Returns:
        Configured application instance
    """
    settings = get_settings()
    configure_logging(settings.debug)
    docs_enabled = settings.is_development

    app = FastAPI(
        title=settings.app_name,
        description="Trend-to-Shorts pipeline with YouTube publishing",
        version=__version__,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        expose_headers=[REQUEST_ID_HEADER, "X-Process-Time"],
    )
    register_exception_handlers(app)
    register_middleware(app)
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        return {
            "name": settings.app_name,
            "version": __version__,
            "health": f"{settings.api_v1_prefix}/health",
            "docs": "/docs" if docs_enabled else "",
        }

    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Render errors in the ``{"error": {code, message, details}}`` envelope."""

    @app.exception_handler(ShortsBotException)
    async def shortsbot_exception_handler(
        request: Request,
        exc: ShortsBotException,
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning(
                f"{exc.code} on {request.url.path}: {exc.message}",
                extra={"details": exc.details},
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        logger.exception(
            f"Unhandled {type(exc).__name__} on {request.url.path}",
            extra={"request_id": getattr(request.state, "request_id", None)},
        )
        details: dict[str, Any] = {}
        if get_settings().is_development:
            details = {"error_type": type(exc).__name__, "error": str(exc)}
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "details": details,
                }
            },
        )


def register_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def trace_request(request: Request, call_next: Any) -> Any:
        """
        Tag every response with a request id and its processing time.

        A request id supplied by the caller is kept so frontend logs and job
        polling can be correlated.
        """
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = f"{time.perf_counter() - started:.6f}"
        return response


app = create_app()
