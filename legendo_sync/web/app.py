"""
FastAPI Application

Main application factory for the LEGENDO SYNC service.
"""

import argparse
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from legendo_sync import __version__
from legendo_sync.payments import PaymentError

from . import dependencies
from .config import WebConfig, get_config
from .middleware import RequestIdMiddleware, RequestLoggingMiddleware
from .models import bad_request

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(levelname)s] %(asctime)s - %(name)s - %(message)s"


def _timestamp() -> str:
    return datetime.utcnow().isoformat() + "Z"


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if field:
        return f"Invalid {field}: {first.get('msg', 'invalid value')}"
    return first.get("msg", "Invalid request")


def create_app(config: Optional[WebConfig] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Optional configuration. Uses global config if not provided.

    Returns:
        FastAPI application instance
    """
    if config is None:
        config = get_config()

    dependencies.configure(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        logger.info(f"LEGENDO SYNC starting on {config.host}:{config.port}")
        app.state.started_at = time.monotonic()

        vault = dependencies.get_vault()
        vault.start_sweeping()

        yield

        logger.info("Shutting down LEGENDO SYNC...")
        vault.shutdown()
        logger.info("Server closed successfully")

    app = FastAPI(
        title="LEGENDO SYNC",
        description="Asset sync and PayPal payment service",
        version=__version__,
        lifespan=lifespan,
    )
    # Reset when the lifespan starts
    app.state.started_at = time.monotonic()

    # Added last runs first, so request ids exist before logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, dict):
            content = exc.detail
        else:
            content = {"error": exc.detail, "timestamp": _timestamp()}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content=bad_request(_validation_message(exc)))

    @app.exception_handler(PaymentError)
    async def payment_error_handler(request: Request, exc: PaymentError):
        logger.error(f"Request error: {exc}")
        content = {"error": str(exc), "timestamp": _timestamp()}
        if exc.details and config.debug:
            content["details"] = exc.details
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Request error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "timestamp": _timestamp()},
        )

    # Include routers
    from .routes import payment, sync, system

    app.include_router(sync.router, tags=["Sync"])
    app.include_router(payment.router, tags=["Payment"])
    app.include_router(system.router, prefix="/api/system", tags=["System"])

    # Health check
    @app.get("/health")
    async def health_check():
        """Health check endpoint. ``uptime`` is seconds since server startup."""
        return {
            "status": "healthy",
            "service": "LEGENDO SYNC",
            "timestamp": _timestamp(),
            "uptime": time.monotonic() - app.state.started_at,
            "entries": len(dependencies.get_vault()),
        }

    return app


def run_server(
    host: Optional[str] = None,
    port: Optional[int] = None,
    reload: bool = False,
) -> None:
    """
    Run the web server.

    Args:
        host: Host to bind to (default from config)
        port: Port to bind to (default from config)
        reload: Enable auto-reload for development
    """
    import uvicorn

    config = get_config()
    uvicorn.run(
        "legendo_sync.web.app:create_app",
        factory=True,
        host=host or config.host,
        port=port or config.port,
        reload=reload,
        log_level=config.log_level.lower(),
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="legendo-sync",
        description="Run the LEGENDO SYNC HTTP service",
    )
    parser.add_argument("--host", help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the LEGENDO SYNC service."""
    args = _build_parser().parse_args(argv)

    config = get_config()
    if args.log_level:
        config.log_level = args.log_level

    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    run_server(host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
