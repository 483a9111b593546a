"""Archive search service main application."""

import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from .api.routes import router as api_router
from .runtime.metrics import SERVICE_NAME, get_metrics_collector
from .search.search_manager import SearchManager
from libs.common.config import SearchConfig
from libs.common.logging import configure_logging
from libs.common.tracing import configure_tracing

logger = structlog.get_logger("archive_search")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    config: SearchConfig = app.state.config
    configure_logging(SERVICE_NAME, config.archive_log_level, config.archive_log_format)

    logger.info("Starting archive search service", env=config.archive_env)

    app.state.metrics_collector = get_metrics_collector(SERVICE_NAME)

    app.state.search_manager = SearchManager(
        config,
        metrics_collector=app.state.metrics_collector
    )
    await app.state.search_manager.initialize()

    logger.info("Archive search service started successfully")

    yield

    # Shutdown
    logger.info("Shutting down archive search service")
    await app.state.search_manager.cleanup()
    logger.info("Archive search service shutdown complete")


def create_app(config: Optional[SearchConfig] = None) -> FastAPI:
    """Build the FastAPI application.

    Tracing must be wired before the app starts serving, so it is configured
    here rather than in ``lifespan``.
    """
    config = config or SearchConfig()

    app = FastAPI(
        title="Archive Search Service",
        description="Archive search with batch-local TF-IDF re-ranking",
        version="0.1.0",
        lifespan=lifespan
    )
    app.state.config = config

    if config.archive_tracing_enabled:
        tracer = configure_tracing(
            SERVICE_NAME,
            config.archive_otel_exporter,
            environment=config.archive_env,
            app=app
        )
        if tracer:
            logger.info("OpenTelemetry tracing enabled", exporter=config.archive_otel_exporter)
        else:
            logger.warning("Tracing initialization failed")
    else:
        logger.info("OpenTelemetry tracing disabled via configuration")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api/v1")

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add processing time header to responses."""
        start_time = time.time()
        response = await call_next(request)
        response.headers["X-Process-Time"] = str(time.time() - start_time)
        return response

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Collect metrics for HTTP requests."""
        start_time = time.time()

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            logger.error("Unhandled request error", path=request.url.path, error=str(e))
            status_code = 500
            response = JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "detail": str(e)}
            )

        if hasattr(request.app.state, "metrics_collector"):
            request.app.state.metrics_collector.record_http_request(
                method=request.method,
                endpoint=request.url.path,
                status=status_code,
                duration=time.time() - start_time
            )

        return response

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        search_manager = getattr(request.app.state, "search_manager", None)
        if search_manager is not None and await search_manager.health_check():
            return {"status": "healthy", "service": SERVICE_NAME}
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "service": SERVICE_NAME}
        )

    @app.get("/metrics")
    async def metrics(request: Request):
        """Prometheus metrics endpoint."""
        if hasattr(request.app.state, "metrics_collector"):
            metrics_data = request.app.state.metrics_collector.get_metrics()
            return Response(content=metrics_data, media_type="text/plain")
        return Response(content="# No metrics available\n", media_type="text/plain")

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": SERVICE_NAME,
            "version": "0.1.0",
            "status": "running",
            "endpoints": {
                "health": "/health",
                "metrics": "/metrics",
                "search": "/api/v1/search",
                "item": "/api/v1/items/{identifier}"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "archive_search.main:app",
        host="0.0.0.0",
        port=SearchConfig().archive_search_port,
        log_level="info"
    )
