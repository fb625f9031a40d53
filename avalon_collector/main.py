# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Avalon Error Collector service.

Run with ``avalon-collector`` (or ``python -m avalon_collector.main``), or
under uvicorn directly::

    uvicorn avalon_collector.main:create_app --factory
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from avalon_config import TypedConfig
from avalon_logging import Logger, create_logger, create_uvicorn_log_config
from avalon_metrics import MetricsCollector, create_metrics_collector
from avalon_storage import DocumentStore, create_document_store

from . import SERVICE_NAME, __version__
from .config import load_collector_config
from .context import build_context
from .dependencies import get_context
from .errors import CollectorError, NotFound
from .routes import (
    api_keys_router,
    auth_router,
    errors_router,
    realtime_router,
    samples_router,
    settings_router,
)


def _error_body(message: str) -> Dict[str, Any]:
    return {"status": "error", "message": message}


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    return f"{location}: {first['msg']}" if location else first["msg"]


def register_exception_handlers(app: FastAPI, logger: Logger) -> None:
    """Answer every failure as ``{"status": "error", "message": ...}`` without internals."""

    @app.exception_handler(CollectorError)
    async def collector_error_handler(request: Request, exc: CollectorError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "Request failed",
                path=request.url.path,
                error=exc.message,
                cause=repr(exc.__cause__) if exc.__cause__ else None,
            )
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content=_error_body(_validation_message(exc)))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=_error_body(str(exc.detail)), headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content=_error_body("Internal server error"))


def _create_document_store(config: TypedConfig) -> DocumentStore:
    if config.document_store_type.lower() in ("mongodb", "mongo"):
        return create_document_store(
            config.document_store_type,
            host=config.mongo_host,
            port=config.mongo_port,
            username=config.mongo_username,
            password=config.mongo_password,
            database=config.mongo_database,
        )
    return create_document_store(config.document_store_type)


def create_app(
    config: Optional[TypedConfig] = None,
    document_store: Optional[DocumentStore] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    logger: Optional[Logger] = None,
    metrics: Optional[MetricsCollector] = None,
) -> FastAPI:
    """Build the collector application.

    Every collaborator can be injected; anything omitted is created from
    the configuration (which itself defaults to the environment). A
    caller-supplied HTTP client is left open on shutdown.
    """
    config = config or load_collector_config()
    logger = logger or create_logger(logger_type=config.log_type, level=config.log_level, name="avalon_collector")
    metrics = metrics or create_metrics_collector(config.metrics_type)
    document_store = document_store or _create_document_store(config)
    owns_http_client = http_client is None

    context = build_context(config, document_store, logger, metrics, http_client=http_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Avalon collector", version=__version__, document_store=config.document_store_type)
        await run_in_threadpool(document_store.connect)
        await context.auth.seed_admin(config.admin_username, config.admin_password)
        logger.info("Avalon collector started")

        yield

        logger.info("Shutting down Avalon collector")
        await context.gate.drain()
        if owns_http_client:
            await context.http_client.aclose()
        await run_in_threadpool(document_store.disconnect)

    app = FastAPI(
        title="Avalon Error Collector",
        version=__version__,
        description="Error ingestion with webhook and real-time notifications",
        lifespan=lifespan,
    )
    app.state.collector = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app, logger)

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "Avalon - Error Collector is running."

    @app.get("/health")
    async def health(request: Request) -> Dict[str, Any]:
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "version": __version__,
            "connectedClients": get_context(request).broker.connected_count,
        }

    @app.get("/metrics")
    async def metrics_endpoint(request: Request) -> Response:
        rendered = get_context(request).metrics.render()
        if rendered is None:
            raise NotFound("Metrics are not enabled")
        body, content_type = rendered
        return Response(content=body, media_type=content_type)

    app.include_router(errors_router)
    app.include_router(auth_router)
    app.include_router(api_keys_router)
    app.include_router(settings_router)
    app.include_router(realtime_router)
    if config.enable_test_routes:
        app.include_router(samples_router)
        logger.warning("Sample event routes are enabled")

    return app


def main() -> None:
    config = load_collector_config()
    app = create_app(config)
    uvicorn.run(
        app,
        host=config.http_host,
        port=config.http_port,
        log_config=create_uvicorn_log_config(SERVICE_NAME, config.log_level),
    )


if __name__ == "__main__":
    main()
