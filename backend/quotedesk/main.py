"""
quotedesk API
Proxies Finnhub quotes for the trading dashboard.

Usage:
  uvicorn quotedesk.main:app --port 3002
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quotedesk.api.routes import finnhub_router, router
from quotedesk.config.settings import settings
from quotedesk.errors import QuoteDeskError
from quotedesk.providers.integration import QuoteIntegration
from quotedesk.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(service_name="quotedesk")
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(settings.providers.finnhub_http_timeout_seconds, connect=5.0),
        limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
    ) as http_client:
        integration = QuoteIntegration.from_settings(settings.providers, http_client)
        if not integration.is_available:
            logger.warning("finnhub_unavailable", reason=integration.reason)
        app.state.quote_integration = integration
        logger.info("quotedesk_started", finnhub_available=integration.is_available)
        yield
    logger.info("quotedesk_stopped")


async def handle_quotedesk_error(request: Request, exc: QuoteDeskError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


def create_app() -> FastAPI:
    app = FastAPI(title="quotedesk", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(QuoteDeskError, handle_quotedesk_error)
    app.include_router(router)
    app.include_router(finnhub_router)
    return app


app = create_app()
