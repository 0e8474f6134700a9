"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from receivables_exchange.api.errors import register_exception_handlers
from receivables_exchange.api.middleware import RequestIDMiddleware, MetricsMiddleware
from receivables_exchange.api.v1 import accounts, receivables, securities, transactions, watchlist, notifications
from receivables_exchange.infrastructure.observability.logging import setup_logging
from receivables_exchange.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Receivables Exchange",
        description="Marketplace for securitized trade receivables",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(accounts.router, prefix="/v1", tags=["accounts"])
    app.include_router(receivables.router, prefix="/v1", tags=["receivables"])
    app.include_router(securities.router, prefix="/v1", tags=["securities"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(watchlist.router, prefix="/v1", tags=["watchlist"])
    app.include_router(notifications.router, prefix="/v1", tags=["notifications"])

    return app


app = create_app()
