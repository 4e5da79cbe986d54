"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from commission_schedule.api.middleware import RequestIDMiddleware, MetricsMiddleware
from commission_schedule.api.v1 import calendar, installments, sales, schedules
from commission_schedule.infrastructure.observability.logging import setup_logging
from commission_schedule.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Commission Schedule Service",
        description="Sales and their commission installment schedules",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(sales.router, prefix="/v1", tags=["sales"])
    app.include_router(installments.router, prefix="/v1", tags=["installments"])
    app.include_router(calendar.router, prefix="/v1", tags=["pay-calendar"])
    app.include_router(schedules.router, prefix="/v1", tags=["schedules"])

    return app


app = create_app()
