"""FastAPI application factory"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from cashflow_insights.api.middleware import RequestIDMiddleware, MetricsMiddleware
from cashflow_insights.api.v1 import comparison, dashboard
from cashflow_insights.infrastructure.clients.cashflow_api import CashflowAPIClient
from cashflow_insights.infrastructure.observability.logging import setup_logging
from cashflow_insights.orchestration.branch_store import BranchStore
from cashflow_insights.orchestration.comparison import ComparisonOrchestrator
from cashflow_insights.orchestration.dashboard import DashboardOrchestrator
from cashflow_insights.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app(api_client: CashflowAPIClient | None = None) -> FastAPI:
    """Create and configure FastAPI application"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = api_client or CashflowAPIClient()
        app.state.branch_store = BranchStore()
        app.state.dashboard = DashboardOrchestrator(client, app.state.branch_store)
        app.state.comparison = ComparisonOrchestrator(client)

        app.state.dashboard.start()
        app.state.comparison.start()
        try:
            yield
        finally:
            await app.state.dashboard.close()
            await app.state.comparison.close()

    app = FastAPI(
        title="Cashflow Insights",
        description="Branch cashflow analytics: KPIs, forecast charts and comparison insights",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])
    app.include_router(comparison.router, prefix="/v1", tags=["comparison"])

    return app


app = create_app()
