"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from cashflow_insights.orchestration.branch_store import BranchStore
from cashflow_insights.orchestration.comparison import ComparisonOrchestrator
from cashflow_insights.orchestration.dashboard import DashboardOrchestrator


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_branch_store(request: Request) -> BranchStore:
    return request.app.state.branch_store


def get_dashboard(request: Request) -> DashboardOrchestrator:
    """Provide the dashboard orchestrator started in the app lifespan"""
    return request.app.state.dashboard


def get_comparison(request: Request) -> ComparisonOrchestrator:
    """Provide the comparison orchestrator started in the app lifespan"""
    return request.app.state.comparison
