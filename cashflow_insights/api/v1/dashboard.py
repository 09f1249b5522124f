"""Dashboard endpoints - branch selection, what-if sliders and derived state"""

import logging
from fastapi import APIRouter, Depends, Query, Request

from cashflow_insights.api.v1.schemas import (
    BranchesResponse,
    BranchRequest,
    DashboardResponse,
    SliderRequest,
)
from cashflow_insights.api.dependencies import get_branch_store, get_dashboard, get_request_id
from cashflow_insights.config import settings
from cashflow_insights.orchestration.branch_store import BranchStore
from cashflow_insights.orchestration.dashboard import DashboardOrchestrator

router = APIRouter()


@router.get("/branches", response_model=BranchesResponse)
def list_branches(branch_store: BranchStore = Depends(get_branch_store)):
    """Selectable branch codes and the active one"""
    return BranchesResponse(branches=settings.branch_codes, current=branch_store.current)


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard_state(
    wait: bool = Query(False, description="Wait for pending fetches before answering"),
    dashboard: DashboardOrchestrator = Depends(get_dashboard),
):
    """Current dashboard snapshot"""
    if wait:
        await dashboard.wait_idle()
    return DashboardResponse.model_validate(dashboard.state)


@router.put("/dashboard/branch", response_model=DashboardResponse)
async def select_branch(
    request_body: BranchRequest,
    request: Request,
    dashboard: DashboardOrchestrator = Depends(get_dashboard),
):
    """
    Switch the dashboard to another branch.

    Responds with the snapshot as of the switch; the feeds refresh in the
    background and show up on later reads.
    """
    logging.info(
        "Branch selected",
        extra={"request_id": get_request_id(request), "account_code": request_body.account_code},
    )
    dashboard.set_branch(request_body.account_code)
    return DashboardResponse.model_validate(dashboard.state)


@router.put("/dashboard/simulation", response_model=DashboardResponse)
async def update_sliders(
    request_body: SliderRequest,
    dashboard: DashboardOrchestrator = Depends(get_dashboard),
):
    """Move the what-if sliders"""
    dashboard.set_sliders(
        inflow_delta=request_body.inflow_delta,
        outflow_delta=request_body.outflow_delta,
        horizon_days=request_body.horizon_days,
    )
    return DashboardResponse.model_validate(dashboard.state)
