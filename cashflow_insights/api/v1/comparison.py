"""Branch comparison endpoints"""

import logging
from fastapi import APIRouter, Depends, Query, Request

from cashflow_insights.api.v1.schemas import BranchSelectionRequest, ComparisonResponse
from cashflow_insights.api.dependencies import get_comparison, get_request_id
from cashflow_insights.orchestration.comparison import ComparisonOrchestrator

router = APIRouter()


@router.get("/comparison", response_model=ComparisonResponse)
async def get_comparison_state(
    wait: bool = Query(False, description="Wait for the debounce window and pending fetches"),
    comparison: ComparisonOrchestrator = Depends(get_comparison),
):
    if wait:
        await comparison.wait_idle()
    return ComparisonResponse.model_validate(comparison.state)


@router.put("/comparison/selection", response_model=ComparisonResponse)
async def select_pair(
    request_body: BranchSelectionRequest,
    request: Request,
    comparison: ComparisonOrchestrator = Depends(get_comparison),
):
    """Change the compared branches or horizon; returns the raw selection straight away"""
    selection = comparison.select(request_body.primary, request_body.secondary, request_body.horizon_days)
    logging.info(
        "Comparison selection changed",
        extra={
            "request_id": get_request_id(request),
            "primary": selection.primary_code,
            "secondary": selection.secondary_code,
            "horizon_days": selection.horizon_days,
        },
    )
    return ComparisonResponse.model_validate(comparison.state)
