"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import date
from typing import List, Optional, Tuple


class StateSchema(BaseModel):
    """Read from domain dataclasses by attribute"""

    model_config = ConfigDict(from_attributes=True)


class BranchSelectionRequest(BaseModel):
    """Request body for PUT /v1/comparison/selection"""

    primary: str = Field("", description="Primary branch code; empty skips the fetch")
    secondary: str = Field("", description="Secondary branch code; empty skips the fetch")
    horizon_days: Optional[int] = Field(None, ge=1, le=365, description="Forecast horizon in days")


class BranchRequest(BaseModel):
    """Request body for PUT /v1/dashboard/branch"""

    account_code: str = Field(..., min_length=1, description="Branch code")


class SliderRequest(BaseModel):
    """Request body for PUT /v1/dashboard/simulation"""

    inflow_delta: Optional[float] = Field(None, ge=-100, le=100, description="Inflow adjustment in percent")
    outflow_delta: Optional[float] = Field(None, ge=-100, le=100, description="Outflow adjustment in percent")
    horizon_days: Optional[int] = Field(None, ge=1, le=365)


class BranchesResponse(BaseModel):
    branches: List[str]
    current: str


class ForecastPointSchema(StateSchema):
    date: date
    projected: float
    low: float
    high: float


class ForecastSeriesSchema(StateSchema):
    account_code: str
    starting_balance: float
    horizon_days: int
    points: List[ForecastPointSchema]
    model_description: str


class TransactionSchema(StateSchema):
    date: date
    account_code: str
    category: Optional[str] = None
    credit_amount: Optional[float] = None
    debit_amount: Optional[float] = None
    balance: Optional[float] = None
    description: Optional[str] = None


class SummaryMetricSchema(StateSchema):
    label: str
    formatted_value: str
    change_description: str
    trend: str


class DriverBreakdownSchema(StateSchema):
    label: str
    weight_percent: int


class SimulationStateSchema(StateSchema):
    headline: str
    projection: float
    inflow: float
    outflow: float
    narrative: str


class FeedInsightSchema(StateSchema):
    title: str
    detail: str
    impact: str
    confidence: str


class NextBestActionSchema(StateSchema):
    title: str
    description: str
    priority: str
    owner: str


class EarlyWarningSchema(StateSchema):
    severity: str
    message: str
    date: Optional[str] = None


class InsightFeedSchema(StateSchema):
    cards: List[FeedInsightSchema]
    next_best_actions: List[NextBestActionSchema]
    warnings: List[EarlyWarningSchema]


class SliderSchema(StateSchema):
    inflow_delta: float
    outflow_delta: float
    horizon_days: int


class DashboardResponse(StateSchema):
    """Response for GET /v1/dashboard"""

    account_code: str
    sliders: SliderSchema
    transactions: List[TransactionSchema]
    forecast: Optional[ForecastSeriesSchema] = None
    feed: InsightFeedSchema
    simulation: SimulationStateSchema
    metrics: List[SummaryMetricSchema]
    drivers: List[DriverBreakdownSchema]
    chart_path: str
    band_path: str


class BranchSelectionSchema(StateSchema):
    primary_code: str
    secondary_code: str
    horizon_days: int


class SeriesStatsSchema(StateSchema):
    code: str
    start: float
    final: float
    growth: float
    average: float
    swing: float


class ComparisonContextSchema(StateSchema):
    primary: SeriesStatsSchema
    secondary: SeriesStatsSchema
    leading: SeriesStatsSchema
    lagging: SeriesStatsSchema
    projected_gap: float


class InsightMetricSchema(StateSchema):
    label: str
    primary_value: str
    secondary_value: str


class InsightCardSchema(StateSchema):
    title: str
    badge_kind: str
    summary: str
    recommendation: str
    focus_branch_code: str
    metrics: List[InsightMetricSchema]


class BalanceShareSchema(StateSchema):
    label: str
    value: float
    percentage: float
    start_degrees: float
    end_degrees: float


class ComparisonResponse(StateSchema):
    """Response for GET /v1/comparison"""

    selection: BranchSelectionSchema
    primary: Optional[ForecastSeriesSchema] = None
    secondary: Optional[ForecastSeriesSchema] = None
    chart_paths: Optional[Tuple[str, str]] = None
    balance_share: List[BalanceShareSchema]
    context: Optional[ComparisonContextSchema] = None
    insights: List[InsightCardSchema]
    scenario: str
    is_loading: bool
