"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Literal, Optional

Trend = Literal["up", "down", "flat"]
BadgeKind = Literal["Momentum", "Action"]


@dataclass(frozen=True)
class ForecastPoint:
    """Single projected balance with its confidence band"""

    date: date
    projected: float
    low: float
    high: float


@dataclass
class ForecastSeries:
    """Balance forecast for one branch over a horizon"""

    account_code: str
    starting_balance: float
    horizon_days: int
    points: List[ForecastPoint] = field(default_factory=list)  # ascending by date
    model_description: str = ""
    forecast_start: Optional[date] = None


@dataclass(frozen=True)
class Transaction:
    """Bank transaction from the cashflow API"""

    date: date
    account_code: str
    category: Optional[str] = None
    credit_amount: Optional[float] = None
    debit_amount: Optional[float] = None
    balance: Optional[float] = None
    description: Optional[str] = None
    counterparty: Optional[str] = None
    reference: Optional[str] = None
    currency: str = "ZAR"


@dataclass
class PagedTransactions:
    """One page of transactions, most recent first"""

    items: List[Transaction]
    page_number: int = 1
    page_size: int = 0
    total_count: int = 0


@dataclass(frozen=True)
class DailySummary:
    """Credits, debits and net flow for one day"""

    date: date
    account_code: str
    total_credits: float
    total_debits: float
    net_flow: float


@dataclass(frozen=True)
class SummaryMetric:
    """Display-ready KPI tile"""

    label: str
    formatted_value: str
    change_description: str
    trend: Trend


@dataclass(frozen=True)
class DriverBreakdown:
    """Share of cash movement attributed to one category"""

    label: str
    weight_percent: int


@dataclass(frozen=True)
class BranchSelection:
    """Pair of branches and horizon driving the comparison pipeline"""

    primary_code: str
    secondary_code: str
    horizon_days: int

    @property
    def branch_codes(self) -> tuple[str, str]:
        return (self.primary_code, self.secondary_code)

    @property
    def is_valid(self) -> bool:
        return bool(self.primary_code) and bool(self.secondary_code)


@dataclass(frozen=True)
class SimulationSelection:
    """What-if slider values for one branch"""

    account_code: str
    inflow_adjustment_percent: float
    outflow_adjustment_percent: float
    horizon_days: int


@dataclass(frozen=True)
class SimulationResult:
    """One outcome returned by the what-if simulation"""

    adjusted_inflow: float
    adjusted_outflow: float
    projected_balance: float
    narrative: str


@dataclass(frozen=True)
class SimulationState:
    """Simulation panel contents derived from the first simulation result"""

    headline: str
    projection: float
    inflow: float
    outflow: float
    narrative: str


DEFAULT_SIMULATION_STATE = SimulationState(
    headline="Adjust inflows/outflows to stress test your balance",
    projection=0.0,
    inflow=0.0,
    outflow=0.0,
    narrative="",
)


@dataclass(frozen=True)
class FeedInsight:
    """Server-generated insight card mapped for display"""

    title: str
    detail: str
    impact: Literal["Positive", "Neutral", "Risk"]
    confidence: Literal["High", "Medium", "Low"]


@dataclass(frozen=True)
class NextBestAction:
    title: str
    description: str
    priority: Literal["Low", "Medium", "High"]
    owner: str


@dataclass(frozen=True)
class EarlyWarning:
    severity: Literal["info", "warning", "critical"]
    message: str
    date: Optional[str] = None


@dataclass
class InsightFeed:
    """Raw insight feed for one branch, mapped for display"""

    account_code: str = ""
    cards: List[FeedInsight] = field(default_factory=list)
    next_best_actions: List[NextBestAction] = field(default_factory=list)
    warnings: List[EarlyWarning] = field(default_factory=list)


@dataclass(frozen=True)
class SeriesStats:
    """Growth, average and swing of one forecast series"""

    code: str
    start: float
    final: float
    growth: float
    average: float
    swing: float


@dataclass(frozen=True)
class ComparisonContext:
    """Derived statistics for a pair of forecast series"""

    selection: BranchSelection
    primary: SeriesStats
    secondary: SeriesStats
    leading: SeriesStats
    lagging: SeriesStats
    projected_gap: float


@dataclass(frozen=True)
class InsightMetric:
    label: str
    primary_value: str
    secondary_value: str


@dataclass(frozen=True)
class InsightCard:
    """Narrative comparison insight"""

    title: str
    badge_kind: BadgeKind
    summary: str
    recommendation: str
    focus_branch_code: str
    metrics: List[InsightMetric] = field(default_factory=list)


@dataclass(frozen=True)
class BalanceShare:
    """Slice of the starting-balance split between compared branches"""

    label: str
    value: float
    percentage: float
    start_degrees: float
    end_degrees: float
