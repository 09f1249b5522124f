"""Single-branch dashboard pipeline

Each feed of the dashboard is its own stream with its own latest-wins gate:

- transactions, daily summary and insights follow the selected branch
- the forecast follows the branch and the horizon slider
- the what-if simulation follows the branch and all sliders, debounced

A committed feed triggers re-derivation of the KPI tiles, driver breakdown
and chart paths before subscribers are notified.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional

from cashflow_insights.config import settings
from cashflow_insights.domain.geometry import build_band_path, build_line_path
from cashflow_insights.domain.metrics import compute_driver_breakdown, compute_summary_metrics
from cashflow_insights.domain.models import (
    DEFAULT_SIMULATION_STATE,
    DailySummary,
    DriverBreakdown,
    ForecastSeries,
    InsightFeed,
    PagedTransactions,
    SimulationResult,
    SimulationSelection,
    SimulationState,
    SummaryMetric,
    Transaction,
)
from cashflow_insights.infrastructure.clients.cashflow_api import CashflowAPIClient
from cashflow_insights.orchestration.branch_store import BranchStore
from cashflow_insights.orchestration.streams import Debouncer, LatestWins, StreamOrchestrator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SliderValues:
    """What-if slider positions"""

    inflow_delta: float
    outflow_delta: float
    horizon_days: int


@dataclass(frozen=True)
class DashboardState:
    """Everything the dashboard view renders"""

    account_code: str
    sliders: SliderValues
    transactions: List[Transaction] = field(default_factory=list)
    daily_summaries: List[DailySummary] = field(default_factory=list)
    forecast: Optional[ForecastSeries] = None
    feed: InsightFeed = field(default_factory=InsightFeed)
    simulation: SimulationState = DEFAULT_SIMULATION_STATE
    metrics: List[SummaryMetric] = field(default_factory=list)
    drivers: List[DriverBreakdown] = field(default_factory=list)
    chart_path: str = ""
    band_path: str = ""


def simulation_state_from_results(results: List[SimulationResult]) -> SimulationState:
    """The panel shows the first result; no results means the default prompt"""
    if not results:
        return DEFAULT_SIMULATION_STATE

    first = results[0]
    return SimulationState(
        headline=first.narrative,
        projection=first.projected_balance,
        inflow=first.adjusted_inflow,
        outflow=first.adjusted_outflow,
        narrative=first.narrative,
    )


class DashboardOrchestrator(StreamOrchestrator[DashboardState]):
    """Drives the per-branch feeds and derivations of the dashboard"""

    def __init__(
        self,
        api: CashflowAPIClient,
        branch_store: BranchStore,
        debounce_seconds: float | None = None,
        page_size: int | None = None,
    ):
        super().__init__()
        self.api = api
        self.branch_store = branch_store
        self.page_size = page_size or settings.transactions_page_size

        self.transactions_gate = LatestWins("transactions")
        self.summary_gate = LatestWins("daily_summary")
        self.forecast_gate = LatestWins("forecast")
        self.insights_gate = LatestWins("insights")
        self.simulation_gate = LatestWins("simulation")

        self.simulation_debouncer: Debouncer[SliderValues] = Debouncer(
            debounce_seconds if debounce_seconds is not None else settings.simulation_debounce_seconds,
            lambda _: self._refresh_simulation(),
        )
        self._debouncers.append(self.simulation_debouncer)

        sliders = SliderValues(
            inflow_delta=settings.default_inflow_delta,
            outflow_delta=settings.default_outflow_delta,
            horizon_days=settings.default_horizon_days,
        )
        self._state = self._derive(DashboardState(account_code=branch_store.current, sliders=sliders))
        self._unsubscribe_branch = None

    @property
    def state(self) -> DashboardState:
        return self._state

    def start(self) -> None:
        """Follow the branch store and load every feed for the current branch"""
        if self._unsubscribe_branch is None:
            self._unsubscribe_branch = self.branch_store.subscribe(self._on_branch)
        self._on_branch(self.branch_store.current)

    async def close(self) -> None:
        if self._unsubscribe_branch is not None:
            self._unsubscribe_branch()
            self._unsubscribe_branch = None
        await super().close()

    def set_branch(self, code: str) -> None:
        self.branch_store.set_branch(code)

    def set_sliders(
        self,
        inflow_delta: float | None = None,
        outflow_delta: float | None = None,
        horizon_days: int | None = None,
    ) -> SliderValues:
        """
        Apply slider edits.

        A horizon change refetches the forecast right away; the simulation
        waits for the debounce window.
        """
        current = self._state.sliders
        sliders = SliderValues(
            inflow_delta=current.inflow_delta if inflow_delta is None else inflow_delta,
            outflow_delta=current.outflow_delta if outflow_delta is None else outflow_delta,
            horizon_days=horizon_days or current.horizon_days,
        )
        self._state = replace(self._state, sliders=sliders)
        self._publish()

        if sliders.horizon_days != current.horizon_days:
            self._refresh_forecast()
        self.simulation_debouncer.push(sliders)
        return sliders

    def _on_branch(self, code: str) -> None:
        self._state = replace(self._state, account_code=code)
        self._publish()
        logger.info("Loading dashboard feeds", extra={"account_code": code})

        self._refresh_transactions()
        self._refresh_summary()
        self._refresh_forecast()
        self._refresh_insights()
        self._refresh_simulation()

    def _refresh_transactions(self) -> None:
        code = self._state.account_code

        async def fetch() -> List[Transaction]:
            page = await self._guarded(
                "transactions",
                self.api.fetch_transactions(code, self.page_size),
                PagedTransactions(items=[]),
            )
            return page.items

        self._launch(self.transactions_gate, fetch, lambda items: self._commit(transactions=items), [])

    def _refresh_summary(self) -> None:
        code = self._state.account_code
        self._launch(
            self.summary_gate,
            lambda: self._guarded("daily_summary", self.api.fetch_daily_summary(code), []),
            lambda summaries: self._commit(daily_summaries=summaries),
            [],
        )

    def _refresh_forecast(self) -> None:
        code = self._state.account_code
        horizon = self._state.sliders.horizon_days
        self._launch(
            self.forecast_gate,
            lambda: self._guarded("forecast", self.api.fetch_forecast(code, horizon), None),
            lambda forecast: self._commit(forecast=forecast),
            None,
        )

    def _refresh_insights(self) -> None:
        code = self._state.account_code
        self._launch(
            self.insights_gate,
            lambda: self._guarded("insights", self.api.fetch_insights(code), InsightFeed(account_code=code)),
            lambda feed: self._commit(feed=feed),
            InsightFeed(account_code=code),
        )

    def _refresh_simulation(self) -> None:
        sliders = self._state.sliders
        selection = SimulationSelection(
            account_code=self._state.account_code,
            inflow_adjustment_percent=sliders.inflow_delta,
            outflow_adjustment_percent=sliders.outflow_delta,
            horizon_days=sliders.horizon_days,
        )
        self._launch(
            self.simulation_gate,
            lambda: self._guarded("simulation", self.api.run_what_if_simulation(selection), []),
            lambda results: self._commit(simulation=simulation_state_from_results(results)),
            [],
        )

    def _commit(self, **changes) -> None:
        self._state = self._derive(replace(self._state, **changes))

    @staticmethod
    def _derive(state: DashboardState) -> DashboardState:
        """Recompute KPI tiles, then drivers, then chart geometry"""
        points = state.forecast.points if state.forecast else []
        return replace(
            state,
            metrics=compute_summary_metrics(state.transactions, state.forecast, state.daily_summaries),
            drivers=compute_driver_breakdown(state.transactions),
            chart_path=build_line_path(points),
            band_path=build_band_path(points),
        )
