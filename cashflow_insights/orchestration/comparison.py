"""Branch comparison pipeline

Selection edits are republished immediately, debounced, then both branch
forecasts are fetched concurrently. Once a cycle commits, geometry, the
comparison context and the narrative cards are derived in that order.
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from cashflow_insights.config import settings
from cashflow_insights.domain.comparison import analyze_comparison
from cashflow_insights.domain.geometry import build_balance_share, build_comparison_paths
from cashflow_insights.domain.models import (
    BalanceShare,
    BranchSelection,
    ComparisonContext,
    ForecastSeries,
    InsightCard,
)
from cashflow_insights.domain.narrator import InsightNarrator
from cashflow_insights.infrastructure.clients.cashflow_api import CashflowAPIClient
from cashflow_insights.orchestration.streams import Debouncer, LatestWins, StreamOrchestrator

logger = logging.getLogger(__name__)

ForecastPair = Tuple[Optional[ForecastSeries], Optional[ForecastSeries]]


@dataclass(frozen=True)
class ComparisonState:
    """Everything the comparison view renders"""

    selection: BranchSelection
    primary: Optional[ForecastSeries] = None
    secondary: Optional[ForecastSeries] = None
    chart_paths: Optional[Tuple[str, str]] = None
    balance_share: List[BalanceShare] = field(default_factory=list)
    context: Optional[ComparisonContext] = None
    insights: List[InsightCard] = field(default_factory=list)
    scenario: str = "trajectory"
    is_loading: bool = False


class ComparisonOrchestrator(StreamOrchestrator[ComparisonState]):
    """Drives forecast fetches and derivations for a pair of branches"""

    def __init__(
        self,
        api: CashflowAPIClient,
        narrator: InsightNarrator | None = None,
        debounce_seconds: float | None = None,
        initial: BranchSelection | None = None,
    ):
        super().__init__()
        self.api = api
        self.narrator = narrator or InsightNarrator()
        self.gate = LatestWins("comparison")
        self.debouncer: Debouncer[BranchSelection] = Debouncer(
            debounce_seconds if debounce_seconds is not None else settings.comparison_debounce_seconds,
            self._start_cycle,
        )
        self._debouncers.append(self.debouncer)

        selection = initial or BranchSelection(
            primary_code=settings.default_branch,
            secondary_code=settings.default_secondary_branch,
            horizon_days=settings.default_horizon_days,
        )
        self._state = ComparisonState(selection=selection, scenario=self.narrator.scenario)

    @property
    def state(self) -> ComparisonState:
        return self._state

    def start(self) -> None:
        """Push the initial selection through the pipeline"""
        self.select(
            self._state.selection.primary_code,
            self._state.selection.secondary_code,
            self._state.selection.horizon_days,
        )

    def select(self, primary: str | None, secondary: str | None, horizon_days: int | None = None) -> BranchSelection:
        """
        Apply a selection edit.

        The raw selection is published straight away; the fetch waits for
        the debounce window so that fast consecutive edits cost one cycle.
        """
        selection = BranchSelection(
            primary_code=(primary or "").strip(),
            secondary_code=(secondary or "").strip(),
            horizon_days=horizon_days or settings.default_horizon_days,
        )
        self._state = replace(self._state, selection=selection)
        self._publish()
        self.debouncer.push(selection)
        return selection

    def _start_cycle(self, selection: BranchSelection) -> None:
        if not selection.is_valid:
            # No branch to fetch: supersede any in-flight cycle and clear results
            generation = self.gate.begin()
            logger.info("Incomplete branch selection, skipping fetch", extra={"generation": generation})
            self._apply(selection, (None, None))
            self._publish()
            return

        self._state = replace(self._state, is_loading=True)
        self._publish()
        self._launch(
            self.gate,
            lambda: self._fetch_pair(selection),
            lambda pair: self._apply(selection, pair),
            (None, None),
        )

    async def _fetch_pair(self, selection: BranchSelection) -> ForecastPair:
        primary, secondary = await asyncio.gather(
            self._guarded("forecast", self.api.fetch_forecast(selection.primary_code, selection.horizon_days), None),
            self._guarded("forecast", self.api.fetch_forecast(selection.secondary_code, selection.horizon_days), None),
        )
        return primary, secondary

    def _apply(self, selection: BranchSelection, pair: ForecastPair) -> None:
        primary, secondary = pair

        chart_paths = build_comparison_paths(primary, secondary)
        balance_share = (
            build_balance_share(
                [
                    (selection.primary_code, primary.starting_balance),
                    (selection.secondary_code, secondary.starting_balance),
                ]
            )
            if primary is not None and secondary is not None
            else []
        )

        context = analyze_comparison(primary, secondary, selection)
        if selection.is_valid:
            self.narrator.observe(selection)
        insights = self.narrator.narrate(context)

        self._state = ComparisonState(
            selection=self._state.selection,
            primary=primary,
            secondary=secondary,
            chart_paths=chart_paths,
            balance_share=balance_share,
            context=context,
            insights=insights,
            scenario=self.narrator.scenario,
            is_loading=False,
        )
