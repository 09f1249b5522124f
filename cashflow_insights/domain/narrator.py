"""Narrative insight cards for branch comparisons

Two narrative strategies rotate across comparisons: "trajectory" (growth gap
and volatility) and "efficiency" (average balance and stability). The
narrator moves to the next strategy each time the selected branch pair
changes, so repeated comparisons of the same pair read differently without
keeping per-pair history.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from cashflow_insights.domain.models import (
    BranchSelection,
    ComparisonContext,
    InsightCard,
    InsightMetric,
    SeriesStats,
)
from cashflow_insights.utils.formatting import format_currency, format_percent

logger = logging.getLogger(__name__)

ScenarioStrategy = Callable[[ComparisonContext], List[InsightCard]]


def _more_volatile(context: ComparisonContext) -> Tuple[SeriesStats, SeriesStats]:
    """(more volatile, steadier); ties go to the primary branch"""
    if context.primary.swing >= context.secondary.swing:
        return context.primary, context.secondary
    return context.secondary, context.primary


def _higher_average(context: ComparisonContext) -> Tuple[SeriesStats, SeriesStats]:
    if context.primary.average >= context.secondary.average:
        return context.primary, context.secondary
    return context.secondary, context.primary


def _metric(label: str, context: ComparisonContext, formatter: Callable[[float], str], attr: str) -> InsightMetric:
    return InsightMetric(
        label=label,
        primary_value=formatter(getattr(context.primary, attr)),
        secondary_value=formatter(getattr(context.secondary, attr)),
    )


def trajectory_insights(context: ComparisonContext) -> List[InsightCard]:
    """Growth gap between the branches, then which branch swings harder"""
    leading, lagging = context.leading, context.lagging
    volatile, steady = _more_volatile(context)
    horizon = context.selection.horizon_days
    gap = format_currency(context.projected_gap)

    return [
        InsightCard(
            title="Balance trajectory gap",
            badge_kind="Momentum",
            summary=(
                f"{leading.code} is projected to grow {format_percent(leading.growth)} over "
                f"{horizon} days versus {format_percent(lagging.growth)} at {lagging.code}, "
                f"finishing {gap} ahead."
            ),
            recommendation=(
                f"Accelerate collections at {lagging.code} to close the {gap} gap "
                f"before the {horizon}-day horizon."
            ),
            focus_branch_code=lagging.code,
            metrics=[
                _metric("Growth", context, format_percent, "growth"),
                _metric("Projected close", context, format_currency, "final"),
            ],
        ),
        InsightCard(
            title="Volatility watch",
            badge_kind="Action",
            summary=(
                f"{volatile.code} swings {format_percent(volatile.swing)} around its average balance "
                f"compared with {format_percent(steady.swing)} at {steady.code}."
            ),
            recommendation=(
                f"Stagger supplier payouts at {volatile.code} so large debits do not "
                f"land in the same week."
            ),
            focus_branch_code=volatile.code,
            metrics=[_metric("Swing", context, format_percent, "swing")],
        ),
    ]


def efficiency_insights(context: ComparisonContext) -> List[InsightCard]:
    """Average balance productivity, then stability levers"""
    richer, thinner = _higher_average(context)
    volatile, steady = _more_volatile(context)

    return [
        InsightCard(
            title="Cash productivity",
            badge_kind="Momentum",
            summary=(
                f"{richer.code} carries an average projected balance of {format_currency(richer.average)} "
                f"against {format_currency(thinner.average)} at {thinner.code}; "
                f"{context.leading.code} leads at close by {format_currency(context.projected_gap)}."
            ),
            recommendation=(
                f"Broaden inflow channels at {thinner.code} (card, EFT and ecommerce settlements) "
                f"to lift its average balance."
            ),
            focus_branch_code=thinner.code,
            metrics=[
                _metric("Average balance", context, format_currency, "average"),
                _metric("Growth", context, format_percent, "growth"),
            ],
        ),
        InsightCard(
            title="Stability levers",
            badge_kind="Action",
            summary=(
                f"Projected balances at {volatile.code} vary by {format_percent(volatile.swing)} of their average, "
                f"while {steady.code} stays within {format_percent(steady.swing)}."
            ),
            recommendation=(
                f"Free liquidity at {volatile.code} by discounting outstanding receivables "
                f"ahead of the low points in the forecast."
            ),
            focus_branch_code=volatile.code,
            metrics=[_metric("Swing", context, format_percent, "swing")],
        ),
    ]


SCENARIOS: Dict[str, ScenarioStrategy] = {
    "trajectory": trajectory_insights,
    "efficiency": efficiency_insights,
}
SCENARIO_ORDER: Tuple[str, ...] = ("trajectory", "efficiency")


class InsightNarrator:
    """
    Scenario selector with one piece of state: the scenario index.

    Transition rule: the index advances by one (wrapping around) when the
    observed (primary, secondary) pair differs from the previous one. The
    first observed pair only sets the baseline.
    """

    def __init__(self, scenario_order: Tuple[str, ...] = SCENARIO_ORDER):
        self.scenario_order = scenario_order
        self.scenario_index = 0
        self._last_pair: Optional[Tuple[str, str]] = None

    @property
    def scenario(self) -> str:
        return self.scenario_order[self.scenario_index]

    def observe(self, selection: BranchSelection) -> bool:
        """Record a selection; returns True when the scenario advanced"""
        pair = selection.branch_codes
        previous, self._last_pair = self._last_pair, pair
        if previous is None or previous == pair:
            return False

        self.scenario_index = (self.scenario_index + 1) % len(self.scenario_order)
        logger.debug(
            "Insight scenario advanced",
            extra={"scenario": self.scenario, "primary": pair[0], "secondary": pair[1]},
        )
        return True

    def narrate(self, context: Optional[ComparisonContext]) -> List[InsightCard]:
        if context is None:
            return []
        return SCENARIOS[self.scenario](context)
