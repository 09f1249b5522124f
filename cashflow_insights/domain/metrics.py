"""Summary KPIs and category drivers for the dashboard"""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from cashflow_insights.domain.models import (
    DailySummary,
    DriverBreakdown,
    ForecastSeries,
    SummaryMetric,
    Transaction,
)
from cashflow_insights.utils.formatting import format_currency, format_signed_currency

MAX_DRIVERS = 5
UNCATEGORIZED = "Uncategorized"

# Shown before any transactions load
FALLBACK_DRIVERS = [
    DriverBreakdown(label="POS Settlements", weight_percent=40),
    DriverBreakdown(label="Ecommerce payouts", weight_percent=30),
    DriverBreakdown(label="Seasonality uplift", weight_percent=20),
    DriverBreakdown(label="FX effects", weight_percent=10),
]


def compute_summary_metrics(
    transactions: Sequence[Transaction],
    forecast: Optional[ForecastSeries],
    daily_summaries: Sequence[DailySummary],
) -> List[SummaryMetric]:
    """
    Derive the four dashboard KPI tiles.

    Transactions and daily summaries arrive most recent first, so index 0
    is the latest record. Returns an empty list when there are neither
    transactions nor a forecast.

    Tiles, in order:
    - Current balance: latest balance, with the forecast lift
    - Projected: final projected balance over the horizon
    - Burn rate: average daily debits
    - Runway: starting balance / burn rate, in days
    """
    if not transactions and forecast is None:
        return []

    latest_balance = (transactions[0].balance if transactions else None) or 0.0
    projected = forecast.points[-1].projected if forecast and forecast.points else latest_balance
    forecast_lift = projected - latest_balance

    avg_debit = (
        sum(s.total_debits for s in daily_summaries) / len(daily_summaries)
        if daily_summaries
        else 0.0
    )
    net_flow = daily_summaries[0].net_flow if daily_summaries else 0.0

    starting_balance = forecast.starting_balance if forecast else latest_balance
    runway_days = round(starting_balance / avg_debit) if avg_debit > 0 else 0

    horizon = forecast.horizon_days if forecast else 14
    model = (forecast.model_description if forecast else "") or "Heuristic"

    return [
        SummaryMetric(
            label="Current balance",
            formatted_value=format_currency(latest_balance),
            change_description=f"{format_signed_currency(forecast_lift)} vs forecast",
            trend="up" if forecast_lift >= 0 else "down",
        ),
        SummaryMetric(
            label=f"Projected ({horizon}d)",
            formatted_value=format_currency(projected),
            change_description=f"Model: {model}",
            trend="up" if projected >= latest_balance else "down",
        ),
        SummaryMetric(
            label="Burn rate",
            formatted_value=format_currency(avg_debit),
            change_description="Avg daily outflows",
            trend="up" if avg_debit <= net_flow else "down",
        ),
        SummaryMetric(
            label="Runway",
            formatted_value=f"{runway_days} days",
            change_description="Positive net flow" if net_flow >= 0 else "Monitor dips",
            trend="up" if net_flow >= 0 else "down",
        ),
    ]


def compute_driver_breakdown(transactions: Sequence[Transaction]) -> List[DriverBreakdown]:
    """
    Rank categories by absolute net movement and express the top five as
    whole percentages of the total movement.
    """
    if not transactions:
        return list(FALLBACK_DRIVERS)

    totals: Dict[str, float] = defaultdict(float)
    for txn in transactions:
        key = txn.category or UNCATEGORIZED
        totals[key] += abs((txn.credit_amount or 0.0) - (txn.debit_amount or 0.0))

    total_value = sum(totals.values()) or 1.0
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)[:MAX_DRIVERS]

    return [
        DriverBreakdown(label=label, weight_percent=round(value / total_value * 100))
        for label, value in ranked
    ]
