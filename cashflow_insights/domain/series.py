"""Conversion of cashflow API records into domain series

Payloads use the API's camelCase field names. Parsers raise KeyError,
ValueError or TypeError on malformed records; the API client wraps those
into CashflowAPIError.
"""

from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from cashflow_insights.domain.models import (
    DailySummary,
    ForecastPoint,
    ForecastSeries,
    PagedTransactions,
    SimulationResult,
    Transaction,
)


def parse_date(value: Any) -> date:
    """Accept plain dates or ISO datetimes ("2024-03-01T00:00:00")"""
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _first_present(record: Dict[str, Any], *keys: str) -> Optional[float]:
    # Reporting-currency (ZAR) fields win over foreign-currency fields
    for key in keys:
        if record.get(key) is not None:
            return float(record[key])
    return None


def forecast_from_payload(payload: Dict[str, Any]) -> ForecastSeries:
    """Build a ForecastSeries with points sorted ascending by date"""
    points = sorted(
        (
            ForecastPoint(
                date=parse_date(point["date"]),
                projected=float(point["projectedBalance"]),
                low=float(point["confidenceLow"]),
                high=float(point["confidenceHigh"]),
            )
            for point in payload.get("points") or []
        ),
        key=lambda p: p.date,
    )
    forecast_start = payload.get("forecastStart")

    return ForecastSeries(
        account_code=payload["accountCode"],
        starting_balance=float(payload.get("startingBalance") or 0.0),
        horizon_days=int(payload["horizonDays"]),
        points=points,
        model_description=payload.get("modelDescription") or "",
        forecast_start=parse_date(forecast_start) if forecast_start else None,
    )


def transaction_from_payload(record: Dict[str, Any]) -> Transaction:
    return Transaction(
        date=parse_date(record["txnDate"]),
        account_code=record["accountCode"],
        category=record.get("category") or None,
        credit_amount=_first_present(record, "creditZar", "creditFc"),
        debit_amount=_first_present(record, "debitZar", "debitFc"),
        balance=_first_present(record, "balanceZar", "balanceFc"),
        description=record.get("description"),
        counterparty=record.get("counterparty"),
        reference=record.get("reference"),
        currency=record.get("currency") or "ZAR",
    )


def paged_transactions_from_payload(payload: Dict[str, Any]) -> PagedTransactions:
    items = [transaction_from_payload(record) for record in payload.get("items") or []]
    return PagedTransactions(
        items=items,
        page_number=int(payload.get("pageNumber", 1)),
        page_size=int(payload.get("pageSize", len(items))),
        total_count=int(payload.get("totalCount", len(items))),
    )


def daily_summaries_from_payload(records: Iterable[Dict[str, Any]]) -> List[DailySummary]:
    return [
        DailySummary(
            date=parse_date(record["date"]),
            account_code=record["accountCode"],
            total_credits=float(record["totalCredits"]),
            total_debits=float(record["totalDebits"]),
            net_flow=float(record["netFlow"]),
        )
        for record in records
    ]


def simulation_results_from_payload(records: Iterable[Dict[str, Any]]) -> List[SimulationResult]:
    return [
        SimulationResult(
            adjusted_inflow=float(record["adjustedInflow"]),
            adjusted_outflow=float(record["adjustedOutflow"]),
            projected_balance=float(record["projectedBalance"]),
            narrative=record.get("narrative") or "",
        )
        for record in records
    ]
