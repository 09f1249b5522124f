"""Pytest fixtures for testing"""

import asyncio
import pytest
from dataclasses import replace
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from cashflow_insights.domain.exceptions import CashflowAPIError
from cashflow_insights.domain.models import (
    DailySummary,
    ForecastPoint,
    ForecastSeries,
    InsightFeed,
    PagedTransactions,
    SimulationResult,
    SimulationSelection,
    Transaction,
)


def make_series(
    code: str,
    projections: Sequence[float],
    starting_balance: Optional[float] = None,
    start: date = date(2024, 3, 1),
) -> ForecastSeries:
    """Forecast with a +/-5% confidence band around each projection"""
    points = [
        ForecastPoint(
            date=start + timedelta(days=i),
            projected=value,
            low=value * 0.95,
            high=value * 1.05,
        )
        for i, value in enumerate(projections)
    ]
    if starting_balance is None:
        starting_balance = projections[0] if projections else 0.0
    return ForecastSeries(
        account_code=code,
        starting_balance=starting_balance,
        horizon_days=len(points),
        points=points,
        model_description="Holt-Winters",
    )


async def eventually(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Yield to the event loop until predicate holds"""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)


class FakeCashflowAPI:
    """In-memory stand-in for CashflowAPIClient with controllable latency and failures"""

    def __init__(self) -> None:
        self.forecasts: Dict[str, ForecastSeries] = {}
        self.transactions: Dict[str, List[Transaction]] = {}
        self.summaries: Dict[str, List[DailySummary]] = {}
        self.feeds: Dict[str, InsightFeed] = {}
        self.simulations: List[SimulationResult] = []
        self.failing: Set[str] = set()  # call names or branch codes
        self.gates: Dict[str, asyncio.Event] = {}
        self.calls: List[Tuple] = []

    def hold(self, code: str) -> asyncio.Event:
        """Block every call for `code` until the returned event is set"""
        event = asyncio.Event()
        self.gates[code] = event
        return event

    async def _enter(self, call: str, code: str) -> None:
        gate = self.gates.get(code)
        if gate is not None:
            await gate.wait()
        if call in self.failing or code in self.failing:
            raise CashflowAPIError(f"{call} unavailable for {code}")

    async def fetch_forecast(self, account_code: str, horizon_days: int) -> ForecastSeries:
        self.calls.append(("forecast", account_code, horizon_days))
        await self._enter("forecast", account_code)
        if account_code not in self.forecasts:
            raise CashflowAPIError("Cashflow API error: 404 (forecast)")
        return replace(self.forecasts[account_code], horizon_days=horizon_days)

    async def fetch_transactions(self, account_code: str, page_size: int = 50) -> PagedTransactions:
        self.calls.append(("transactions", account_code, page_size))
        await self._enter("transactions", account_code)
        items = self.transactions.get(account_code, [])
        return PagedTransactions(items=items, page_size=page_size, total_count=len(items))

    async def fetch_daily_summary(self, account_code: str) -> List[DailySummary]:
        self.calls.append(("daily_summary", account_code))
        await self._enter("daily_summary", account_code)
        return self.summaries.get(account_code, [])

    async def fetch_insights(self, account_code: str) -> InsightFeed:
        self.calls.append(("insights", account_code))
        await self._enter("insights", account_code)
        return self.feeds.get(account_code, InsightFeed(account_code=account_code))

    async def run_what_if_simulation(self, selection: SimulationSelection) -> List[SimulationResult]:
        self.calls.append(("simulation", selection))
        await self._enter("simulation", selection.account_code)
        return list(self.simulations)

    def count(self, call: str) -> int:
        return sum(1 for c in self.calls if c[0] == call)


@pytest.fixture
def fake_api() -> FakeCashflowAPI:
    """Fake API seeded with forecasts for JHB01, DBN01, CPT01 and PTA01"""
    api = FakeCashflowAPI()
    api.forecasts["JHB01"] = make_series("JHB01", [100_000, 105_000, 112_000, 120_000])
    api.forecasts["DBN01"] = make_series("DBN01", [100_000, 97_000, 95_000, 90_000])
    api.forecasts["CPT01"] = make_series("CPT01", [50_000, 55_000, 60_000])
    api.forecasts["PTA01"] = make_series("PTA01", [80_000, 70_000, 75_000])
    return api


@pytest.fixture
def sample_transactions() -> List[Transaction]:
    """Most-recent-first transactions across three categories"""
    base_date = date(2024, 3, 10)
    return [
        Transaction(
            date=base_date,
            account_code="JHB01",
            category="POS Settlements",
            credit_amount=6000.0,
            balance=250_000.0,
        ),
        Transaction(
            date=base_date - timedelta(days=1),
            account_code="JHB01",
            category="Payroll",
            debit_amount=3000.0,
            balance=244_000.0,
        ),
        Transaction(
            date=base_date - timedelta(days=2),
            account_code="JHB01",
            category="POS Settlements",
            credit_amount=2000.0,
            balance=247_000.0,
        ),
        Transaction(
            date=base_date - timedelta(days=3),
            account_code="JHB01",
            category=None,
            debit_amount=1000.0,
            balance=245_000.0,
        ),
    ]


@pytest.fixture
def sample_summaries() -> List[DailySummary]:
    """Most-recent-first daily summaries averaging 2 000 in debits"""
    base_date = date(2024, 3, 10)
    return [
        DailySummary(date=base_date, account_code="JHB01", total_credits=6000, total_debits=1000, net_flow=5000),
        DailySummary(date=base_date - timedelta(days=1), account_code="JHB01", total_credits=0, total_debits=3000, net_flow=-3000),
    ]
